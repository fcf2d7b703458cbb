"""
Core scoring and collaborator clients.
"""
