"""
Public Health Risk Engine

Linear risk scoring for public-health screening questionnaires.
"""
__version__ = "1.0.0"
