"""
LLM Module

Advisory text generation for scored assessments.
"""
from .gemini_client import GeminiClient, GeminiConfig, GeminiResponse
from .advisor import ClinicalAdvisor

__all__ = ["GeminiClient", "GeminiConfig", "GeminiResponse", "ClinicalAdvisor"]
