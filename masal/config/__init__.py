"""
Configuration module for the Masal Makinesi API.

Re-exports all configuration for convenient imports.
"""

from .llm import (
    LLM_CONSTANTS,
    get_gemini_api_key,
    get_gemini_client,
    get_inference_model_name,
    llm_retry,
)
from .story import SAFETY_PROBABILITY_SCORES, STORY_CONSTANTS

__all__ = [
    # LLM
    "LLM_CONSTANTS",
    "get_gemini_api_key",
    "get_gemini_client",
    "get_inference_model_name",
    "llm_retry",
    # Story
    "STORY_CONSTANTS",
    "SAFETY_PROBABILITY_SCORES",
]
