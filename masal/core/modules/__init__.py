# Generation collaborators
from .gemini_generator import GeminiStoryGenerator, GenerationError, friendly_error_message

__all__ = [
    "GeminiStoryGenerator",
    "GenerationError",
    "friendly_error_message",
]
