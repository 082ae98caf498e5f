# Masal Makinesi - Core Domain

# Re-export types for convenient access
from .types import (
    StoryTheme,
    StoryLength,
    ErrorCode,
    Severity,
    GenerationRequest,
    GenerationResult,
    ValidationError,
    ValidationResult,
    SafetyVerdict,
    GenerationOutcome,
)

__all__ = [
    "StoryTheme",
    "StoryLength",
    "ErrorCode",
    "Severity",
    "GenerationRequest",
    "GenerationResult",
    "ValidationError",
    "ValidationResult",
    "SafetyVerdict",
    "GenerationOutcome",
]
