"""Services for story generation."""

from .story_service import (
    GenerationFailedError,
    InvalidRequestError,
    QuotaExceededError,
    StoryRequestError,
    StoryService,
    UnsafeInputError,
)

__all__ = [
    "StoryService",
    "StoryRequestError",
    "InvalidRequestError",
    "UnsafeInputError",
    "QuotaExceededError",
    "GenerationFailedError",
]
