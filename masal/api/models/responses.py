"""Pydantic models for API responses.

All responses serialize with camelCase keys (childName, wordCount, ...).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...core.types import StoryLength, StoryTheme


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoryResponse(CamelModel):
    """A stored story as returned to its owner."""

    id: str
    title: str
    content: str
    child_name: str
    theme: StoryTheme
    length: StoryLength
    word_count: int
    created_at: datetime
    audio_url: Optional[str] = None


class StoryMetadataResponse(CamelModel):
    """How a story was produced."""

    generation_time: int = 0  # milliseconds, end to end
    model: str
    safety_score: float
    language: str
    prompt_version: str
    attempts: int = 1


class CreateStoryResponse(CamelModel):
    success: bool = True
    story: StoryResponse
    metadata: StoryMetadataResponse


class StoryListResponse(CamelModel):
    success: bool = True
    stories: list[StoryResponse]
    count: int


class StoryDetailResponse(CamelModel):
    success: bool = True
    story: StoryResponse


class AudioUpdateResponse(CamelModel):
    success: bool = True
    id: str
    audio_url: str


class TestTokenResponse(CamelModel):
    """Development token plus the identity it encodes."""

    __test__ = False  # not a pytest test class

    success: bool = True
    token: str
    user_id: str
    email: str
    expires_in: str = "24h"
    note: str = "This is a development-only endpoint"


class HealthChecks(CamelModel):
    gemini: bool
    database: bool
    timestamp: datetime


class HealthResponse(CamelModel):
    success: bool
    status: str  # healthy or degraded
    checks: HealthChecks
