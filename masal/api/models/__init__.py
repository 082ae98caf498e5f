"""Pydantic models for API requests and responses."""

from .requests import CreateStoryRequest, TestTokenRequest, UpdateAudioRequest
from .responses import (
    AudioUpdateResponse,
    CreateStoryResponse,
    HealthChecks,
    HealthResponse,
    StoryDetailResponse,
    StoryListResponse,
    StoryMetadataResponse,
    StoryResponse,
    TestTokenResponse,
)

__all__ = [
    "CreateStoryRequest",
    "TestTokenRequest",
    "UpdateAudioRequest",
    "AudioUpdateResponse",
    "CreateStoryResponse",
    "HealthChecks",
    "HealthResponse",
    "StoryDetailResponse",
    "StoryListResponse",
    "StoryMetadataResponse",
    "StoryResponse",
    "TestTokenResponse",
]
