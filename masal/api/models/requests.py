"""Pydantic models for API requests."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...core.types import StoryLength, StoryTheme


class CamelRequest(BaseModel):
    """Accepts camelCase wire keys and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateStoryRequest(CamelRequest):
    """Request body for generating a story.

    The route receives the raw JSON object and checks it with
    validate_user_request first, so a bad request yields a 400 with
    per-field details rather than FastAPI's 422.
    """

    child_name: str = Field(..., examples=["Ahmet"])
    age: int = Field(..., examples=[6])
    theme: StoryTheme
    length: StoryLength
    elements: list[str] = Field(default_factory=list, examples=[["kedi", "balon"]])


class UpdateAudioRequest(CamelRequest):
    """Request body for attaching narration audio to a story."""

    audio_url: str = Field(..., min_length=1, max_length=2048)


class TestTokenRequest(CamelRequest):
    """Request body for the development token endpoint."""

    __test__ = False  # not a pytest test class

    user_id: str = "test-user"
    email: str = "test@example.com"
