"""Story service: request checks, quota, generation and persistence."""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ...config import STORY_CONSTANTS
from ...core.guard import pre_check_user_input
from ...core.programs.story_generator import StoryGenerator
from ...core.types import ErrorCode, GenerationRequest
from ...core.validation import validate_user_request
from ..database.repository import StoryRepository
from ..logging import story_logger
from ..models.requests import CreateStoryRequest
from ..models.responses import CreateStoryResponse, StoryMetadataResponse, StoryResponse


class StoryRequestError(Exception):
    """A story request the service refuses, with the HTTP status to report."""

    status_code = 400

    def __init__(self, error: str, **extra: Any):
        super().__init__(error)
        self.error = error
        self.extra = extra

    def to_body(self) -> dict:
        return {"success": False, "error": self.error, **self.extra}


class InvalidRequestError(StoryRequestError):
    status_code = 400


class UnsafeInputError(StoryRequestError):
    status_code = 400


class QuotaExceededError(StoryRequestError):
    status_code = 429


class GenerationFailedError(StoryRequestError):
    status_code = 500


class StoryService:
    """Service for generating and storing stories on behalf of a user."""

    def __init__(self, repo: StoryRepository, generator: StoryGenerator):
        self.repo = repo
        self.generator = generator

    def parse_request(self, payload: Mapping[str, Any]) -> CreateStoryRequest:
        """Validate a raw request body.

        Raises:
            InvalidRequestError: with per-field details
        """
        errors = validate_user_request(payload)
        if errors:
            raise InvalidRequestError("Invalid request", details=[e.to_dict() for e in errors])

        try:
            return CreateStoryRequest.model_validate(payload)
        except PydanticValidationError as exc:
            details = [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "message": err["msg"],
                    "code": ErrorCode.SCHEMA_VALIDATION_ERROR.value,
                }
                for err in exc.errors()
            ]
            raise InvalidRequestError("Invalid request", details=details) from exc

    async def create_story(self, user_id: str, payload: Mapping[str, Any]) -> CreateStoryResponse:
        """
        Generate, store and return a story for the user.

        Steps run in order and stop at the first refusal: request
        validation, input safety, daily quota, generation, persistence.

        Raises:
            StoryRequestError: subclass matching the refusal
            DatabaseError: if the quota lookup or insert fails
        """
        start_time = time.time()
        request = self.parse_request(payload)

        verdict = pre_check_user_input(f"{request.child_name} {' '.join(request.elements)}")
        if not verdict.safe:
            story_logger.input_rejected(user_id, verdict.categories)
            raise UnsafeInputError("Input contains inappropriate content", categories=verdict.categories)

        count = await self.repo.count_recent_stories(user_id, hours=STORY_CONSTANTS["quota_window_hours"])
        if count >= STORY_CONSTANTS["daily_story_limit"]:
            story_logger.quota_exceeded(user_id, count)
            raise QuotaExceededError("Daily story limit reached")

        story_logger.generation_started(user_id, request.theme.value, request.length.value)
        generation_request = GenerationRequest(
            child_name=request.child_name,
            age=request.age,
            theme=request.theme,
            length=request.length,
            elements=request.elements,
        )
        # Generation blocks on network I/O; keep it off the event loop
        outcome = await asyncio.to_thread(self.generator.generate, generation_request)

        for attempt, reason in enumerate(outcome.attempt_errors, start=1):
            story_logger.attempt_failed(user_id, attempt, reason)

        if not outcome.success:
            story_logger.generation_failed(user_id, outcome.error, time.time() - start_time)
            raise GenerationFailedError(outcome.error)

        result = outcome.story
        story = StoryResponse(
            id=str(uuid.uuid4()),
            title=result.title,
            content=result.content,
            child_name=request.child_name,
            theme=request.theme,
            length=request.length,
            word_count=result.word_count,
            created_at=datetime.now(timezone.utc),
        )
        metadata = StoryMetadataResponse(
            model=outcome.metadata.model,
            safety_score=outcome.metadata.safety_score,
            language=outcome.metadata.language,
            prompt_version=outcome.metadata.prompt_version,
            attempts=outcome.metadata.attempts,
            generation_time=int((time.time() - start_time) * 1000),
        )

        await self.repo.store_story(story, user_id, metadata)

        duration = time.time() - start_time
        story_logger.generation_completed(user_id, story.id, duration, outcome.attempts)

        return CreateStoryResponse(story=story, metadata=metadata)
