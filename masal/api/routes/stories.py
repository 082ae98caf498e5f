"""Story generation and retrieval endpoints."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query, status

from ..dependencies import CurrentUser, Repository, Service
from ..models.requests import UpdateAudioRequest
from ..models.responses import (
    AudioUpdateResponse,
    CreateStoryResponse,
    StoryDetailResponse,
    StoryListResponse,
)

router = APIRouter()


@router.post(
    "/story",
    response_model=CreateStoryResponse,
    summary="Generate a story",
    description=(
        "Generate a personalized Turkish story for a child. The request is validated "
        "and safety-checked, the caller's daily quota is enforced, and the generated "
        "story is checked before it is stored and returned."
    ),
    responses={
        400: {"description": "Invalid or unsafe request"},
        401: {"description": "Missing or invalid token"},
        429: {"description": "Daily story limit reached"},
        500: {"description": "Generation failed"},
    },
)
async def create_story(
    user_id: CurrentUser,
    service: Service,
    payload: dict[str, Any] = Body(..., examples=[{"childName": "Ahmet", "age": 6, "theme": "animals", "length": "short"}]),
):
    """Generate, store and return a story."""
    return await service.create_story(user_id, payload)


@router.get(
    "/stories",
    response_model=StoryListResponse,
    summary="List my stories",
    description="Get the caller's stories, newest first.",
)
async def list_stories(
    user_id: CurrentUser,
    repo: Repository,
    limit: int = Query(default=10, ge=1, le=50, description="Maximum number of stories to return"),
):
    """List the caller's stories."""
    stories = await repo.list_user_stories(user_id, limit=limit)
    return StoryListResponse(stories=stories, count=len(stories))


@router.get(
    "/stories/{story_id}",
    response_model=StoryDetailResponse,
    summary="Get a story",
)
async def get_story(story_id: str, user_id: CurrentUser, repo: Repository):
    """Get one of the caller's stories by ID."""
    story = await repo.get_story(story_id, user_id)

    if not story:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Story {story_id} not found",
        )

    return StoryDetailResponse(story=story)


@router.put(
    "/stories/{story_id}/audio",
    response_model=AudioUpdateResponse,
    summary="Attach narration audio",
)
async def update_story_audio(
    story_id: str,
    request: UpdateAudioRequest,
    user_id: CurrentUser,
    repo: Repository,
):
    """Set the audio URL on one of the caller's stories."""
    updated = await repo.update_story_audio(story_id, user_id, request.audio_url)

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Story {story_id} not found",
        )

    return AudioUpdateResponse(id=story_id, audio_url=request.audio_url)
