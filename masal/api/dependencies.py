"""FastAPI dependency injection for services and repositories."""

from functools import lru_cache
from typing import Annotated, AsyncGenerator, Optional

import asyncpg
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import get_inference_model_name
from ..core.modules.gemini_generator import GeminiStoryGenerator
from ..core.programs.story_generator import StoryGenerator
from .auth.tokens import verify_token
from .database.db import get_pool
from .database.repository import StoryRepository
from .services.story_service import StoryService

# Missing credentials are reported as 401 below, not HTTPBearer's default
security = HTTPBearer(auto_error=False)


# Connection dependency - one pooled connection per request
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire an asyncpg connection from the global pool."""
    pool = get_pool()
    async with pool.acquire() as conn:
        yield conn


# Repository - requires connection
def get_repository(
    conn: Annotated[asyncpg.Connection, Depends(get_connection)]
) -> StoryRepository:
    """Get a StoryRepository instance with injected connection."""
    return StoryRepository(conn)


@lru_cache
def get_story_generator() -> StoryGenerator:
    """Process-wide orchestrator around the Gemini collaborator."""
    model_name = get_inference_model_name()
    return StoryGenerator(GeminiStoryGenerator(model=model_name), model_name=model_name)


# Service - depends on repository and generator
def get_story_service(
    repo: Annotated[StoryRepository, Depends(get_repository)],
    generator: Annotated[StoryGenerator, Depends(get_story_generator)],
) -> StoryService:
    """Get a StoryService instance with injected collaborators."""
    return StoryService(repo, generator)


# Type aliases for cleaner route signatures
Repository = Annotated[StoryRepository, Depends(get_repository)]
Service = Annotated[StoryService, Depends(get_story_service)]


# Authentication dependency
async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> str:
    """Verify the bearer token and return the user id.

    Raises:
        HTTPException: 401 if token is missing, invalid or expired
    """
    payload = verify_token(credentials.credentials) if credentials else None
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload["sub"]


# Type alias for authenticated user
CurrentUser = Annotated[str, Depends(get_current_user)]
