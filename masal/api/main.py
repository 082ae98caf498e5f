"""FastAPI application for the Masal Makinesi story API."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import get_gemini_api_key
from .auth.routes import router as auth_router
from .config import CORS_ORIGINS, DATABASE_URL
from .database.db import close_pool, create_pool, get_pool, has_pool, init_db
from .database.repository import DB_ERRORS, DatabaseError, StoryRepository
from .models.responses import HealthChecks, HealthResponse
from .routes import stories
from .services.story_service import StoryRequestError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Startup: schema and pool (only if DATABASE_URL is configured)
    if DATABASE_URL:
        await init_db()
        await create_pool(DATABASE_URL)
        logger.info("Database initialized")
    else:
        logger.warning("DATABASE_URL not set - database not initialized")

    yield

    await close_pool()


app = FastAPI(
    title="Masal Makinesi API",
    description="""
Generate personalized, child-safe Turkish stories.

## Features
- **Input safety**: child names and story elements are screened before generation
- **Validated output**: every generated story passes schema, safety, length and language checks
- **Retry**: a fixable failure is retried once with the error fed back to the model

## Workflow
1. POST `/api/test-token` (development) or obtain a token from your identity provider
2. POST `/api/story` with `childName`, `age`, `theme`, `length` and optional `elements`
3. GET `/api/stories` to list previously generated stories
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for the mobile and web clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoryRequestError)
async def story_request_error_handler(request: Request, exc: StoryRequestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("Database error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


# Include routers
app.include_router(auth_router)  # No prefix - already has /api
app.include_router(stories.router, prefix="/api", tags=["Stories"])


async def database_healthy() -> bool:
    if not has_pool():
        return False
    try:
        async with get_pool().acquire() as conn:
            return await StoryRepository(conn).health_check()
    except DB_ERRORS as e:
        logger.warning("Could not acquire database connection: %s", e)
        return False


@app.get("/api/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Report whether Gemini and the database are configured and reachable."""
    checks = HealthChecks(
        gemini=bool(get_gemini_api_key()),
        database=await database_healthy(),
        timestamp=datetime.now(timezone.utc),
    )
    healthy = checks.gemini and checks.database
    body = HealthResponse(success=healthy, status="healthy" if healthy else "degraded", checks=checks)

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json", by_alias=True),
    )
