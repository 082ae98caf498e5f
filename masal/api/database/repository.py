"""Repository for story persistence using raw asyncpg SQL."""

import functools
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import asyncpg

from ..models.responses import StoryMetadataResponse, StoryResponse

logger = logging.getLogger(__name__)

# Driver-level failures wrapped as DatabaseError
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class DatabaseError(Exception):
    """A persistence operation failed."""


def wrap_db_errors(method):
    """Re-raise driver errors from a repository coroutine as DatabaseError."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except DB_ERRORS as e:
            logger.error("%s failed: %s", method.__name__, e)
            raise DatabaseError(f"Database operation failed: {e}") from e

    return wrapper


class StoryRepository:
    """Repository for story persistence operations.

    Every read and write is scoped to the owning user.
    """

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    @wrap_db_errors
    async def store_story(
        self,
        story: StoryResponse,
        user_id: str,
        metadata: StoryMetadataResponse,
    ) -> None:
        """Insert a generated story with its generation metadata."""
        await self.conn.execute(
            """
            INSERT INTO stories (
                id, user_id, title, content, child_name, theme, length,
                word_count, metadata_json, audio_url, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            """,
            story.id,
            user_id,
            story.title,
            story.content,
            story.child_name,
            story.theme.value,
            story.length.value,
            story.word_count,
            metadata.model_dump_json(by_alias=True),
            story.audio_url,
            story.created_at,
        )

    @wrap_db_errors
    async def list_user_stories(self, user_id: str, limit: int = 10) -> list[StoryResponse]:
        """List a user's stories, newest first."""
        rows = await self.conn.fetch(
            """
            SELECT * FROM stories
            WHERE user_id = $1
            ORDER BY created_at DESC
            LIMIT $2
            """,
            user_id,
            limit,
        )
        return [self._record_to_response(row) for row in rows]

    @wrap_db_errors
    async def get_story(self, story_id: str, user_id: str) -> Optional[StoryResponse]:
        """Get one of the user's stories, or None if absent or not theirs."""
        row = await self.conn.fetchrow(
            "SELECT * FROM stories WHERE id = $1 AND user_id = $2",
            story_id,
            user_id,
        )
        if not row:
            return None
        return self._record_to_response(row)

    @wrap_db_errors
    async def update_story_audio(self, story_id: str, user_id: str, audio_url: str) -> bool:
        """Set the audio URL. Returns False when no story of the user's matched."""
        result = await self.conn.execute(
            "UPDATE stories SET audio_url = $3 WHERE id = $1 AND user_id = $2",
            story_id,
            user_id,
            audio_url,
        )
        # Result is like "UPDATE 1" or "UPDATE 0"
        return result.split()[-1] != "0"

    @wrap_db_errors
    async def count_recent_stories(self, user_id: str, hours: int = 24) -> int:
        """Count the user's stories created within the last `hours`."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)
        count = await self.conn.fetchval(
            "SELECT COUNT(*) FROM stories WHERE user_id = $1 AND created_at >= $2",
            user_id,
            cutoff,
        )
        return count or 0

    async def health_check(self) -> bool:
        """True if the stories table is reachable."""
        try:
            await self.conn.fetchval("SELECT 1 FROM stories LIMIT 1")
            return True
        except DB_ERRORS as e:
            logger.warning("Database health check failed: %s", e)
            return False

    def _record_to_response(self, row: asyncpg.Record) -> StoryResponse:
        """Convert asyncpg Record to response model."""
        return StoryResponse(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            child_name=row["child_name"],
            theme=row["theme"],
            length=row["length"],
            word_count=row["word_count"],
            created_at=row["created_at"],
            audio_url=row["audio_url"],
        )
