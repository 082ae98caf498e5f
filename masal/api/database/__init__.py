"""Database module for story persistence."""

from .db import Base, close_pool, create_pool, engine, get_pool, has_pool, init_db, set_pool
from .models import Story
from .repository import DatabaseError, StoryRepository

__all__ = [
    # Connection management
    "init_db",
    "create_pool",
    "set_pool",
    "get_pool",
    "has_pool",
    "close_pool",
    "engine",
    "Base",
    # Models
    "Story",
    # Repositories
    "StoryRepository",
    "DatabaseError",
]
