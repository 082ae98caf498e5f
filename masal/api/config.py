"""API configuration constants.

Single source of truth for environment-driven settings used across the API layer.
"""

import os

from dotenv import find_dotenv, load_dotenv

# Load .env from project root (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

# Database (PostgreSQL connection string, asyncpg or SQLAlchemy style)
DATABASE_URL = os.getenv("DATABASE_URL", "")
DB_POOL_MIN_SIZE = 1
DB_POOL_MAX_SIZE = 5

# Server
PORT = int(os.getenv("PORT", "8000"))
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json or text

# CORS origins, comma separated
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def get_app_env() -> str:
    """Current deployment environment, read on every call."""
    return os.getenv("APP_ENV", "development")


def is_production() -> bool:
    return get_app_env() == "production"
