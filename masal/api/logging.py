"""Structured logging infrastructure for the API layer.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a StoryLogger helper for story generation events.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Extra fields copied into JSON log lines when present on a record
EXTRA_FIELDS = (
    "user_id",
    "story_id",
    "stage",
    "duration",
    "attempt",
    "error_type",
    "theme",
    "length",
    "categories",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


class StoryLogger:
    """Logger for story generation events with structured fields."""

    def __init__(self):
        self.logger = logging.getLogger("story_generation")

    def generation_started(self, user_id: str, theme: str, length: str) -> None:
        self.logger.info(
            "Story generation started",
            extra={"user_id": user_id, "stage": "started", "theme": theme, "length": length},
        )

    def attempt_failed(self, user_id: str, attempt: int, reason: str) -> None:
        self.logger.warning(
            f"Generation attempt {attempt} failed: {reason}",
            extra={"user_id": user_id, "stage": "attempt_failed", "attempt": attempt},
        )

    def generation_completed(self, user_id: str, story_id: str, duration: float, attempts: int) -> None:
        self.logger.info(
            "Story generation completed",
            extra={
                "user_id": user_id,
                "story_id": story_id,
                "stage": "completed",
                "duration": round(duration, 2),
                "attempt": attempts,
            },
        )

    def generation_failed(self, user_id: str, error: str, duration: float) -> None:
        self.logger.error(
            f"Story generation failed: {error}",
            extra={"user_id": user_id, "stage": "failed", "duration": round(duration, 2)},
        )

    def input_rejected(self, user_id: str, categories: list[str]) -> None:
        self.logger.warning(
            "Story request rejected by input safety check",
            extra={"user_id": user_id, "stage": "input_rejected", "categories": categories},
        )

    def quota_exceeded(self, user_id: str, count: int) -> None:
        self.logger.warning(
            f"Daily story limit reached ({count} stories)",
            extra={"user_id": user_id, "stage": "quota_exceeded"},
        )


# Global story logger instance
story_logger = StoryLogger()
