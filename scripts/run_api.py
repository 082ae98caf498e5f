#!/usr/bin/env python3
"""Run the FastAPI server for the Masal Makinesi API."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from masal.api.config import LOG_FORMAT, PORT, is_production
from masal.api.logging import configure_logging


def main():
    """Run the API server."""
    configure_logging(json_format=LOG_FORMAT == "json", level=logging.INFO)
    uvicorn.run(
        "masal.api.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=not is_production(),  # auto-reload outside production
        log_config=None,  # keep our handlers
    )


if __name__ == "__main__":
    main()
