"""Pytest configuration for live Gemini tests."""

import pytest
from dotenv import load_dotenv

from masal.config import get_gemini_api_key

# Load environment variables
load_dotenv()


@pytest.fixture(scope="session")
def gemini_api_available():
    """Check if a Gemini API key is configured."""
    return bool(get_gemini_api_key())


@pytest.fixture(autouse=True)
def skip_if_no_gemini_api(request, gemini_api_available):
    """Skip tests marked with requires_gemini_api if key not set."""
    if request.node.get_closest_marker("requires_gemini_api"):
        if not gemini_api_available:
            pytest.skip("GEMINI_API_KEY not set")
