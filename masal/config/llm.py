"""
LLM configuration for the Masal Makinesi API.

Stories are generated by Google Gemini through the google-genai client.

Includes:
- Generation defaults (model, temperatures, output budget)
- Retry with exponential backoff for transient network errors
"""

import logging
import os

from dotenv import load_dotenv
from google import genai
from google.genai.errors import ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

# Load environment variables from .env file
load_dotenv()

# Logging for retry attempts
logger = logging.getLogger(__name__)

LLM_CONSTANTS = {
    "default_model": "gemini-2.5-flash",
    "temperature": 0.9,
    "retry_temperature": 0.7,  # lower temperature when asking again
    "max_output_tokens": 2048,
}

# Network errors that should trigger retry
RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    BrokenPipeError,
)


def is_retryable_error(error: BaseException) -> bool:
    """Network faults, Gemini 5xx and rate limiting (429) are worth retrying."""
    if isinstance(error, RETRYABLE_EXCEPTIONS + (ServerError,)):
        return True
    return isinstance(error, ClientError) and error.code == 429


def get_gemini_api_key() -> str:
    """Return the Gemini API key, or an empty string if none is configured."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""


def get_inference_model_name() -> str:
    """Get the name of the model used for story generation."""
    return os.getenv("GEMINI_MODEL", LLM_CONSTANTS["default_model"])


def get_gemini_client() -> genai.Client:
    """
    Get the Gemini client for story generation.

    Uses GEMINI_API_KEY (or GOOGLE_API_KEY) from environment.
    """
    api_key = get_gemini_api_key()
    if not api_key:
        raise ValueError("GEMINI_API_KEY environment variable is required. Set it in .env file.")

    return genai.Client(api_key=api_key)


# Retry decorator for LLM calls with transient errors
llm_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=2, min=2, max=10),
    retry=retry_if_exception(is_retryable_error),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
