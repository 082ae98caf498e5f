"""
Gemini generation collaborator.

Sends a rendered prompt to Gemini and returns the raw reply text plus the
first candidate's safety ratings. Transient network errors are retried with
the shared llm_retry policy; everything else surfaces as GenerationError
with a message the caller can show.
"""

from enum import Enum
from typing import Optional

from google import genai
from google.genai import types

from ...config import LLM_CONSTANTS, get_gemini_client, get_inference_model_name, llm_retry
from ..types import GenerationOutput

# Harm categories filtered by Gemini itself, before our own guard runs
SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


class GenerationError(Exception):
    """The generation collaborator failed to produce text."""


def _enum_value(value) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def friendly_error_message(error: Exception) -> str:
    """Map a raw client error onto a caller-facing message."""
    message = str(error)
    if "SAFETY" in message:
        return "Content was blocked by safety filters"
    if "QUOTA" in message.upper():
        return "API quota exceeded"
    return f"AI generation failed: {message}"


class GeminiStoryGenerator:
    """
    Callable generation collaborator: generate(prompt, attempt) -> GenerationOutput.

    Args:
        client: Optional explicit genai.Client. Built from environment if omitted.
        model: Gemini model ID
        temperature: Sampling temperature for the first attempt
        retry_temperature: Sampling temperature for later attempts
        max_output_tokens: Output budget per call
    """

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        model: Optional[str] = None,
        temperature: float = LLM_CONSTANTS["temperature"],
        retry_temperature: float = LLM_CONSTANTS["retry_temperature"],
        max_output_tokens: int = LLM_CONSTANTS["max_output_tokens"],
    ):
        self.client = client if client is not None else get_gemini_client()
        self.model = model or get_inference_model_name()
        self.temperature = temperature
        self.retry_temperature = retry_temperature
        self.max_output_tokens = max_output_tokens

    def build_config(self, attempt: int) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.retry_temperature if attempt > 0 else self.temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
            safety_settings=[
                types.SafetySetting(
                    category=category,
                    threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                )
                for category in SAFETY_CATEGORIES
            ],
        )

    @llm_retry
    def _generate_content(self, prompt: str, attempt: int):
        return self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self.build_config(attempt),
        )

    def __call__(self, prompt: str, attempt: int = 0) -> GenerationOutput:
        try:
            response = self._generate_content(prompt, attempt)
        except Exception as e:
            raise GenerationError(friendly_error_message(e)) from e

        candidate = response.candidates[0] if response.candidates else None
        finish_reason = _enum_value(candidate.finish_reason) if candidate and candidate.finish_reason else "STOP"

        text = response.text or ""
        if not text:
            if "SAFETY" in finish_reason or getattr(response.prompt_feedback, "block_reason", None):
                raise GenerationError("Content was blocked by safety filters")
            raise GenerationError(f"AI generation failed: empty response (finish reason {finish_reason})")

        ratings = []
        for rating in (candidate.safety_ratings or []) if candidate else []:
            ratings.append(
                {
                    "category": _enum_value(rating.category),
                    "probability": _enum_value(rating.probability),
                }
            )

        return GenerationOutput(text=text, safety_ratings=ratings, finish_reason=finish_reason)
