"""
Retry orchestrator for story generation.

Workflow:
1. Render the story prompt and call the generation collaborator
2. Validate the raw reply (schema, safety, length, quality, language)
3. On a recoverable failure, retry once with the previous error appended
4. On success, attach metadata (model, safety score, prompt version)

Attempts run strictly in sequence; each retry depends on the failure of
the attempt before it.
"""

import logging
import time
from typing import Callable, Optional, Union

from ...config import SAFETY_PROBABILITY_SCORES, STORY_CONSTANTS
from ..guard import DEFAULT_GUARD_CONFIG
from ..prompts import DEFAULT_TEMPLATE, build_retry_prompt, build_story_prompt
from ..types import (
    GenerationMetadata,
    GenerationOutcome,
    GenerationOutput,
    GenerationRequest,
    GuardConfig,
    PromptTemplate,
    ValidationConfig,
)
from ..validation import DEFAULT_VALIDATION_CONFIG, format_errors, is_recoverable_error, validate_story_response

logger = logging.getLogger(__name__)

GenerateFn = Callable[[str, int], Union[GenerationOutput, str]]


def calculate_safety_score(safety_ratings: Optional[list[dict]]) -> float:
    """
    Average a numeric score over the model's own safety ratings.

    Ratings are dicts with a "probability" string (NEGLIGIBLE, LOW, MEDIUM,
    HIGH). Unknown probability strings score 1.0. With no usable ratings
    the default score is returned.
    """
    default = STORY_CONSTANTS["default_safety_score"]
    if not safety_ratings:
        return default

    scores = []
    for rating in safety_ratings:
        probability = rating.get("probability")
        if isinstance(probability, str):
            scores.append(SAFETY_PROBABILITY_SCORES.get(probability.lower(), 1.0))

    return sum(scores) / len(scores) if scores else default


def _as_output(result: Union[GenerationOutput, str]) -> GenerationOutput:
    if isinstance(result, GenerationOutput):
        return result
    return GenerationOutput(text=result)


class StoryGenerator:
    """
    Generate a validated story with at most one retry.

    Args:
        generate: Collaborator called as generate(prompt, attempt_index),
            returning a GenerationOutput or raw text
        model_name: Model identifier reported in metadata
        max_attempts: Total attempts including the first
        template: Prompt template to render
        validation_config: Thresholds for the response validator
        guard_config: Block-list and rules applied to generated content
    """

    def __init__(
        self,
        generate: GenerateFn,
        model_name: str = "unknown",
        max_attempts: int = STORY_CONSTANTS["max_generation_attempts"],
        template: PromptTemplate = DEFAULT_TEMPLATE,
        validation_config: ValidationConfig = DEFAULT_VALIDATION_CONFIG,
        guard_config: GuardConfig = DEFAULT_GUARD_CONFIG,
    ):
        self.generate_fn = generate
        self.model_name = model_name
        self.max_attempts = max_attempts
        self.template = template
        self.validation_config = validation_config
        self.guard_config = guard_config

    def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """
        Run the attempt loop for one request.

        Returns:
            GenerationOutcome; story and metadata are set only on success
        """
        start_time = time.time()
        attempt_errors: list[str] = []
        last_error = ""

        for attempt in range(self.max_attempts):
            if attempt == 0:
                prompt = build_story_prompt(request, self.template)
            else:
                prompt = build_retry_prompt(request, last_error, self.template)

            try:
                output = _as_output(self.generate_fn(prompt, attempt))
            except Exception as e:
                last_error = str(e)
                attempt_errors.append(last_error)
                logger.warning("Story generation attempt %d failed: %s", attempt + 1, last_error)
                continue

            validation = validate_story_response(
                output.text, request.length, self.validation_config, self.guard_config
            )

            if validation.valid:
                story = validation.data
                metadata = GenerationMetadata(
                    model=self.model_name,
                    safety_score=calculate_safety_score(output.safety_ratings),
                    language=story.language,
                    prompt_version=self.template.version,
                    attempts=attempt + 1,
                    generation_time_ms=int((time.time() - start_time) * 1000),
                )
                return GenerationOutcome(
                    success=True,
                    story=story,
                    metadata=metadata,
                    attempts=attempt + 1,
                    attempt_errors=attempt_errors,
                )

            last_error = format_errors(validation.errors)
            attempt_errors.append(last_error)
            codes = ", ".join(code.value for code in validation.codes)

            if not is_recoverable_error(validation.errors):
                logger.warning("Attempt %d failed validation, not retrying: %s", attempt + 1, codes)
                break

            logger.info("Attempt %d failed validation, retrying: %s", attempt + 1, codes)

        attempts = len(attempt_errors)
        noun = "attempt" if attempts == 1 else "attempts"
        details = " | ".join(f"attempt {i}: {err}" for i, err in enumerate(attempt_errors, start=1))
        return GenerationOutcome(
            success=False,
            error=f"Story generation failed after {attempts} {noun}: {details}",
            attempts=attempts,
            attempt_errors=attempt_errors,
        )
