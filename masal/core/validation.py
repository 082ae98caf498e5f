"""
Validation for model replies and caller requests.

The model is asked for a JSON object {title, content, wordCount, theme,
language}. validate_story_response parses it, checks the schema, then runs
content safety, word count, quality and language checks. Failures are
returned as ValidationError lists, never raised.
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .guard import DEFAULT_GUARD_CONFIG, check_content_safety, count_sentences, turkish_lower
from .types import (
    ErrorCode,
    GenerationResult,
    GuardConfig,
    QuickValidationResult,
    StoryLength,
    StoryTheme,
    ValidationConfig,
    ValidationError,
    ValidationResult,
)
from ..config.story import STORY_CONSTANTS

DEFAULT_VALIDATION_CONFIG = ValidationConfig()

# Errors judged fixable by asking the generator again
RECOVERABLE_ERROR_CODES = frozenset(
    {
        ErrorCode.INVALID_JSON,
        ErrorCode.WORD_COUNT_MISMATCH,
        ErrorCode.INSUFFICIENT_STRUCTURE,
        ErrorCode.NOT_STORY_FORMAT,
    }
)

DIALOGUE_MARKS = re.compile(r"[\"'„“”‘’«»]")
SENTENCE_SPLIT = re.compile(r"[.!?]+")

# Schema messages, one per field
SCHEMA_MESSAGES = {
    "title": "Başlık 5-100 karakter arasında olmalı ve boş olamaz",
    "content": "İçerik 50-3000 karakter arasında olmalı ve boş olamaz",
    "wordCount": "Kelime sayısı 50-800 arasında bir tam sayı olmalı",
    "theme": "Geçersiz tema",
    "language": "Dil Türkçe (tr) veya İngilizce (en) olmalı",
}


class StoryResponseSchema(BaseModel):
    """Shape of the JSON object the model must return."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=5, max_length=100, strict=True)
    content: str = Field(min_length=50, max_length=3000, strict=True)
    word_count: int = Field(alias="wordCount", ge=50, le=800)
    theme: StoryTheme
    language: Literal["tr", "en"]

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("word_count", mode="before")
    @classmethod
    def integral_number(cls, value: Any) -> int:
        # Integral floats such as 99.0 pass; bools and strings do not
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be an integer")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("must be an integer")
        return int(value)

    def to_result(self) -> GenerationResult:
        return GenerationResult(
            title=self.title,
            content=self.content,
            word_count=self.word_count,
            theme=self.theme,
            language=self.language,
        )


def _schema_errors(exc: PydanticValidationError) -> list[ValidationError]:
    """Collapse pydantic errors into one ValidationError per field."""
    errors: list[ValidationError] = []
    seen: set[str] = set()

    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "response"
        if field in seen:
            continue
        seen.add(field)

        if err["type"] == "missing":
            message = f"Zorunlu alan eksik: {field}"
        elif field == "response":
            message = "Cevap bir JSON nesnesi olmalı"
        else:
            message = SCHEMA_MESSAGES.get(field, err["msg"])

        errors.append(ValidationError(field=field, message=message, code=ErrorCode.SCHEMA_VALIDATION_ERROR))

    return errors


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _parse(raw_text: str) -> tuple[Optional[StoryResponseSchema], list[ValidationError]]:
    """Steps 1-2: strict JSON parse then schema check."""
    try:
        payload = json.loads(raw_text, parse_constant=_reject_constant)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None, [
            ValidationError(field="response", message="Geçersiz JSON formatı", code=ErrorCode.INVALID_JSON)
        ]

    try:
        return StoryResponseSchema.model_validate(payload), []
    except PydanticValidationError as exc:
        return None, _schema_errors(exc)


def count_words(content: str) -> int:
    return len(content.split())


def calculate_repetition_score(content: str) -> float:
    """Distinct words seen 3+ times over total meaningful-word occurrences (0-1)."""
    counts: dict[str, int] = {}
    for word in turkish_lower(content).split():
        if len(word) > 3:
            counts[word] = counts.get(word, 0) + 1

    total_meaningful = sum(counts.values())
    repeated = sum(1 for count in counts.values() if count > 2)
    return repeated / max(1, total_meaningful)


def validate_word_count(content: str, expected_length: StoryLength, config: ValidationConfig) -> list[ValidationError]:
    actual = count_words(content)
    low, high = config.expected_word_ranges[StoryLength(expected_length)]

    if low <= actual <= high:
        return []
    return [
        ValidationError(
            field="wordCount",
            message=f"Kelime sayısı beklenen aralıkta değil. Beklenen: {low}-{high}, Gerçek: {actual}",
            code=ErrorCode.WORD_COUNT_MISMATCH,
        )
    ]


def validate_content_quality(content: str, config: ValidationConfig) -> list[ValidationError]:
    errors = []

    if count_sentences(content) < config.min_sentences:
        errors.append(
            ValidationError(
                field="content",
                message="İçerik yeterli cümle yapısına sahip değil",
                code=ErrorCode.INSUFFICIENT_STRUCTURE,
            )
        )

    if calculate_repetition_score(content) > config.max_repetition:
        errors.append(
            ValidationError(field="content", message="İçerikte aşırı tekrar var", code=ErrorCode.EXCESSIVE_REPETITION)
        )

    lowered = turkish_lower(content)
    has_dialogue = bool(DIALOGUE_MARKS.search(content)) or any(v in lowered for v in config.dialogue_verbs)
    # Raw split, trailing empty segment included
    has_narrative = len(SENTENCE_SPLIT.split(content)) > config.narrative_segments

    if not has_dialogue and not has_narrative:
        errors.append(
            ValidationError(field="content", message="İçerik hikaye formatında değil", code=ErrorCode.NOT_STORY_FORMAT)
        )

    return errors


def validate_turkish_content(content: str, config: ValidationConfig) -> list[ValidationError]:
    errors = []

    if not any(ch in content for ch in config.turkish_characters):
        errors.append(
            ValidationError(
                field="content",
                message="İçerik Türkçe karakterler içermiyor",
                code=ErrorCode.NO_TURKISH_CHARACTERS,
            )
        )

    lowered = turkish_lower(content)
    found = [word for word in config.common_words if word in lowered]
    if len(found) < config.min_common_words:
        errors.append(
            ValidationError(
                field="content",
                message="İçerik Türkçe dilinde görünmüyor",
                code=ErrorCode.NOT_TURKISH_LANGUAGE,
            )
        )

    return errors


def validate_story_response(
    raw_text: str,
    expected_length: StoryLength,
    config: ValidationConfig = DEFAULT_VALIDATION_CONFIG,
    guard_config: GuardConfig = DEFAULT_GUARD_CONFIG,
) -> ValidationResult:
    """
    Validate a raw model reply for the requested story length.

    Parse and schema failures short-circuit. Safety, word count, quality
    and language errors accumulate so one call reports every defect.

    Args:
        raw_text: The model's raw text, expected to be a JSON object
        expected_length: Requested length category
        config: Thresholds and word lists
        guard_config: Block-list and rules for the content safety step

    Returns:
        ValidationResult with data populated only when valid
    """
    parsed, errors = _parse(raw_text)
    if parsed is None:
        return ValidationResult(valid=False, errors=errors)

    content = parsed.content

    safety = check_content_safety(content, guard_config)
    if not safety.safe:
        errors.append(
            ValidationError(
                field="content",
                message=f"İçerik güvenlik kontrolünden geçemedi: {', '.join(safety.categories)}",
                code=ErrorCode.CONTENT_SAFETY_FAILED,
            )
        )

    errors.extend(validate_word_count(content, expected_length, config))
    errors.extend(validate_content_quality(content, config))
    errors.extend(validate_turkish_content(content, config))

    if errors:
        return ValidationResult(valid=False, errors=errors)
    return ValidationResult(valid=True, errors=[], data=parsed.to_result())


def quick_validate_json(raw_text: str) -> QuickValidationResult:
    """Schema-only fast path: parse and shape check, nothing else."""
    parsed, errors = _parse(raw_text)
    if parsed is None:
        first = errors[0]
        message = "Invalid JSON format" if first.code == ErrorCode.INVALID_JSON else first.message
        return QuickValidationResult(valid=False, error=message)
    return QuickValidationResult(valid=True, data=parsed.to_result())


def is_recoverable_error(errors: list[ValidationError]) -> bool:
    """True iff any error is one a second generation attempt may fix."""
    return any(error.code in RECOVERABLE_ERROR_CODES for error in errors)


def format_errors(errors: list[ValidationError]) -> str:
    """Join error messages for retry prompts and failure text."""
    return ", ".join(error.message for error in errors)


def validate_user_request(payload: Mapping[str, Any]) -> list[ValidationError]:
    """
    Pre-validate a caller's story request before any generation call.

    Accepts camelCase wire keys (childName) or snake_case (child_name).
    Returns an empty list when the request is usable.
    """
    errors = []

    child_name = payload.get("childName", payload.get("child_name"))
    if not isinstance(child_name, str) or not child_name.strip():
        errors.append(ValidationError(field="childName", message="Çocuk adı gerekli", code=ErrorCode.MISSING_CHILD_NAME))

    age = payload.get("age")
    min_age, max_age = STORY_CONSTANTS["min_age"], STORY_CONSTANTS["max_age"]
    if isinstance(age, bool) or not isinstance(age, int) or not min_age <= age <= max_age:
        errors.append(
            ValidationError(field="age", message=f"Yaş {min_age}-{max_age} arasında olmalı", code=ErrorCode.INVALID_AGE)
        )

    if payload.get("theme") not in [t.value for t in StoryTheme]:
        errors.append(ValidationError(field="theme", message="Geçersiz hikaye teması", code=ErrorCode.INVALID_THEME))

    if payload.get("length") not in [length.value for length in StoryLength]:
        errors.append(ValidationError(field="length", message="Geçersiz hikaye uzunluğu", code=ErrorCode.INVALID_LENGTH))

    return errors
