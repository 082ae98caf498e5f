"""
Centralized domain types for the story safety and validation pipeline.

All dataclasses that are used across multiple modules are defined here
to make data flow explicit and avoid circular imports.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# Enums
# =============================================================================


class StoryTheme(str, Enum):
    """Story themes a caller can request."""

    ADVENTURE = "adventure"
    FRIENDSHIP = "friendship"
    LEARNING = "learning"
    FANTASY = "fantasy"
    ANIMALS = "animals"
    FAMILY = "family"
    NATURE = "nature"
    MUSIC = "music"


class StoryLength(str, Enum):
    """Story length categories."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class ErrorCode(str, Enum):
    """Closed set of machine-readable validation error codes."""

    INVALID_JSON = "INVALID_JSON"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CONTENT_SAFETY_FAILED = "CONTENT_SAFETY_FAILED"
    WORD_COUNT_MISMATCH = "WORD_COUNT_MISMATCH"
    INSUFFICIENT_STRUCTURE = "INSUFFICIENT_STRUCTURE"
    EXCESSIVE_REPETITION = "EXCESSIVE_REPETITION"
    NOT_STORY_FORMAT = "NOT_STORY_FORMAT"
    NO_TURKISH_CHARACTERS = "NO_TURKISH_CHARACTERS"
    NOT_TURKISH_LANGUAGE = "NOT_TURKISH_LANGUAGE"
    MISSING_CHILD_NAME = "MISSING_CHILD_NAME"
    INVALID_AGE = "INVALID_AGE"
    INVALID_THEME = "INVALID_THEME"
    INVALID_LENGTH = "INVALID_LENGTH"


class Severity(str, Enum):
    """How a matching guard rule affects the verdict."""

    BLOCK = "block"  # forces the regex sub-check unsafe
    WARN = "warn"
    FLAG = "flag"


# =============================================================================
# Request / Result Types
# =============================================================================


@dataclass
class GenerationRequest:
    """A personalization request for one story."""

    child_name: str
    age: int
    theme: StoryTheme
    length: StoryLength
    elements: list[str] = field(default_factory=list)
    token: Optional[str] = None  # opaque to the pipeline


@dataclass
class GenerationResult:
    """A candidate story parsed from the model's JSON reply."""

    title: str
    content: str
    word_count: int
    theme: StoryTheme
    language: str


@dataclass
class ValidationError:
    """A single validation failure: field, human message, machine code."""

    field: str
    message: str
    code: ErrorCode

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "code": self.code.value}


@dataclass(frozen=True)
class SafetyVerdict:
    """Aggregate outcome of the content guard."""

    safe: bool
    confidence: float
    categories: list[str]
    blocked_terms: list[str]


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one guard sub-check."""

    safe: bool
    issues: list[str]
    confidence: float


@dataclass
class ValidationResult:
    """Result of the full response validation pipeline."""

    valid: bool
    errors: list[ValidationError]
    data: Optional[GenerationResult] = None

    @property
    def codes(self) -> list[ErrorCode]:
        return [e.code for e in self.errors]


@dataclass
class QuickValidationResult:
    """Result of the schema-only fast path."""

    valid: bool
    data: Optional[GenerationResult] = None
    error: Optional[str] = None


@dataclass
class PromptCheck:
    valid: bool
    errors: list[str]


# =============================================================================
# Static Configuration Types
# =============================================================================


@dataclass(frozen=True)
class LengthSpec:
    """Prompt-facing length specification."""

    word_count: int
    range: tuple[int, int]
    complexity: str  # simple, moderate, advanced


@dataclass(frozen=True)
class PromptTemplate:
    """Templates used to render generation instructions."""

    version: str
    base_prompt: str
    age_modifiers: dict[str, str]
    theme_prompts: dict[StoryTheme, str]
    length_specs: dict[StoryLength, LengthSpec]
    safety_instructions: str


@dataclass(frozen=True)
class GuardRule:
    """A regex rule evaluated by the guard."""

    id: str
    description: str
    pattern: re.Pattern
    severity: Severity


@dataclass(frozen=True)
class GuardConfig:
    """Block-list, regex rules and the ordered set of enabled sub-checks."""

    blocked_terms: tuple[str, ...]
    rules: tuple[GuardRule, ...]
    enabled_guards: tuple[str, ...] = (
        "blocked_terms",
        "regex_patterns",
        "length_check",
        "repetition_check",
    )


@dataclass(frozen=True)
class ValidationConfig:
    """Thresholds and word lists for response validation."""

    expected_word_ranges: dict[StoryLength, tuple[int, int]] = field(
        default_factory=lambda: {
            StoryLength.SHORT: (80, 220),
            StoryLength.MEDIUM: (180, 420),
            StoryLength.LONG: (350, 650),
        }
    )
    min_sentences: int = 3
    narrative_segments: int = 5  # more raw segments than this counts as narrative
    max_repetition: float = 0.3
    turkish_characters: str = "çğıİöşüÇĞÖŞÜ"
    common_words: tuple[str, ...] = ("bir", "ve", "bu", "o", "da", "de", "ile", "için", "var", "olan")
    min_common_words: int = 3
    dialogue_verbs: tuple[str, ...] = ("dedi", "söyledi", "sordu", "yanıtladı")


# =============================================================================
# Generation Types
# =============================================================================


@dataclass
class GenerationOutput:
    """Raw reply from the generation collaborator."""

    text: str
    safety_ratings: list[dict] = field(default_factory=list)
    finish_reason: str = "STOP"


@dataclass
class GenerationMetadata:
    """Metadata reported alongside an accepted story."""

    model: str
    safety_score: float
    language: str
    prompt_version: str
    attempts: int = 1
    generation_time_ms: int = 0


@dataclass
class GenerationOutcome:
    """Final outcome of the retry orchestrator."""

    success: bool
    story: Optional[GenerationResult] = None
    metadata: Optional[GenerationMetadata] = None
    error: Optional[str] = None
    attempts: int = 0
    attempt_errors: list[str] = field(default_factory=list)
