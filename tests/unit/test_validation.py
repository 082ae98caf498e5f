"""Unit tests for model reply and caller request validation."""

import json
import re

import pytest

from masal.core.types import ErrorCode, GuardConfig, GuardRule, Severity, StoryLength, StoryTheme, ValidationError
from masal.core.validation import (
    DEFAULT_VALIDATION_CONFIG,
    calculate_repetition_score,
    format_errors,
    is_recoverable_error,
    quick_validate_json,
    validate_content_quality,
    validate_story_response,
    validate_turkish_content,
    validate_user_request,
    validate_word_count,
)


class TestValidateStoryResponse:
    """Tests for the full reply validation pipeline."""

    def test_valid_story_accepted(self, story_json):
        result = validate_story_response(story_json, StoryLength.SHORT)

        assert result.valid is True
        assert result.errors == []
        assert result.data.title == "Ahmet ve Renkli Kelebek"
        assert result.data.theme == StoryTheme.ANIMALS
        assert result.data.word_count == 99

    def test_invalid_json_short_circuits(self):
        result = validate_story_response("Bir varmış bir yokmuş", StoryLength.SHORT)

        assert result.valid is False
        assert [e.to_dict() for e in result.errors] == [
            {"field": "response", "message": "Geçersiz JSON formatı", "code": "INVALID_JSON"}
        ]
        assert result.data is None

    def test_missing_field_reported(self, story_payload):
        del story_payload["title"]
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.codes == [ErrorCode.SCHEMA_VALIDATION_ERROR]
        assert result.errors[0].field == "title"
        assert result.errors[0].message == "Zorunlu alan eksik: title"

    def test_word_count_must_be_integer(self, story_payload):
        """A numeric string is not coerced."""
        story_payload["wordCount"] = "99"
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.codes == [ErrorCode.SCHEMA_VALIDATION_ERROR]
        assert result.errors[0].field == "wordCount"

    def test_unknown_theme_rejected(self, story_payload):
        story_payload["theme"] = "space"
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.errors[0].field == "theme"
        assert result.errors[0].message == "Geçersiz tema"

    def test_blank_title_rejected(self, story_payload):
        story_payload["title"] = "      "
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.errors[0].field == "title"

    def test_non_object_payload_rejected(self):
        result = validate_story_response("[1, 2, 3]", StoryLength.SHORT)

        assert result.codes == [ErrorCode.SCHEMA_VALIDATION_ERROR]
        assert result.errors[0].field == "response"

    def test_unsafe_content_not_recoverable(self, unsafe_story_json):
        result = validate_story_response(unsafe_story_json, StoryLength.SHORT)

        assert result.codes == [ErrorCode.CONTENT_SAFETY_FAILED]
        assert "inappropriate_content" in result.errors[0].message
        assert is_recoverable_error(result.errors) is False

    def test_wrong_length_is_recoverable(self, story_json):
        """A short story returned for a long request can be retried."""
        result = validate_story_response(story_json, StoryLength.LONG)

        assert result.codes == [ErrorCode.WORD_COUNT_MISMATCH]
        assert result.errors[0].message == "Kelime sayısı beklenen aralıkta değil. Beklenen: 350-650, Gerçek: 99"
        assert is_recoverable_error(result.errors) is True


    def test_non_standard_json_constants_rejected(self, story_json):
        """NaN and Infinity are not JSON, so the reply is retryable."""
        for constant in ("NaN", "Infinity", "-Infinity"):
            raw = story_json.replace('"wordCount": 99', f'"wordCount": {constant}')
            assert raw != story_json

            result = validate_story_response(raw, StoryLength.SHORT)

            assert result.codes == [ErrorCode.INVALID_JSON]
            assert is_recoverable_error(result.errors) is True

    def test_integral_float_word_count_accepted(self, story_payload):
        story_payload["wordCount"] = 99.0
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.valid is True
        assert result.data.word_count == 99
        assert isinstance(result.data.word_count, int)

    @pytest.mark.parametrize("value", [99.5, True])
    def test_fractional_or_boolean_word_count_rejected(self, story_payload, value):
        story_payload["wordCount"] = value
        result = validate_story_response(json.dumps(story_payload), StoryLength.SHORT)

        assert result.codes == [ErrorCode.SCHEMA_VALIDATION_ERROR]
        assert result.errors[0].field == "wordCount"

    def test_custom_block_list_applied(self, story_json):
        config = GuardConfig(blocked_terms=("kelebek",), rules=())
        result = validate_story_response(story_json, StoryLength.SHORT, guard_config=config)

        assert result.codes == [ErrorCode.CONTENT_SAFETY_FAILED]
        assert validate_story_response(story_json, StoryLength.SHORT).valid is True

    def test_custom_blocking_rule_applied(self, story_json):
        rule = GuardRule(
            id="no_forest",
            description="Forest mentioned",
            pattern=re.compile(r"orman", re.IGNORECASE),
            severity=Severity.BLOCK,
        )
        config = GuardConfig(blocked_terms=(), rules=(rule,))
        result = validate_story_response(story_json, StoryLength.SHORT, guard_config=config)

        assert result.codes == [ErrorCode.CONTENT_SAFETY_FAILED]
        assert is_recoverable_error(result.errors) is False


class TestWordCount:
    """Tests for the per-length acceptance ranges."""

    @pytest.mark.parametrize("count,ok", [(79, False), (80, True), (220, True), (221, False)])
    def test_short_range_inclusive(self, count, ok):
        content = " ".join(f"söz{i}" for i in range(count))
        errors = validate_word_count(content, StoryLength.SHORT, DEFAULT_VALIDATION_CONFIG)
        assert (errors == []) is ok

    def test_medium_range(self):
        content = " ".join(["kelime"] * 300)
        assert validate_word_count(content, StoryLength.MEDIUM, DEFAULT_VALIDATION_CONFIG) == []


class TestContentQuality:
    """Tests for structure, repetition and story format checks."""

    def test_story_passes(self, story_content):
        assert validate_content_quality(story_content, DEFAULT_VALIDATION_CONFIG) == []

    def test_single_sentence_without_dialogue(self):
        errors = validate_content_quality("Kedi uyudu", DEFAULT_VALIDATION_CONFIG)
        codes = [e.code for e in errors]

        assert ErrorCode.INSUFFICIENT_STRUCTURE in codes
        assert ErrorCode.NOT_STORY_FORMAT in codes

    def test_dialogue_verb_counts_as_story(self):
        """A dialogue verb is enough even without quotes or many sentences."""
        errors = validate_content_quality("Kedi miyav dedi", DEFAULT_VALIDATION_CONFIG)
        assert ErrorCode.NOT_STORY_FORMAT not in [e.code for e in errors]

    def test_excessive_repetition(self):
        errors = validate_content_quality("Kedi kedi kedi", DEFAULT_VALIDATION_CONFIG)
        assert ErrorCode.EXCESSIVE_REPETITION in [e.code for e in errors]

    def test_repetition_score(self):
        # kedi seen 3 times out of 4 meaningful words
        assert calculate_repetition_score("kedi kedi kedi köpek") == pytest.approx(0.25)
        assert calculate_repetition_score("bir iki üç") == 0


class TestTurkishContent:
    """Tests for the Turkish language heuristics."""

    def test_story_passes(self, story_content):
        assert validate_turkish_content(story_content, DEFAULT_VALIDATION_CONFIG) == []

    def test_english_text_rejected(self):
        errors = validate_turkish_content("The cat sat on the mat.", DEFAULT_VALIDATION_CONFIG)
        assert [e.code for e in errors] == [ErrorCode.NO_TURKISH_CHARACTERS, ErrorCode.NOT_TURKISH_LANGUAGE]


class TestQuickValidateJson:
    """Tests for the schema-only fast path."""

    def test_valid(self, story_json):
        result = quick_validate_json(story_json)
        assert result.valid is True
        assert result.data.language == "tr"

    def test_valid_data_matches_payload(self, story_payload):
        result = quick_validate_json(json.dumps(story_payload))

        assert result.valid is True
        assert result.error is None
        assert result.data.title == story_payload["title"]
        assert result.data.content == story_payload["content"]
        assert result.data.word_count == story_payload["wordCount"]
        assert result.data.theme == StoryTheme(story_payload["theme"])
        assert result.data.language == story_payload["language"]

    def test_invalid_json(self):
        result = quick_validate_json("{not json")
        assert result.valid is False
        assert result.error == "Invalid JSON format"
        assert result.data is None

    def test_schema_error_message(self, story_payload):
        story_payload["language"] = "de"
        result = quick_validate_json(json.dumps(story_payload))
        assert result.error == "Dil Türkçe (tr) veya İngilizce (en) olmalı"

    def test_skips_content_checks(self, unsafe_story_json):
        """Only shape is checked, so unsafe content still passes."""
        assert quick_validate_json(unsafe_story_json).valid is True


class TestErrorHelpers:
    """Tests for recoverability and message formatting."""

    def test_recoverable_if_any_code_recoverable(self):
        errors = [
            ValidationError(field="content", message="a", code=ErrorCode.NO_TURKISH_CHARACTERS),
            ValidationError(field="content", message="b", code=ErrorCode.INSUFFICIENT_STRUCTURE),
        ]
        assert is_recoverable_error(errors) is True

    def test_empty_list_not_recoverable(self):
        assert is_recoverable_error([]) is False

    def test_format_errors_joins_messages(self):
        errors = [
            ValidationError(field="a", message="birinci", code=ErrorCode.INVALID_JSON),
            ValidationError(field="b", message="ikinci", code=ErrorCode.INVALID_JSON),
        ]
        assert format_errors(errors) == "birinci, ikinci"


class TestValidateUserRequest:
    """Tests for caller request pre-validation."""

    def test_valid_request(self, story_request_body):
        assert validate_user_request(story_request_body) == []

    def test_snake_case_name_accepted(self):
        payload = {"child_name": "Elif", "age": 4, "theme": "music", "length": "long"}
        assert validate_user_request(payload) == []

    def test_empty_payload_reports_every_field(self):
        codes = [e.code for e in validate_user_request({})]
        assert codes == [
            ErrorCode.MISSING_CHILD_NAME,
            ErrorCode.INVALID_AGE,
            ErrorCode.INVALID_THEME,
            ErrorCode.INVALID_LENGTH,
        ]

    def test_blank_name_rejected(self, story_request_body):
        story_request_body["childName"] = "   "
        assert [e.code for e in validate_user_request(story_request_body)] == [ErrorCode.MISSING_CHILD_NAME]

    @pytest.mark.parametrize("age", [2, 19, "6", True, 6.5, None])
    def test_bad_age_rejected(self, story_request_body, age):
        story_request_body["age"] = age
        assert [e.code for e in validate_user_request(story_request_body)] == [ErrorCode.INVALID_AGE]

    @pytest.mark.parametrize("age", [3, 18])
    def test_age_bounds_inclusive(self, story_request_body, age):
        story_request_body["age"] = age
        assert validate_user_request(story_request_body) == []

    def test_unhashable_theme_rejected(self, story_request_body):
        story_request_body["theme"] = ["animals"]
        assert [e.code for e in validate_user_request(story_request_body)] == [ErrorCode.INVALID_THEME]
