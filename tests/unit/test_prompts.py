"""Unit tests for story prompt rendering."""

import pytest

from masal.core.prompts import (
    DEFAULT_TEMPLATE,
    build_retry_prompt,
    build_story_prompt,
    get_age_group,
    validate_prompt,
)
from masal.core.types import GenerationRequest, StoryLength, StoryTheme


@pytest.fixture
def request_short():
    return GenerationRequest(
        child_name="Ahmet",
        age=6,
        theme=StoryTheme.ANIMALS,
        length=StoryLength.SHORT,
        elements=["kelebek", "kaplumbağa"],
    )


class TestAgeGroup:
    """Tests for age band classification."""

    @pytest.mark.parametrize(
        "age,group",
        [(3, "3-5"), (5, "3-5"), (6, "6-8"), (8, "6-8"), (9, "9-12"), (12, "9-12"), (13, "13+"), (18, "13+")],
    )
    def test_band_boundaries(self, age, group):
        assert get_age_group(age) == group


class TestBuildStoryPrompt:
    """Tests for build_story_prompt."""

    def test_placeholders_filled(self, request_short):
        prompt = build_story_prompt(request_short)

        assert "Ahmet adında 6 yaşında" in prompt
        assert "kısa (yaklaşık 150 kelime)" in prompt
        assert DEFAULT_TEMPLATE.theme_prompts[StoryTheme.ANIMALS] in prompt
        assert "{childName}" not in prompt

    def test_sections_in_order(self, request_short):
        """Age modifier, elements, word target, safety rules, then the JSON example."""
        prompt = build_story_prompt(request_short)

        positions = [
            prompt.index("Yaş grubu özel talimatları: " + DEFAULT_TEMPLATE.age_modifiers["6-8"]),
            prompt.index("Hikayede bu öğeleri de dahil et: kelebek, kaplumbağa"),
            prompt.index("Hikaye uzunluğu: 150 kelime civarında (100-200 kelime arası)."),
            prompt.index("GÜVENLIK KURALLARI:"),
            prompt.index("Cevabını şu JSON formatında ver:"),
        ]
        assert positions == sorted(positions)

    def test_json_example_echoes_theme(self, request_short):
        prompt = build_story_prompt(request_short)
        assert prompt.endswith('    "language": "tr"\n}')
        assert '"theme": "animals"' in prompt

    def test_elements_omitted_when_empty(self):
        request = GenerationRequest(child_name="Elif", age=10, theme=StoryTheme.MUSIC, length=StoryLength.LONG)
        prompt = build_story_prompt(request)

        assert "Hikayede bu öğeleri" not in prompt
        assert DEFAULT_TEMPLATE.age_modifiers["9-12"] in prompt
        assert "(400-600 kelime arası)" in prompt

    def test_rendered_prompt_passes_template_check(self, request_short):
        assert validate_prompt(build_story_prompt(request_short)).valid is True


class TestBuildRetryPrompt:
    """Tests for build_retry_prompt."""

    def test_appends_previous_error(self, request_short):
        base = build_story_prompt(request_short)
        prompt = build_retry_prompt(request_short, "Geçersiz JSON formatı")

        assert prompt.startswith(base)
        assert "ÖNCEKI HATA: Geçersiz JSON formatı" in prompt
        assert prompt.rstrip().endswith("format kurallarına uy.")


class TestValidatePrompt:
    """Tests for validate_prompt."""

    def test_short_prompt_reports_every_problem(self):
        result = validate_prompt("merhaba")

        assert result.valid is False
        assert result.errors == [
            "Prompt çok kısa",
            "JSON format gereksinimi eksik",
            "Temel hikaye elemanları eksik",
        ]

    def test_long_prompt_rejected(self):
        result = validate_prompt("çocuk masal JSON " * 200)
        assert result.errors == ["Prompt çok uzun"]
