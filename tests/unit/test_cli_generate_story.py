"""Tests for the story generation CLI."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from cli import generate_story
from masal.core.types import GenerationOutcome


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["generate_story.py", *argv])
    with pytest.raises(SystemExit) as exc_info:
        generate_story.main()
    return exc_info.value.code


class TestInputPreCheck:
    """The CLI screens the child name and elements before calling the model."""

    @pytest.mark.parametrize(
        "argv",
        [
            ("Ahmet", "--element", "canavar"),
            ("canavar", "--element", "kelebek"),
        ],
    )
    def test_unsafe_input_rejected(self, monkeypatch, capsys, argv):
        with patch.object(generate_story, "GeminiStoryGenerator") as gemini, patch.object(
            generate_story, "StoryGenerator"
        ) as program:
            code = _run(monkeypatch, *argv, "--stdout")

        assert code == 1
        assert "inappropriate_content" in capsys.readouterr().err
        gemini.assert_not_called()
        program.assert_not_called()

    def test_safe_input_reaches_generator(self, monkeypatch, capsys):
        program = MagicMock()
        program.return_value.generate.return_value = GenerationOutcome(
            success=False, error="Story generation failed after 1 attempt: x", attempts=1
        )
        with patch.object(generate_story, "GeminiStoryGenerator"), patch.object(
            generate_story, "StoryGenerator", program
        ):
            code = _run(monkeypatch, "Ahmet", "--element", "kelebek", "--stdout")

        assert code == 1
        program.return_value.generate.assert_called_once()
        request = program.return_value.generate.call_args[0][0]
        assert request.elements == ["kelebek"]
        assert "Story generation failed" in capsys.readouterr().err


class TestRunCheck:
    """Tests for --check."""

    def test_safe_text(self, capsys, story_content):
        assert generate_story.run_check(story_content) == 0
        assert "Safe: True" in capsys.readouterr().out

    def test_unsafe_text_lists_blocked_terms(self, capsys):
        assert generate_story.run_check("Çocuklar kavga etmiş. Sonra barışmışlar. Ertesi gün oynamışlar.") == 1
        out = capsys.readouterr().out
        assert out.count("Blocked terms: kavga") == 1
