#!/usr/bin/env python3
"""
CLI for generating personalized Turkish children's stories.

Usage:
    python cli/generate_story.py Ahmet --age 6 --theme animals
    python cli/generate_story.py Elif --age 9 --theme fantasy --length long --element ejderha
    python cli/generate_story.py Can --stdout  # print to terminal instead of file
    python cli/generate_story.py --check "some text to screen"
"""

import argparse
import re
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from masal.config import STORY_CONSTANTS, get_inference_model_name
from masal.core.guard import check_content_safety, pre_check_user_input
from masal.core.modules.gemini_generator import GeminiStoryGenerator
from masal.core.programs.story_generator import StoryGenerator
from masal.core.types import GenerationOutcome, GenerationRequest, StoryLength, StoryTheme
from masal.core.validation import format_errors, validate_user_request


def format_story_markdown(outcome: GenerationOutcome, request: GenerationRequest) -> str:
    """Render an accepted story as Markdown with a metadata footer."""
    story = outcome.story
    metadata = outcome.metadata
    lines = [
        f"# {story.title}",
        "",
        f"*{request.child_name} için, {request.age} yaş*",
        "",
        story.content,
        "",
        "---",
        "",
        f"- Theme: {story.theme.value}",
        f"- Length: {request.length.value} ({story.word_count} words)",
        f"- Model: {metadata.model}",
        f"- Safety score: {metadata.safety_score:.2f}",
        f"- Prompt version: {metadata.prompt_version}",
        f"- Attempts: {metadata.attempts}",
    ]
    return "\n".join(lines) + "\n"


def run_check(text: str) -> int:
    """Print the guard's verdict for free text. Exit code 1 when unsafe."""
    verdict = check_content_safety(text)
    print(f"Safe: {verdict.safe}")
    print(f"Confidence: {verdict.confidence:.2f}")
    if verdict.categories:
        print(f"Categories: {', '.join(verdict.categories)}")
    if verdict.blocked_terms:
        print(f"Blocked terms: {', '.join(verdict.blocked_terms)}")
    return 0 if verdict.safe else 1


def main():
    parser = argparse.ArgumentParser(
        description="Generate personalized Turkish children's stories with Gemini",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python cli/generate_story.py Ahmet --age 6 --theme animals
    python cli/generate_story.py Zeynep --age 4 --theme friendship --length short
    python cli/generate_story.py Elif --age 9 --theme fantasy --element ejderha --element kale
    python cli/generate_story.py Can --output can_masali.md
    python cli/generate_story.py --check "Bir varmış bir yokmuş..."
        """,
    )

    parser.add_argument(
        "child_name",
        type=str,
        nargs="?",
        help="Name of the child the story is written for",
    )

    parser.add_argument(
        "--age",
        type=int,
        default=6,
        help=f"Child's age, {STORY_CONSTANTS['min_age']}-{STORY_CONSTANTS['max_age']} (default: 6)",
    )

    parser.add_argument(
        "--theme",
        choices=[t.value for t in StoryTheme],
        default=StoryTheme.ADVENTURE.value,
        help="Story theme (default: adventure)",
    )

    parser.add_argument(
        "--length",
        choices=[length.value for length in StoryLength],
        default=StoryLength.MEDIUM.value,
        help="Story length (default: medium)",
    )

    parser.add_argument(
        "--element", "-e",
        action="append",
        default=[],
        dest="elements",
        help="Element to include in the story (repeatable)",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file name (saved to output/ directory). Auto-generated if not specified.",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print to terminal instead of saving to file",
    )

    parser.add_argument(
        "--check",
        type=str,
        metavar="TEXT",
        default=None,
        help="Run the content guard on TEXT and exit",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress information",
    )

    args = parser.parse_args()

    if args.check is not None:
        sys.exit(run_check(args.check))

    if not args.child_name:
        parser.error("child_name is required unless --check is given")

    errors = validate_user_request(
        {"childName": args.child_name, "age": args.age, "theme": args.theme, "length": args.length}
    )
    if errors:
        parser.error(format_errors(errors))

    verdict = pre_check_user_input(f"{args.child_name} {' '.join(args.elements)}")
    if not verdict.safe:
        print(f"Input contains inappropriate content: {', '.join(verdict.categories)}", file=sys.stderr)
        sys.exit(1)

    request = GenerationRequest(
        child_name=args.child_name,
        age=args.age,
        theme=StoryTheme(args.theme),
        length=StoryLength(args.length),
        elements=args.elements,
    )

    model_name = get_inference_model_name()
    generator = StoryGenerator(GeminiStoryGenerator(model=model_name), model_name=model_name)

    if args.verbose:
        print(f"Generating {request.length.value} {request.theme.value} story for {request.child_name} ({request.age})")
        print(f"Model: {model_name}")

    outcome = generator.generate(request)

    if not outcome.success:
        print(outcome.error, file=sys.stderr)
        sys.exit(1)

    formatted = format_story_markdown(outcome, request)

    if args.stdout:
        print(formatted)
    else:
        output_dir = Path(__file__).parent.parent / "output"
        output_dir.mkdir(exist_ok=True)

        if args.output:
            filename = args.output if args.output.endswith(".md") else f"{args.output}.md"
        else:
            # Auto-generate filename from child name, theme and timestamp
            slug = re.sub(r"[^a-z0-9]+", "_", f"{args.child_name}_{args.theme}".lower())[:30].strip("_")
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{slug}_{timestamp}.md"

        output_path = output_dir / filename
        output_path.write_text(formatted, encoding="utf-8")
        print(f"Story saved to: {output_path}")

    if args.verbose:
        print("\n--- Generation Summary ---")
        print(f"Title: {outcome.story.title}")
        print(f"Word count: {outcome.story.word_count}")
        print(f"Attempts: {outcome.attempts}")
        print(f"Safety score: {outcome.metadata.safety_score:.2f}")
        print(f"Generation time: {outcome.metadata.generation_time_ms} ms")


if __name__ == "__main__":
    main()
