"""
Content guard for generated stories and caller-supplied text.

Scores free text against a static block-list and a set of regex rules,
plus two statistical checks (length/structure and word repetition).
Every sub-check is a pure function returning a CheckOutcome; the
aggregator combines whichever sub-checks the config enables.
"""

import re
from typing import Callable

from .types import CheckOutcome, GuardConfig, GuardRule, SafetyVerdict, Severity

DEFAULT_BLOCKED_TERMS: tuple[str, ...] = (
    # Violence & fear
    "şiddet", "kan", "ölüm", "öldür", "kavga", "savaş", "silah", "bıçak",
    "korku", "korkunç", "dehşet", "kabus", "kötü rüya", "canavar",
    # Inappropriate content
    "alkol", "sigara", "uyuşturucu", "kumar", "para", "zengin", "fakir",
    "yoksul", "sınıf", "ayrımcılık", "nefret", "öfke", "kızgın",
    # Adult themes
    "aşk", "sevgili", "öpücük", "evlilik", "boşanma", "cinsellik",
    "dokunma", "gizli", "yasak", "mahrem", "özel yer",
    # Negative emotions
    "iğrenç", "tiksinti", "acı", "ağlama", "gözyaşı",
    "üzüntü", "depresyon", "kaygı", "stres", "endişe",
    # Religious / political
    "din", "tanrı", "allah", "dua", "namaz", "kilise", "camii",
    "politika", "hükümet", "başkan", "seçim", "parti",
    # Scary creatures
    "şeytan", "cin", "hayalet", "zombi", "vampir", "kurt adam",
    "cadı", "büyücü", "lanet", "kara büyü", "büyü",
)

DEFAULT_GUARD_RULES: tuple[GuardRule, ...] = (
    GuardRule(
        id="excessive_caps",
        description="Excessive capital letters",
        pattern=re.compile(r"[A-ZÇĞıİÖŞÜ]{5,}"),
        severity=Severity.WARN,
    ),
    GuardRule(
        id="repetitive_words",
        description="Repetitive words (same word 3+ times)",
        pattern=re.compile(r"\b(\w+)(\s+\1){2,}\b", re.IGNORECASE),
        severity=Severity.WARN,
    ),
    GuardRule(
        id="violence_keywords",
        description="Violence-related keywords",
        pattern=re.compile(r"(vurmak|dövmek|saldırmak|zarar|yaralamak|acı vermek)", re.IGNORECASE),
        severity=Severity.BLOCK,
    ),
    GuardRule(
        id="fear_keywords",
        description="Fear and scary content",
        pattern=re.compile(r"(korkutucu|dehşetli|ürkütücü|karabasan|kâbus)", re.IGNORECASE),
        severity=Severity.BLOCK,
    ),
    GuardRule(
        id="inappropriate_contact",
        description="Inappropriate physical contact",
        pattern=re.compile(r"(dokunmak|ellemek|öpmek|sarılmak) (?:gizli|özel|yasak)", re.IGNORECASE),
        severity=Severity.BLOCK,
    ),
    GuardRule(
        id="negative_emotions_excessive",
        description="Excessive negative emotions",
        pattern=re.compile(r"(çok üzgün|çok korkuyor|çok ağlıyor|dehşete kapılmış)", re.IGNORECASE),
        severity=Severity.WARN,
    ),
)

DEFAULT_GUARD_CONFIG = GuardConfig(
    blocked_terms=DEFAULT_BLOCKED_TERMS,
    rules=DEFAULT_GUARD_RULES,
)

# Caller input is checked only for terms and blocking rules
PRE_CHECK_CONFIG = GuardConfig(
    blocked_terms=DEFAULT_BLOCKED_TERMS,
    rules=tuple(r for r in DEFAULT_GUARD_RULES if r.severity == Severity.BLOCK),
    enabled_guards=("blocked_terms", "regex_patterns"),
)

MIN_WORDS = 50
MAX_WORDS = 1000
MIN_SENTENCES = 3

SENTENCE_SPLIT = re.compile(r"[.!?]+")

# Issue keyword -> category tag
CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("blocked term",), "inappropriate_content"),
    (("violence",), "violence"),
    (("fear", "scary"), "fear"),
    (("repetition",), "quality_issues"),
    (("length", "structure"), "format_issues"),
)


def turkish_lower(text: str) -> str:
    """Lowercase with Turkish dotted/dotless I rules."""
    return text.replace("İ", "i").replace("I", "ı").lower()


def find_blocked_terms(text: str, blocked_terms: tuple[str, ...]) -> list[str]:
    """Return every configured term occurring in text (case-insensitive substring)."""
    lowered = turkish_lower(text)
    return [term for term in blocked_terms if turkish_lower(term) in lowered]


def check_blocked_terms(text: str, config: GuardConfig) -> CheckOutcome:
    found = find_blocked_terms(text, config.blocked_terms)
    return CheckOutcome(
        safe=not found,
        issues=[f"Blocked term found: {term}" for term in found],
        confidence=1.0 if not found else max(0.1, 1 - 0.3 * len(found)),
    )


def check_regex_patterns(text: str, config: GuardConfig) -> CheckOutcome:
    issues = []
    blocking = 0

    for rule in config.rules:
        matches = sum(1 for _ in rule.pattern.finditer(text))
        if matches:
            issues.append(f"{rule.description}: {matches} matches found")
            if rule.severity == Severity.BLOCK:
                blocking += 1

    return CheckOutcome(
        safe=blocking == 0,
        issues=issues,
        confidence=0.2 if blocking else max(0.5, 1 - 0.1 * len(issues)),
    )


def count_sentences(text: str) -> int:
    """Count non-empty segments between sentence terminators."""
    return len([s for s in SENTENCE_SPLIT.split(text) if s.strip()])


def check_length(text: str, config: GuardConfig) -> CheckOutcome:
    word_count = len(text.split())
    issues = []

    if word_count < MIN_WORDS:
        issues.append(f"Content length too short ({word_count} words)")
    if word_count > MAX_WORDS:
        issues.append(f"Content length too long ({word_count} words)")
    if count_sentences(text) < MIN_SENTENCES:
        issues.append("Content lacks proper structure")

    return CheckOutcome(
        safe=not issues,
        issues=issues,
        confidence=0.9 if not issues else max(0.3, 1 - 0.2 * len(issues)),
    )


def check_repetition(text: str, config: GuardConfig) -> CheckOutcome:
    words = turkish_lower(text).split()
    counts: dict[str, int] = {}
    for word in words:
        if len(word) > 3:
            counts[word] = counts.get(word, 0) + 1

    issues = []
    total = len(words)
    for word, count in counts.items():
        if count / total > 0.1 and count > 5:
            issues.append(f"Excessive repetition of word: {word}")

    return CheckOutcome(
        safe=not issues,
        issues=issues,
        confidence=0.8 if not issues else max(0.4, 1 - 0.15 * len(issues)),
    )


GUARD_CHECKS: dict[str, Callable[[str, GuardConfig], CheckOutcome]] = {
    "blocked_terms": check_blocked_terms,
    "regex_patterns": check_regex_patterns,
    "length_check": check_length,
    "repetition_check": check_repetition,
}


def extract_categories(issues: list[str]) -> list[str]:
    """Derive deduplicated category tags from issue strings, in first-seen order."""
    categories: list[str] = []
    for issue in issues:
        lowered = issue.lower()
        for keywords, category in CATEGORY_KEYWORDS:
            if category not in categories and any(k in lowered for k in keywords):
                categories.append(category)
    return categories


def check_content_safety(text: str, config: GuardConfig = DEFAULT_GUARD_CONFIG) -> SafetyVerdict:
    """
    Run every enabled sub-check over text and aggregate the results.

    Args:
        text: Free text to score
        config: Block-list, rules and enabled sub-checks

    Returns:
        SafetyVerdict; safe only when every sub-check is safe
    """
    outcomes = [GUARD_CHECKS[name](text, config) for name in config.enabled_guards]
    if not outcomes:
        raise ValueError("GuardConfig enables no checks")

    issues = [issue for outcome in outcomes for issue in outcome.issues]
    return SafetyVerdict(
        safe=all(o.safe for o in outcomes),
        confidence=sum(o.confidence for o in outcomes) / len(outcomes),
        categories=extract_categories(issues),
        blocked_terms=find_blocked_terms(text, config.blocked_terms),
    )


def pre_check_user_input(text: str, config: GuardConfig = PRE_CHECK_CONFIG) -> SafetyVerdict:
    """Stricter, cheaper check for caller-supplied free text before generation."""
    return check_content_safety(text, config)


def quick_safety_check(text: str, config: GuardConfig = DEFAULT_GUARD_CONFIG) -> bool:
    return check_content_safety(text, config).safe
