"""Heuristic field parsers for study card text.

Every parser takes already-extracted text and returns a default instead of
raising when nothing usable is found.
"""

from __future__ import annotations

import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

DEFAULT_DURATION = "Unknown"
DEFAULT_STUDY_TYPE = "Unknown"
MAX_TOKEN_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 500

_DASHES = re.compile("[\u2010-\u2015\u2212\ufe58\ufe63\uff0d]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN_SEPARATORS = re.compile(r"[•·|,]")

_AMOUNT = re.compile(r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)(\.\d{1,2})?")
_DURATION = re.compile(r"\d+(?:\.\d+)?\s*(?:minutes?|mins?|hours?|hrs?)\b", re.IGNORECASE)
_POSTED = re.compile(
    r"\d+\s*(?:hour|day|minute|week)s?\s+ago|\ban?\s+(?:hour|day|minute|week)\s+ago",
    re.IGNORECASE,
)
_MATCH_SCORE = re.compile(r"(\d{1,3})\s*%\s*match")
_IN_PERSON = re.compile(r"\bin[- ]person\b")

# Order matters: "unmoderated" contains "moderated", "video survey" contains "survey".
FORMAT_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("One-on-One", re.compile(r"\b(?:one[- ]on[- ]one|1[- ]on[- ]1|1:1)\b")),
    ("Unmoderated", re.compile(r"\bunmoderated\b")),
    ("Moderated", re.compile(r"(?<!un)moderated\b")),
    ("Focus Group", re.compile(r"\bfocus[- ]groups?\b")),
    ("Survey", re.compile(r"(?<!video )\bsurveys?\b")),
    ("Interview", re.compile(r"\binterviews?\b")),
    ("Diary Study", re.compile(r"\b(?:diary|journal)\b")),
    ("Usability Test", re.compile(r"\busability\b|\bux[- ]?(?:test|testing)\b")),
)


def normalize_text(text: str | None) -> str:
    """NFKD-decompose, fold dash variants to ``-``, collapse whitespace, lowercase, trim."""

    if not text:
        return ""
    folded = unicodedata.normalize("NFKD", text)
    folded = _DASHES.sub("-", folded)
    return _WHITESPACE.sub(" ", folded).lower().strip()


def split_tokens(labels: list[str]) -> list[str]:
    tokens: list[str] = []
    for label in labels:
        for part in _TOKEN_SEPARATORS.split(label or ""):
            token = normalize_text(part)
            if token and len(token) <= MAX_TOKEN_LENGTH:
                tokens.append(token)
    return tokens


def parse_payout(text: str) -> int:
    values: list[Decimal] = []
    for whole, cents in _AMOUNT.findall(text or ""):
        try:
            values.append(Decimal(whole.replace(",", "") + (cents or "")))
        except InvalidOperation:
            continue
    if not values:
        return 0
    return int(max(values).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_duration(text: str) -> str:
    match = _DURATION.search(text or "")
    return match.group(0).strip() if match else DEFAULT_DURATION


def parse_posted_at(text: str) -> str:
    match = _POSTED.search(text or "")
    return _WHITESPACE.sub(" ", match.group(0)).strip() if match else ""


def parse_study_type(normalized: str, tokens: list[str]) -> str:
    haystacks = [normalized, *tokens]
    if any("remote" in item for item in haystacks):
        return "Remote"
    if any(_IN_PERSON.search(item) for item in haystacks):
        return "In-Person"
    return DEFAULT_STUDY_TYPE


def parse_study_format(normalized: str, tokens: list[str]) -> str:
    haystack = " | ".join([normalized, *tokens])
    for label, pattern in FORMAT_RULES:
        if pattern.search(haystack):
            return label
    return ""


def parse_match_score(normalized: str) -> int | None:
    match = _MATCH_SCORE.search(normalized or "")
    if not match:
        return None
    value = int(match.group(1))
    return value if 0 <= value <= 100 else None


def clip_description(text: str | None) -> str:
    return " ".join((text or "").split())[:MAX_DESCRIPTION_LENGTH]
