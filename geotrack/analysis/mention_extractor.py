"""Mention Extractor: Pipeline Step 1.

Decides whether any candidate name (business name or alias) appears in a
raw answer and, if so, where:

  - Exact: case-insensitive substring, candidates tried in order
  - Fuzzy: apostrophe variants ignored, whitespace runs collapsed
           ("Mario's" = "Marios" = "Mario’s")
  - Position: line-oriented detectors tried in order
      1. Ordinal marker on the matching line: "N.", "**N.**", "#N", "N)"
      2. Bullet lines ("-", "*", "•", bold-wrapped) counted up to the match
      3. Bold span on the matching line → that line's 1-based index
      4. Present anywhere else → 1
  - Context: the matching line without list/bold markers

All of this is best-effort. Two names sharing a numbered line both get
that number, and bold text unrelated to ranking can produce a rank.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from geotrack.analysis.types import MentionFinding

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Position detection patterns
# ---------------------------------------------------------------------------

_NUMBER_PATTERNS = (
    re.compile(r"^(\d+)\.\s*"),  # "1. " or "1."
    re.compile(r"^\*\*(\d+)\.\*\*\s*"),  # "**1.**"
    re.compile(r"^#(\d+)\s*"),  # "#1"
    re.compile(r"^(\d+)\)\s*"),  # "1)"
)

_BULLET_PATTERNS = (
    re.compile(r"^[-*•]\s*"),  # "- ", "* ", "• "
    re.compile(r"^\*\*[-*•]\*\*\s*"),  # "**-**"
)

_BOLD_PATTERN = re.compile(r"\*\*([^*]+)\*\*")

# Leading list markers stripped from context lines
_LIST_MARKER_PATTERN = re.compile(r"^[\d.\-*•#\s]+")

_APOSTROPHES = "'‘’\""
_APOSTROPHE_CLASS = "['‘’\"]?"


@dataclass
class _ScanState:
    """Mutable state carried across lines during one position scan."""

    bullet_count: int = 0


# ---------------------------------------------------------------------------
# Position detectors (line-level, tried in order)
# ---------------------------------------------------------------------------


def _numbered_rank(line: str, line_no: int, has_name: bool, state: _ScanState) -> int | None:
    """Explicit ordinal marker at line start."""
    if not has_name:
        return None
    for pattern in _NUMBER_PATTERNS:
        match = pattern.match(line)
        if match:
            return int(match.group(1))
    return None


def _bullet_rank(line: str, line_no: int, has_name: bool, state: _ScanState) -> int | None:
    """Running count of bullet lines, up to and including the matching one."""
    if not any(pattern.match(line) for pattern in _BULLET_PATTERNS):
        return None
    state.bullet_count += 1
    return state.bullet_count if has_name else None


def _bold_line_rank(line: str, line_no: int, has_name: bool, state: _ScanState) -> int | None:
    """Bold span on the matching line: approximate rank by line number."""
    if has_name and _BOLD_PATTERN.search(line):
        return line_no
    return None


LINE_DETECTORS = (_numbered_rank, _bullet_rank, _bold_line_rank)


def find_position(text: str, name: str) -> int | None:
    """1-based rank of ``name`` in ``text``, or None when it does not occur."""
    needle = name.lower()
    if not needle:
        return None

    state = _ScanState()
    for line_no, line in enumerate(text.split("\n"), start=1):
        has_name = needle in line.lower()
        for detector in LINE_DETECTORS:
            rank = detector(line, line_no, has_name, state)
            if rank is not None:
                return rank

    # Mentioned, but not inside any list
    if needle in text.lower():
        return 1
    return None


# ---------------------------------------------------------------------------
# Context & fuzzy matching
# ---------------------------------------------------------------------------


def extract_context(text: str, name: str) -> str:
    """The line carrying the mention, with list and bold markers removed."""
    needle = name.lower()
    index = text.lower().find(needle)
    if not needle or index == -1:
        return ""

    for line in text.split("\n"):
        if needle in line.lower():
            line = _LIST_MARKER_PATTERN.sub("", line)
            return line.replace("**", "").strip()

    # Match spans several lines
    start = max(0, index - 50)
    end = min(len(text), index + len(name) + 100)
    return text[start:end].strip()


def _normalize(s: str) -> str:
    s = s.lower()
    for ch in _APOSTROPHES:
        s = s.replace(ch, "")
    return re.sub(r"\s+", " ", s).strip()


def fuzzy_match(text: str, name: str) -> str | None:
    """Surface form of ``name`` in ``text`` ignoring apostrophes and spacing.

    Returns the matched text as written, ``name`` itself when the
    normalized forms agree but no surface form can be located, or None.
    """
    normalized_name = _normalize(name)
    if not normalized_name or normalized_name not in _normalize(text):
        return None

    parts = [_APOSTROPHE_CLASS]
    for ch in normalized_name:
        parts.append(r"\s+" if ch == " " else re.escape(ch))
        parts.append(_APOSTROPHE_CLASS)
    match = re.search("".join(parts), text, re.IGNORECASE)
    if match is None:
        return name
    return match.group(0).strip(_APOSTROPHES) or name


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_mention(text: str, names: list[str] | tuple[str, ...]) -> MentionFinding:
    """Find the first candidate name mentioned in ``text``.

    Candidates are tried in order; each gets an exact then a fuzzy attempt
    before the next candidate is considered.
    """
    if not text:
        return MentionFinding()

    lowered = text.lower()
    for name in names:
        if not name or not name.strip():
            continue

        if name.lower() in lowered:
            surface = name
        else:
            surface = fuzzy_match(text, name)
            if surface is None:
                continue
            logger.debug("Fuzzy match for %r: %r", name, surface)

        position = find_position(text, surface)
        return MentionFinding(
            is_mentioned=True,
            position=position if position is not None else 1,
            context_text=extract_context(text, surface),
        )

    return MentionFinding()
