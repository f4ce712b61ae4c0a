"""Child-safety screening for generated quiz content.

This is a lexical deny-list, not moderation. A term only matches as a whole
word, case-insensitively, so "bad" is caught while "badge" and "badminton"
pass. Anything phrased without a listed word (euphemisms, misspellings,
unsafe ideas in safe vocabulary) goes through. Treat a pass as "nothing on
the list", never as "appropriate for children".
"""

from __future__ import annotations

import re
from typing import Iterable

__all__ = ["DEFAULT_DENY_TERMS", "SafetyFilter", "is_safe", "unsafe_terms"]

DEFAULT_DENY_TERMS: tuple[str, ...] = (
    "scary",
    "frightening",
    "death",
    "kill",
    "violence",
    "weapon",
    "blood",
    "hurt",
    "pain",
    "fight",
    "war",
    "bomb",
    "gun",
    "knife",
    "dangerous",
    "poison",
    "toxic",
    "hate",
    "stupid",
    "dumb",
    "bad",
    "evil",
    "monster",
    "ghost",
    "devil",
    "hell",
    "damn",
)


class SafetyFilter:
    """Whole-word, case-insensitive matcher over a fixed set of terms."""

    def __init__(self, extra_terms: Iterable[str] = ()) -> None:
        terms = {t.strip().lower() for t in DEFAULT_DENY_TERMS}
        terms.update(t.strip().lower() for t in extra_terms if t.strip())
        self.terms = tuple(sorted(terms))
        alternation = "|".join(re.escape(t) for t in self.terms)
        self._pattern = re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)

    def matches(self, text: str | None) -> list[str]:
        if not text:
            return []
        return sorted({m.group(0).lower() for m in self._pattern.finditer(text)})

    def is_safe(self, text: str | None) -> bool:
        if not text:
            return True
        return self._pattern.search(text) is None


_DEFAULT_FILTER = SafetyFilter()


def is_safe(text: str | None) -> bool:
    """Return ``True`` when ``text`` contains no deny-listed word."""

    return _DEFAULT_FILTER.is_safe(text)


def unsafe_terms(text: str | None) -> list[str]:
    """Return the deny-listed words found in ``text`` (lower-cased)."""

    return _DEFAULT_FILTER.matches(text)
