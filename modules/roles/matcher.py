"""Trigram similarity used to resolve free-text role requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

__all__ = ["MatchResult", "match", "similarity", "trigrams"]


@dataclass(frozen=True, slots=True)
class MatchResult:
    key: str
    score: float


def trigrams(text: str) -> frozenset[str]:
    """Return the padded character 3-grams of ``text``, lower-cased.

    Two leading spaces and one trailing space are added so that strings of
    one or two characters still produce trigrams. An empty string yields an
    empty set.
    """

    normalized = (text or "").lower()
    if not normalized:
        return frozenset()
    padded = f"  {normalized} "
    return frozenset(padded[i : i + 3] for i in range(len(padded) - 2))


def similarity(a: str, b: str) -> float:
    """Jaccard coefficient of the trigram sets of ``a`` and ``b``."""

    if (a or "").lower() == (b or "").lower():
        return 1.0
    left = trigrams(a)
    right = trigrams(b)
    if not left or not right:
        return 0.0
    shared = len(left & right)
    if not shared:
        return 0.0
    return shared / len(left | right)


def match(query: str, candidates: Iterable[str]) -> Optional[MatchResult]:
    """Return the best-scoring candidate, or ``None`` when nothing overlaps.

    Candidates are scored in iteration order and only a strictly higher score
    replaces the current best, so ties resolve to the earliest candidate.
    """

    best: Optional[MatchResult] = None
    for candidate in candidates:
        score = similarity(query, candidate)
        if score <= 0.0:
            continue
        if best is None or score > best.score:
            best = MatchResult(key=candidate, score=score)
    return best
