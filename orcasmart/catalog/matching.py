"""Substring matching shared by the keyword classifier and the rule store."""

from collections.abc import Iterable
from dataclasses import dataclass

from orcasmart.catalog.keyword_table import TermEntry


@dataclass(frozen=True)
class Classification:
    """Result of a successful classification.

    Attributes:
        category: Category slug
        prefix: SKU prefix, None when the source knows no prefix
        confidence: Coarse trust score between 0 and 1
        matched_term: Raw term that produced the match
    """

    category: str
    prefix: str | None
    confidence: float
    matched_term: str


def first_match(entries: Iterable[TermEntry], text_norm: str) -> TermEntry | None:
    """Return the first entry whose normalized term occurs in ``text_norm``.

    Entries must already be ordered by priority (most specific first).
    """
    if not text_norm:
        return None
    for entry in entries:
        if entry.term_norm and entry.term_norm in text_norm:
            return entry
    return None
