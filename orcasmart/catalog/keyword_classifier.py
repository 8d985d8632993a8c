"""Keyword classifier - global fallback classification."""

from orcasmart.catalog.keyword_table import KeywordTable, TermEntry, get_keyword_table
from orcasmart.catalog.matching import Classification, first_match
from orcasmart.catalog.normalizer import normalize
from orcasmart.config import settings
from orcasmart.infra.logging import get_logger

logger = get_logger(__name__)


class KeywordClassifier:
    """Classify free text against the global keyword table.

    Term entries are flattened and sorted once at construction; the longest
    contained term wins, ties resolved by table order.
    """

    def __init__(
        self,
        table: KeywordTable | None = None,
        confidence: float | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            table: Keyword table (defaults to the process-wide table)
            confidence: Confidence for matches (defaults to settings)
        """
        self._table = table or get_keyword_table()
        self._entries: tuple[TermEntry, ...] = tuple(self._table.entries())
        self._prefixes = self._table.prefix_map()
        self._confidence = settings.keyword_confidence if confidence is None else confidence

    @property
    def table(self) -> KeywordTable:
        return self._table

    def classify(self, text: str | None) -> Classification | None:
        """Classify text by keyword.

        Returns:
            Classification, or None when no term occurs in the text
        """
        entry = first_match(self._entries, normalize(text))
        if entry is None:
            return None

        logger.debug(
            "Keyword match",
            category=entry.category,
            prefix=entry.prefix,
            term=entry.term,
        )
        return Classification(
            category=entry.category,
            prefix=entry.prefix,
            confidence=self._confidence,
            matched_term=entry.term,
        )

    def category_for_prefix(self, prefix: str | None) -> str | None:
        """Category slug of a known prefix or prefix alias."""
        if not prefix:
            return None
        return self._prefixes.get(prefix.upper())

    def prefix_for_category(self, category: str | None) -> str | None:
        """Primary prefix of a category slug known to the table."""
        if not category:
            return None
        return self._table.category_prefix(category)
