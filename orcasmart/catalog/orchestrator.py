"""Classification orchestrator - rules, then SKU prefix, then keywords.

Ties the catalog components together:
- ``suggest`` guesses (category, prefix) for a product name, filename or code
- ``finalize`` settles category and SKU for a product being saved
"""

import re
from dataclasses import dataclass
from typing import Literal

from orcasmart.catalog.category_registry import CategoryRegistry
from orcasmart.catalog.keyword_classifier import KeywordClassifier
from orcasmart.catalog.matching import Classification
from orcasmart.catalog.normalizer import (
    clean_prefix,
    extract_sku_prefix,
    is_valid_prefix,
    sku_body,
    slugify,
    strip_filename,
)
from orcasmart.catalog.rule_store import RuleStore
from orcasmart.catalog.sku_allocator import AllocationMode, SkuAllocator
from orcasmart.config import settings
from orcasmart.infra.logging import get_logger
from orcasmart.models import Category

logger = get_logger(__name__)

Source = Literal["rule", "prefix", "keyword", "none"]

_HAS_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class Suggestion:
    """Category suggestion with its provenance."""

    category: str | None
    prefix: str | None
    source: Source
    confidence: float
    matched_term: str | None = None

    @classmethod
    def none(cls) -> "Suggestion":
        return cls(category=None, prefix=None, source="none", confidence=0.0)

    @classmethod
    def from_classification(cls, result: Classification, source: Source) -> "Suggestion":
        return cls(
            category=result.category,
            prefix=result.prefix,
            source=source,
            confidence=result.confidence,
            matched_term=result.matched_term,
        )

    @property
    def matched(self) -> bool:
        return self.source != "none"


@dataclass(frozen=True)
class FinalizedProduct:
    """Category and SKU settled for a product."""

    sku: str
    category: str
    prefix: str
    category_source: Source


class ClassificationOrchestrator:
    """Suggest categories and settle SKUs for products."""

    def __init__(
        self,
        rule_store: RuleStore,
        registry: CategoryRegistry,
        keywords: KeywordClassifier,
        allocator: SkuAllocator,
    ) -> None:
        self._rules = rule_store
        self._registry = registry
        self._keywords = keywords
        self._allocator = allocator

    async def suggest(
        self,
        owner_id: str | None = None,
        name: str | None = None,
        filename: str | None = None,
        sku: str | None = None,
    ) -> Suggestion:
        """Suggest a category for a product.

        Stops at the first source that produces a result:
        1. The owner's rules (name, else filename, else sku)
        2. A known prefix carried by ``sku`` or the filename stem
        3. The global keyword table

        Never raises on a miss; returns ``Suggestion.none()`` instead.
        """
        stem = strip_filename(filename)
        text = (name or "").strip() or stem or (sku or "").strip()
        categories = await self._owner_categories(owner_id)

        if owner_id and text:
            by_rule = await self._rules.classify_by_rule(owner_id, text)
            if by_rule is not None:
                return self._log(owner_id, Suggestion.from_classification(by_rule, "rule"))

        by_prefix = self._suggest_from_prefix(categories, sku, filename)
        if by_prefix is not None:
            return self._log(owner_id, by_prefix)

        by_keyword = self._keywords.classify(text)
        if by_keyword is not None:
            return self._log(owner_id, self._align_with_owner(by_keyword, categories))

        logger.debug("No category suggestion", owner_id=owner_id)
        return Suggestion.none()

    async def finalize(
        self,
        owner_id: str | None,
        name: str | None,
        sku: str | None = None,
        category: str | None = None,
        mode: AllocationMode = AllocationMode.OWNER,
        learn: bool = False,
    ) -> FinalizedProduct:
        """Settle category, prefix and SKU for a product being saved.

        An explicit ``category`` wins and forces its prefix onto the SKU.
        Otherwise the suggestion pipeline decides, with the configured
        fallback category when nothing matches. A supplied SKU carrying a
        number is kept; otherwise the next number is allocated.

        Raises:
            ValidationError: If owner-scoped allocation is requested without an owner
        """
        categories = await self._owner_categories(owner_id)

        if category:
            slug = slugify(category)
            prefix = self._prefix_for(slug, categories)
            source: Source = "prefix"
        else:
            suggestion = await self.suggest(owner_id=owner_id, name=name, sku=sku)
            if suggestion.matched and suggestion.category:
                slug = suggestion.category
                prefix = suggestion.prefix or self._prefix_for(slug, categories)
                source = suggestion.source
            else:
                slug = settings.fallback_category
                prefix = self._prefix_for(slug, categories)
                source = "none"

        final_sku = self._reuse_sku(sku, prefix, forced=bool(category))
        if final_sku is None:
            final_sku = await self._allocator.allocate(prefix, owner_id=owner_id, mode=mode)

        if learn and category and owner_id and name:
            await self._rules.learn_from_classification(owner_id, name, slug, prefix)

        logger.info(
            "Product finalized",
            owner_id=owner_id,
            sku=final_sku,
            category=slug,
            source=source,
        )
        return FinalizedProduct(
            sku=final_sku,
            category=slug,
            prefix=prefix,
            category_source=source,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _owner_categories(self, owner_id: str | None) -> list[Category]:
        if not owner_id:
            return []
        return await self._registry.list_categories(owner_id)

    def _suggest_from_prefix(
        self,
        categories: list[Category],
        sku: str | None,
        filename: str | None,
    ) -> Suggestion | None:
        by_prefix = {c.prefix: c.slug for c in categories}
        stem = strip_filename(filename).replace(" ", "-")

        for candidate in (sku, stem):
            prefix = extract_sku_prefix(candidate)
            if not prefix:
                continue
            category = by_prefix.get(prefix) or self._keywords.category_for_prefix(prefix)
            if category:
                return Suggestion(
                    category=category,
                    prefix=prefix,
                    source="prefix",
                    confidence=settings.prefix_confidence,
                )
        return None

    def _align_with_owner(
        self,
        result: Classification,
        categories: list[Category],
    ) -> Suggestion:
        """Map a keyword hit onto the owner's own category when one corresponds."""
        suggestion = Suggestion.from_classification(result, "keyword")
        for c in categories:
            if c.slug == result.category:
                return Suggestion(
                    category=c.slug,
                    prefix=c.prefix,
                    source="keyword",
                    confidence=result.confidence,
                    matched_term=result.matched_term,
                )
        for c in categories:
            if c.prefix == result.prefix:
                return Suggestion(
                    category=c.slug,
                    prefix=c.prefix,
                    source="keyword",
                    confidence=result.confidence,
                    matched_term=result.matched_term,
                )
        return suggestion

    def _prefix_for(self, slug: str, categories: list[Category]) -> str:
        for c in categories:
            if c.slug == slug:
                return c.prefix
        known = self._keywords.prefix_for_category(slug)
        if known:
            return known
        if slug == settings.fallback_category:
            return settings.fallback_prefix
        derived = clean_prefix(slug)
        return derived if is_valid_prefix(derived) else settings.fallback_prefix

    @staticmethod
    def _reuse_sku(sku: str | None, prefix: str, *, forced: bool) -> str | None:
        """Keep a supplied SKU that already carries a number.

        A bare number gets the prefix prepended. With ``forced`` the
        category's prefix replaces whatever prefix the SKU had. Returns None
        when a new number must be allocated.
        """
        value = (sku or "").strip().upper()
        if not value or not _HAS_DIGIT.search(value):
            return None

        current = extract_sku_prefix(value)
        if current is None:
            return f"{prefix}-{value}"
        if forced and current != prefix:
            return f"{prefix}-{sku_body(value)}"
        return value

    @staticmethod
    def _log(owner_id: str | None, suggestion: Suggestion) -> Suggestion:
        logger.info(
            "Category suggested",
            owner_id=owner_id,
            category=suggestion.category,
            prefix=suggestion.prefix,
            source=suggestion.source,
            confidence=suggestion.confidence,
        )
        return suggestion
