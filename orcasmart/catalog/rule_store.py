"""User rule store - per-owner overrides of the global keyword table.

Two kinds of records back the store:
- explicit category rules (``catalog_rules``), one per owner and category,
  each holding a list of terms and a priority;
- learned terms (``catalog_learned_terms``), one per owner and normalized
  term, with a hit counter bumped every time the term is learned again.

Both are checked before the keyword table. Term collisions between records
of the same owner are not reconciled; the most specific (longest) term wins
and, on equal terms, explicit rules beat learned terms, then higher
priority, then the most recent write.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from typing import Literal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orcasmart.catalog.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from orcasmart.catalog.keyword_classifier import KeywordClassifier
from orcasmart.catalog.keyword_table import TermEntry
from orcasmart.catalog.learning import extract_learnable_terms
from orcasmart.catalog.matching import Classification, first_match
from orcasmart.catalog.normalizer import (
    MIN_PREFIX_LENGTH,
    clean_prefix,
    normalize,
    slugify,
)
from orcasmart.catalog.retry import run_with_retry
from orcasmart.config import settings
from orcasmart.infra.database import SessionFactory, insert_for, transaction
from orcasmart.infra.logging import get_logger
from orcasmart.models import CatalogRule, Category, LearnedTerm
from orcasmart.models.base import new_id, utcnow

logger = get_logger(__name__)

RuleKind = Literal["category", "learned"]


@dataclass(frozen=True)
class Rule:
    """Read-only view over a category rule or a learned term."""

    id: str
    owner_id: str
    kind: RuleKind
    category: str
    prefix: str | None
    terms: tuple[str, ...]
    priority: int = 0
    hits: int = 0
    active: bool = True

    @classmethod
    def from_category_rule(cls, row: CatalogRule) -> Rule:
        return cls(
            id=row.id,
            owner_id=row.owner_id,
            kind="category",
            category=row.category,
            prefix=row.prefix,
            terms=tuple(row.terms or ()),
            priority=row.priority,
            active=row.active,
        )

    @classmethod
    def from_learned_term(cls, row: LearnedTerm) -> Rule:
        return cls(
            id=row.id,
            owner_id=row.owner_id,
            kind="learned",
            category=row.category,
            prefix=row.prefix,
            terms=(row.term,),
            hits=row.hits,
        )


def _clean_terms(terms: list[str] | tuple[str, ...] | None) -> list[str]:
    """Trim terms and drop empties and normalized duplicates, keeping order."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in terms or ():
        term = str(raw or "").strip()
        term_norm = normalize(term)
        if not term_norm or term_norm in seen:
            continue
        seen.add(term_norm)
        cleaned.append(term)
    return cleaned


def _validated_prefix(raw: str | None, *, required: bool) -> str | None:
    prefix = clean_prefix(raw)
    if not prefix:
        if required:
            raise ValidationError("prefix is required")
        return None
    if len(prefix) < MIN_PREFIX_LENGTH:
        raise ValidationError(f"prefix must have at least {MIN_PREFIX_LENGTH} letters")
    return prefix


def _written_at(row: CatalogRule | LearnedTerm) -> float:
    """Epoch seconds of the row's last write; naive values are UTC."""
    value = row.updated_at or row.created_at
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


class RuleStore:
    """Per-owner rules checked before the global keyword table."""

    def __init__(
        self,
        session_factory: SessionFactory,
        keywords: KeywordClassifier | None = None,
        confidence: float | None = None,
    ) -> None:
        """Initialize the rule store.

        Args:
            session_factory: Async session factory for the catalog database
            keywords: Keyword classifier used to resolve missing rule prefixes
            confidence: Confidence for rule matches (defaults to settings)
        """
        self._session_factory = session_factory
        self._keywords = keywords or KeywordClassifier()
        self._confidence = settings.rule_confidence if confidence is None else confidence

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_rules_for_owner(self, owner_id: str) -> list[Rule]:
        """All rules of one owner: category rules first, then learned terms."""
        async with transaction(self._session_factory) as session:
            rules = await self._load_category_rules(session, owner_id, only_active=False)
            learned = await self._load_learned_terms(session, owner_id)

        return [Rule.from_category_rule(r) for r in rules] + [
            Rule.from_learned_term(t) for t in learned
        ]

    async def classify_by_rule(self, owner_id: str | None, text: str | None) -> Classification | None:
        """Classify text using the owner's rules.

        Same substring policy as the keyword classifier. Among terms of the
        same length, explicit category rules beat learned terms, then higher
        priority and higher hit counts win, then the most recent write.

        Returns:
            Classification, or None when the owner has no matching rule
        """
        text_norm = normalize(text)
        if not owner_id or not text_norm:
            return None

        async with transaction(self._session_factory) as session:
            rules = await self._load_category_rules(session, owner_id, only_active=True)
            learned = await self._load_learned_terms(session, owner_id)
            category_prefixes = await self._category_prefixes(session, owner_id)

        ranked: list[tuple[tuple[int, int, int, int, float], TermEntry]] = []
        for rule in rules:
            for term in rule.terms or ():
                term_norm = normalize(term)
                if term_norm:
                    ranked.append(
                        ((-len(term_norm), 0, -rule.priority, 0, -_written_at(rule)),
                         TermEntry(term, term_norm, rule.category, rule.prefix))
                    )
        for row in learned:
            ranked.append(
                ((-len(row.term_norm), 1, 0, -row.hits, -_written_at(row)),
                 TermEntry(row.term, row.term_norm, row.category, row.prefix))
            )
        ranked.sort(key=lambda item: item[0])

        entry = first_match((e for _, e in ranked), text_norm)
        if entry is None:
            return None

        prefix = (
            entry.prefix
            or category_prefixes.get(entry.category)
            or self._keywords.prefix_for_category(entry.category)
        )
        logger.debug(
            "Rule match",
            owner_id=owner_id,
            category=entry.category,
            prefix=prefix,
            term=entry.term,
        )
        return Classification(
            category=entry.category,
            prefix=prefix,
            confidence=self._confidence,
            matched_term=entry.term,
        )

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    async def learn_term(
        self,
        owner_id: str,
        raw_term: str,
        category: str,
        prefix: str,
    ) -> Rule:
        """Record one term for the owner, or bump it if already known.

        A single atomic upsert keyed by (owner, normalized term): new terms
        start with ``hits=1``; known terms take the latest category and
        prefix and get ``hits + 1``.

        Raises:
            ValidationError: If owner, term, category or prefix is missing
            TransientStoreError: If the upsert kept failing under contention
        """
        term = (raw_term or "").strip()
        category = slugify(category)
        if not owner_id:
            raise ValidationError("owner_id is required")
        if not term or not category:
            raise ValidationError("term, category and prefix are required")
        clean = _validated_prefix(prefix, required=True)
        term_norm = normalize(term)
        if not term_norm:
            raise ValidationError(f"Invalid term: {raw_term!r}")

        async def _upsert() -> LearnedTerm:
            async with transaction(self._session_factory) as session:
                now = utcnow()
                stmt = insert_for(session, LearnedTerm).values(
                    id=new_id(),
                    owner_id=owner_id,
                    term=term,
                    term_norm=term_norm,
                    category=category,
                    prefix=clean,
                    hits=1,
                    created_at=now,
                    updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["owner_id", "term_norm"],
                    set_={
                        "category": stmt.excluded.category,
                        "prefix": stmt.excluded.prefix,
                        "hits": LearnedTerm.__table__.c.hits + 1,
                        "updated_at": now,
                    },
                ).returning(LearnedTerm)
                result = await session.scalars(
                    stmt, execution_options={"populate_existing": True}
                )
                return result.one()

        row = await run_with_retry(_upsert, name="learn_term")
        logger.info(
            "Term learned",
            owner_id=owner_id,
            term=term_norm,
            category=category,
            prefix=clean,
            hits=row.hits,
        )
        return Rule.from_learned_term(row)

    async def learn_from_classification(
        self,
        owner_id: str,
        text: str,
        category: str,
        prefix: str,
    ) -> list[Rule]:
        """Learn a few tokens of an accepted classification.

        Uses the learning heuristic to pick tokens. New terms are skipped
        once the owner already has the configured maximum of learned terms
        for the category; terms already known for it are still refreshed.
        """
        terms = extract_learnable_terms(text)
        if not terms:
            return []

        category = slugify(category)
        async with transaction(self._session_factory) as session:
            known = set(
                (
                    await session.scalars(
                        select(LearnedTerm.term_norm).where(
                            LearnedTerm.owner_id == owner_id,
                            LearnedTerm.category == category,
                        )
                    )
                ).all()
            )

        room = settings.learn_max_terms_per_category - len(known)
        learned: list[Rule] = []
        for term in terms:
            if term not in known:
                if room <= 0:
                    logger.info(
                        "Learned term limit reached, skipping",
                        owner_id=owner_id,
                        category=category,
                        term=term,
                    )
                    continue
                room -= 1
            learned.append(await self.learn_term(owner_id, term, category, prefix))
        return learned

    # ------------------------------------------------------------------
    # Explicit rules
    # ------------------------------------------------------------------

    async def upsert_category_rule(
        self,
        owner_id: str,
        category: str,
        terms: list[str] | tuple[str, ...],
        priority: int | None = None,
        active: bool = True,
        *,
        rule_id: str | None = None,
        prefix: str | None = None,
    ) -> Rule:
        """Create or merge an explicit rule for one category.

        Without ``rule_id`` the owner's rule for ``category`` is merged into
        (or created). With ``rule_id`` that rule is updated after an
        ownership check. ``terms`` replaces the stored term list.

        Raises:
            ValidationError: If category or terms are empty, or prefix is too short
            NotFoundError: If ``rule_id`` does not exist
            ForbiddenError: If ``rule_id`` belongs to another owner
            ConflictError: If the owner already has another rule for the category
        """
        slug = slugify(category)
        cleaned = _clean_terms(terms)
        if not owner_id:
            raise ValidationError("owner_id is required")
        if not slug:
            raise ValidationError("category is required")
        if not cleaned:
            raise ValidationError("terms must contain at least one term")
        clean = _validated_prefix(prefix, required=False)

        async def _write() -> Rule:
            async with transaction(self._session_factory) as session:
                if rule_id:
                    row = await session.get(CatalogRule, rule_id)
                    if row is None:
                        raise NotFoundError(f"Rule '{rule_id}' not found")
                    if row.owner_id != owner_id:
                        raise ForbiddenError(f"Rule '{rule_id}' belongs to another owner")
                else:
                    row = await session.scalar(
                        select(CatalogRule).where(
                            CatalogRule.owner_id == owner_id,
                            CatalogRule.category == slug,
                        )
                    )

                if row is None:
                    row = CatalogRule(
                        owner_id=owner_id,
                        category=slug,
                        prefix=clean,
                        terms=cleaned,
                        priority=priority or 0,
                        active=active,
                        updated_at=utcnow(),
                    )
                    session.add(row)
                else:
                    row.category = slug
                    row.terms = cleaned
                    row.active = active
                    row.updated_at = utcnow()
                    if priority is not None:
                        row.priority = priority
                    if clean:
                        row.prefix = clean

                await session.flush()
                return Rule.from_category_rule(row)

        try:
            rule = await run_with_retry(_write, name="upsert_category_rule")
        except IntegrityError as e:
            raise ConflictError(
                f"Owner already has a rule for category '{slug}'"
            ) from e

        logger.info(
            "Category rule saved",
            owner_id=owner_id,
            rule_id=rule.id,
            category=slug,
            terms=len(cleaned),
        )
        return rule

    async def delete_rule(self, owner_id: str, rule_id: str) -> bool:
        """Delete a category rule or learned term.

        Idempotent: deleting an unknown id is not an error.

        Returns:
            True if something was deleted

        Raises:
            ForbiddenError: If the rule belongs to another owner
        """
        async with transaction(self._session_factory) as session:
            for model in (CatalogRule, LearnedTerm):
                row = await session.get(model, rule_id)
                if row is None:
                    continue
                if row.owner_id != owner_id:
                    raise ForbiddenError(f"Rule '{rule_id}' belongs to another owner")
                await session.delete(row)
                logger.info("Rule deleted", owner_id=owner_id, rule_id=rule_id)
                return True

        logger.debug("Rule not found, nothing to delete", owner_id=owner_id, rule_id=rule_id)
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _load_category_rules(
        session: AsyncSession, owner_id: str, *, only_active: bool
    ) -> list[CatalogRule]:
        query = select(CatalogRule).where(CatalogRule.owner_id == owner_id)
        if only_active:
            query = query.where(CatalogRule.active.is_(True))
        query = query.order_by(CatalogRule.priority.desc(), CatalogRule.category)
        return list((await session.scalars(query)).all())

    @staticmethod
    async def _load_learned_terms(session: AsyncSession, owner_id: str) -> list[LearnedTerm]:
        query = (
            select(LearnedTerm)
            .where(LearnedTerm.owner_id == owner_id)
            .order_by(LearnedTerm.hits.desc(), LearnedTerm.term_norm)
        )
        return list((await session.scalars(query)).all())

    @staticmethod
    async def _category_prefixes(session: AsyncSession, owner_id: str) -> dict[str, str]:
        rows = await session.execute(
            select(Category.slug, Category.prefix).where(
                Category.owner_id == owner_id,
                Category.active.is_(True),
            )
        )
        return {slug: prefix for slug, prefix in rows.all()}
