"""Category registry - per-owner taxonomy with unique prefixes.

Every write runs in a single transaction. The read-check-write sequence
gives readable errors; the ``(owner_id, slug)`` and ``(owner_id, prefix)``
unique constraints make it safe when two writers race.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orcasmart.catalog.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from orcasmart.catalog.normalizer import MIN_PREFIX_LENGTH, clean_prefix, slugify
from orcasmart.catalog.retry import run_with_retry
from orcasmart.infra.database import SessionFactory, transaction
from orcasmart.infra.logging import get_logger
from orcasmart.models import Category

logger = get_logger(__name__)


@dataclass(frozen=True)
class CategoryWriteResult:
    """Outcome of ``create_category``.

    Attributes:
        category: The created or reused category
        reused: True when an existing category with the same slug was updated
    """

    category: Category
    reused: bool


def _require_prefix(raw: str | None) -> str:
    prefix = clean_prefix(raw)
    if len(prefix) < MIN_PREFIX_LENGTH:
        raise ValidationError(
            f"Prefix must have at least {MIN_PREFIX_LENGTH} letters (A-Z), got {raw!r}"
        )
    return prefix


def _require_label(raw: str | None) -> str:
    label = (raw or "").strip()
    if not label:
        raise ValidationError("label is required")
    return label


class CategoryRegistry:
    """CRUD over an owner's categories."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def create_category(
        self,
        owner_id: str,
        label: str,
        prefix: str | None = None,
        slug: str | None = None,
    ) -> CategoryWriteResult:
        """Create a category, or update the one that already has its slug.

        The slug defaults to ``slugify(label)``. The prefix defaults to the
        letters of the slug, uppercased and truncated to five. A reused
        category keeps its stored prefix unless one is given explicitly.

        Raises:
            ValidationError: If label is empty or the prefix has fewer than 2 letters
            ConflictError: If another category of the owner already uses the prefix
        """
        if not owner_id:
            raise ValidationError("owner_id is required")
        label = _require_label(label)
        slug = slugify(slug or label)
        if not slug:
            raise ValidationError(f"Cannot derive a slug from {label!r}")
        requested = _require_prefix(prefix) if prefix else None
        derived = requested or _require_prefix(slug)
        prefix = derived

        async def _write() -> CategoryWriteResult:
            nonlocal prefix
            async with transaction(self._session_factory) as session:
                existing = await self._by_slug(session, owner_id, slug)
                # Reuse without an explicit prefix keeps the SKU namespace
                prefix = requested or (existing.prefix if existing is not None else derived)
                holder = await self._by_prefix(session, owner_id, prefix)

                if holder is not None and (existing is None or holder.id != existing.id):
                    raise ConflictError(
                        f"Prefix '{prefix}' is already used by category '{holder.slug}'"
                    )

                if existing is not None:
                    existing.label = label
                    existing.prefix = prefix
                    existing.active = True
                    await session.flush()
                    return CategoryWriteResult(category=existing, reused=True)

                category = Category(
                    owner_id=owner_id,
                    label=label,
                    slug=slug,
                    prefix=prefix,
                    active=True,
                )
                session.add(category)
                await session.flush()
                return CategoryWriteResult(category=category, reused=False)

        try:
            result = await run_with_retry(_write, name="create_category")
        except IntegrityError as e:
            raise ConflictError(
                f"Category '{slug}' or prefix '{prefix}' was taken concurrently"
            ) from e

        logger.info(
            "Category saved",
            owner_id=owner_id,
            category_id=result.category.id,
            slug=slug,
            prefix=prefix,
            reused=result.reused,
        )
        return result

    async def update_category(
        self,
        owner_id: str,
        category_id: str,
        label: str | None = None,
        prefix: str | None = None,
        active: bool | None = None,
    ) -> Category:
        """Update label, prefix or active flag. The slug never changes.

        Raises:
            NotFoundError: If the category does not exist
            ForbiddenError: If it belongs to another owner
            ValidationError: If the new label or prefix is invalid
            ConflictError: If the new prefix is used by another category
        """
        new_label = _require_label(label) if label is not None else None
        new_prefix = _require_prefix(prefix) if prefix is not None else None

        async def _write() -> Category:
            async with transaction(self._session_factory) as session:
                category = await self._owned(session, owner_id, category_id)

                if new_prefix is not None and new_prefix != category.prefix:
                    holder = await self._by_prefix(session, owner_id, new_prefix)
                    if holder is not None and holder.id != category.id:
                        raise ConflictError(
                            f"Prefix '{new_prefix}' is already used by category '{holder.slug}'"
                        )
                    category.prefix = new_prefix

                if new_label is not None:
                    category.label = new_label
                if active is not None:
                    category.active = active

                await session.flush()
                return category

        try:
            category = await run_with_retry(_write, name="update_category")
        except IntegrityError as e:
            raise ConflictError(f"Prefix '{new_prefix}' was taken concurrently") from e

        logger.info(
            "Category updated",
            owner_id=owner_id,
            category_id=category_id,
            prefix=category.prefix,
            active=category.active,
        )
        return category

    async def delete_category(
        self,
        owner_id: str,
        category_id: str,
        hard: bool = True,
    ) -> bool:
        """Delete a category, or deactivate it when ``hard`` is False.

        Products referencing the category are left untouched. Deleting a
        missing category is a no-op.

        Returns:
            True if a category was deleted or deactivated

        Raises:
            ForbiddenError: If the category belongs to another owner
        """
        async with transaction(self._session_factory) as session:
            category = await session.get(Category, category_id)
            if category is None:
                logger.debug("Category not found, nothing to delete", category_id=category_id)
                return False
            if category.owner_id != owner_id:
                raise ForbiddenError(f"Category '{category_id}' belongs to another owner")

            if hard:
                await session.delete(category)
            else:
                category.active = False

        logger.info(
            "Category deleted",
            owner_id=owner_id,
            category_id=category_id,
            hard=hard,
        )
        return True

    async def list_categories(
        self,
        owner_id: str,
        include_inactive: bool = False,
    ) -> list[Category]:
        """List the owner's categories ordered by label."""
        query = select(Category).where(Category.owner_id == owner_id)
        if not include_inactive:
            query = query.where(Category.active.is_(True))
        query = query.order_by(Category.label, Category.slug)

        async with transaction(self._session_factory) as session:
            return list((await session.scalars(query)).all())

    async def get_category(self, owner_id: str, category_id: str) -> Category:
        """Get one of the owner's categories.

        Raises:
            NotFoundError: If the category does not exist
            ForbiddenError: If it belongs to another owner
        """
        async with transaction(self._session_factory) as session:
            return await self._owned(session, owner_id, category_id)

    async def prefix_map(self, owner_id: str) -> dict[str, str]:
        """Map prefix to slug for the owner's active categories."""
        return {c.prefix: c.slug for c in await self.list_categories(owner_id)}

    async def slug_map(self, owner_id: str) -> dict[str, str]:
        """Map slug to prefix for the owner's active categories."""
        return {c.slug: c.prefix for c in await self.list_categories(owner_id)}

    @staticmethod
    async def _owned(session: AsyncSession, owner_id: str, category_id: str) -> Category:
        category = await session.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"Category '{category_id}' not found")
        if category.owner_id != owner_id:
            raise ForbiddenError(f"Category '{category_id}' belongs to another owner")
        return category

    @staticmethod
    async def _by_slug(session: AsyncSession, owner_id: str, slug: str) -> Category | None:
        return await session.scalar(
            select(Category).where(Category.owner_id == owner_id, Category.slug == slug)
        )

    @staticmethod
    async def _by_prefix(session: AsyncSession, owner_id: str, prefix: str) -> Category | None:
        return await session.scalar(
            select(Category).where(Category.owner_id == owner_id, Category.prefix == prefix)
        )
