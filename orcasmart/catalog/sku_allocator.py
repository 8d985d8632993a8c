"""SKU allocator - monotonic ``PREFIX-NNNN`` codes.

Counters live in ``sku_counters`` keyed by (scope, prefix). Each allocation
is one ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING`` statement, so two
concurrent callers can never observe the same number.
"""

from enum import Enum

from sqlalchemy import select

from orcasmart.catalog.errors import ValidationError
from orcasmart.catalog.retry import run_with_retry
from orcasmart.infra.database import SessionFactory, insert_for, transaction
from orcasmart.infra.logging import get_logger
from orcasmart.models import SkuCounter
from orcasmart.models.base import utcnow

logger = get_logger(__name__)

GLOBAL_SCOPE = "global:products"
OWNER_SCOPE_PREFIX = "owner:"


class AllocationMode(str, Enum):
    """Counter scoping strategy.

    GLOBAL shares one sequence per prefix across the whole catalog;
    OWNER keeps one sequence per prefix for every owner. Scope keys are
    namespaced by mode, so an owner id can never collide with the global scope.
    """

    GLOBAL = "global"
    OWNER = "owner"


def format_sku(prefix: str, number: int) -> str:
    """Format a SKU (``format_sku("TIN", 7)`` -> ``"TIN-0007"``).

    Numbers above 9999 keep growing in width.
    """
    return f"{prefix}-{number:04d}"


def scope_key_for(mode: AllocationMode, owner_id: str | None = None) -> str:
    """Counter scope key for an allocation mode.

    Raises:
        ValidationError: If OWNER mode is used without an owner id
    """
    if AllocationMode(mode) is AllocationMode.GLOBAL:
        return GLOBAL_SCOPE
    if not owner_id:
        raise ValidationError("owner_id is required for owner-scoped SKU allocation")
    return f"{OWNER_SCOPE_PREFIX}{owner_id}"


class SkuAllocator:
    """Issue the next SKU number for a prefix."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def next_sku(self, scope_key: str, prefix: str) -> str:
        """Atomically increment the counter and return the formatted SKU.

        The prefix is an opaque key here; callers validate it.

        Raises:
            ValidationError: If scope key or prefix is empty
            TransientStoreError: If the increment kept failing under contention
        """
        if not scope_key or not prefix:
            raise ValidationError("scope_key and prefix are required")

        async def _increment() -> int:
            async with transaction(self._session_factory) as session:
                now = utcnow()
                counter = SkuCounter.__table__.c
                stmt = insert_for(session, SkuCounter).values(
                    scope=scope_key,
                    prefix=prefix,
                    next=1,
                    updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["scope", "prefix"],
                    set_={"next": counter.next + 1, "updated_at": now},
                ).returning(counter.next)
                result = await session.execute(stmt)
                return result.scalar_one()

        number = await run_with_retry(_increment, name="next_sku")
        sku = format_sku(prefix, number)
        logger.info("SKU allocated", scope=scope_key, prefix=prefix, sku=sku)
        return sku

    async def allocate(
        self,
        prefix: str,
        owner_id: str | None = None,
        mode: AllocationMode = AllocationMode.OWNER,
    ) -> str:
        """Allocate the next SKU for ``prefix`` in the scope selected by ``mode``."""
        return await self.next_sku(scope_key_for(mode, owner_id), prefix)

    async def current(self, scope_key: str, prefix: str) -> int:
        """Last number issued for the prefix in the scope (0 if none yet)."""
        async with transaction(self._session_factory) as session:
            value = await session.scalar(
                select(SkuCounter.next).where(
                    SkuCounter.scope == scope_key,
                    SkuCounter.prefix == prefix,
                )
            )
        return value or 0
