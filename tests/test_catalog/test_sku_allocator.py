"""Tests for SKU allocation."""

import asyncio

import pytest

from orcasmart.catalog.errors import ValidationError
from orcasmart.catalog.sku_allocator import (
    GLOBAL_SCOPE,
    AllocationMode,
    SkuAllocator,
    format_sku,
    scope_key_for,
)


@pytest.fixture
def allocator(session_factory) -> SkuAllocator:
    return SkuAllocator(session_factory)


class TestFormatSku:
    """Tests for format_sku()."""

    def test_pads_to_four_digits(self):
        assert format_sku("TIN", 1) == "TIN-0001"
        assert format_sku("FERM", 42) == "FERM-0042"

    def test_grows_past_9999(self):
        assert format_sku("TIN", 12345) == "TIN-12345"


class TestScopeKey:
    """Tests for scope_key_for()."""

    def test_global(self):
        assert scope_key_for(AllocationMode.GLOBAL) == GLOBAL_SCOPE
        assert scope_key_for(AllocationMode.GLOBAL, "owner-1") == "global:products"

    def test_owner(self):
        assert scope_key_for(AllocationMode.OWNER, "owner-1") == "owner:owner-1"

    def test_owner_required(self):
        with pytest.raises(ValidationError):
            scope_key_for(AllocationMode.OWNER)


class TestSkuAllocator:
    """Tests for SkuAllocator."""

    @pytest.mark.asyncio
    async def test_sequential(self, allocator: SkuAllocator):
        assert await allocator.next_sku("owner-1", "TIN") == "TIN-0001"
        assert await allocator.next_sku("owner-1", "TIN") == "TIN-0002"
        assert await allocator.current("owner-1", "TIN") == 2

    @pytest.mark.asyncio
    async def test_prefixes_and_scopes_are_independent(self, allocator: SkuAllocator):
        await allocator.next_sku("owner-1", "TIN")
        await allocator.next_sku("owner-1", "TIN")

        assert await allocator.next_sku("owner-1", "ELE") == "ELE-0001"
        assert await allocator.next_sku("owner-2", "TIN") == "TIN-0001"

    @pytest.mark.asyncio
    async def test_current_without_counter(self, allocator: SkuAllocator):
        assert await allocator.current("owner-1", "TIN") == 0

    @pytest.mark.asyncio
    async def test_allocate_modes(self, allocator: SkuAllocator):
        assert await allocator.allocate("TIN", mode=AllocationMode.GLOBAL) == "TIN-0001"
        assert await allocator.allocate("TIN", owner_id="owner-1") == "TIN-0001"
        assert await allocator.allocate("TIN", owner_id="owner-1", mode=AllocationMode.GLOBAL) == "TIN-0002"

        assert await allocator.current(GLOBAL_SCOPE, "TIN") == 2
        assert await allocator.current(scope_key_for(AllocationMode.OWNER, "owner-1"), "TIN") == 1

    @pytest.mark.asyncio
    async def test_owner_named_like_global_scope_has_own_counter(self, allocator: SkuAllocator):
        assert await allocator.allocate("ELE", mode=AllocationMode.GLOBAL) == "ELE-0001"
        assert await allocator.allocate("ELE", owner_id="products") == "ELE-0001"
        assert await allocator.allocate("ELE", owner_id="global:products") == "ELE-0001"
        assert await allocator.current(GLOBAL_SCOPE, "ELE") == 1

    @pytest.mark.asyncio
    async def test_allocate_owner_mode_requires_owner(self, allocator: SkuAllocator):
        with pytest.raises(ValidationError):
            await allocator.allocate("TIN")

    @pytest.mark.asyncio
    async def test_empty_prefix_rejected(self, allocator: SkuAllocator):
        with pytest.raises(ValidationError):
            await allocator.next_sku("owner-1", "")

    @pytest.mark.asyncio
    async def test_concurrent_allocations_are_unique(self, allocator: SkuAllocator):
        skus = await asyncio.gather(*(allocator.next_sku("owner-1", "TIN") for _ in range(20)))

        assert len(set(skus)) == 20
        assert set(skus) == {format_sku("TIN", n) for n in range(1, 21)}
        assert await allocator.current("owner-1", "TIN") == 20
