"""Tests for the per-owner category registry."""

import pytest

from orcasmart.catalog.category_registry import CategoryRegistry
from orcasmart.catalog.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

OWNER = "owner-1"
OTHER = "owner-2"


@pytest.fixture
def registry(session_factory) -> CategoryRegistry:
    return CategoryRegistry(session_factory)


class TestCreateCategory:
    """Tests for CategoryRegistry.create_category()."""

    @pytest.mark.asyncio
    async def test_explicit_prefix(self, registry: CategoryRegistry):
        result = await registry.create_category(OWNER, "Tintas", prefix="tin")
        assert result.reused is False
        assert result.category.slug == "tintas"
        assert result.category.prefix == "TIN"
        assert result.category.active is True
        assert result.category.id

    @pytest.mark.asyncio
    async def test_derived_slug_and_prefix(self, registry: CategoryRegistry):
        result = await registry.create_category(OWNER, "Elétrica Predial")
        assert result.category.slug == "eletrica-predial"
        assert result.category.prefix == "ELETR"

    @pytest.mark.asyncio
    async def test_explicit_slug(self, registry: CategoryRegistry):
        result = await registry.create_category(OWNER, "Pisos e Revestimentos", prefix="PIS", slug="pisos")
        assert result.category.slug == "pisos"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "label, prefix",
        [("", "TIN"), ("   ", None), ("Tintas", "T"), ("Tintas", "1-2"), ("1", None)],
    )
    async def test_validation(self, registry: CategoryRegistry, label, prefix):
        with pytest.raises(ValidationError):
            await registry.create_category(OWNER, label, prefix=prefix)

    @pytest.mark.asyncio
    async def test_same_slug_is_reused(self, registry: CategoryRegistry):
        first = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        second = await registry.create_category(OWNER, "tintas", prefix="TNT")

        assert second.reused is True
        assert second.category.id == first.category.id
        assert second.category.prefix == "TNT"
        assert second.category.label == "tintas"
        assert len(await registry.list_categories(OWNER)) == 1

    @pytest.mark.asyncio
    async def test_reuse_without_prefix_keeps_existing_prefix(self, registry: CategoryRegistry):
        first = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        second = await registry.create_category(OWNER, "Tintas")

        assert second.reused is True
        assert second.category.id == first.category.id
        assert second.category.prefix == "TIN"
        assert await registry.prefix_map(OWNER) == {"TIN": "tintas"}

    @pytest.mark.asyncio
    async def test_prefix_conflict(self, registry: CategoryRegistry):
        await registry.create_category(OWNER, "Tintas", prefix="TIN")
        with pytest.raises(ConflictError, match="TIN"):
            await registry.create_category(OWNER, "Tijolos", prefix="TIN")

    @pytest.mark.asyncio
    async def test_owners_do_not_share_prefix_space(self, registry: CategoryRegistry):
        await registry.create_category(OWNER, "Tintas", prefix="TIN")
        result = await registry.create_category(OTHER, "Tijolos", prefix="TIN")
        assert result.reused is False

    @pytest.mark.asyncio
    async def test_soft_deleted_category_is_reactivated(self, registry: CategoryRegistry):
        first = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        await registry.delete_category(OWNER, first.category.id, hard=False)

        again = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        assert again.reused is True
        assert again.category.active is True


class TestUpdateCategory:
    """Tests for CategoryRegistry.update_category()."""

    @pytest.mark.asyncio
    async def test_update_label_keeps_slug(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        updated = await registry.update_category(OWNER, created.category.id, label="Tintas e Vernizes")

        assert updated.label == "Tintas e Vernizes"
        assert updated.slug == "tintas"

    @pytest.mark.asyncio
    async def test_update_prefix(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        updated = await registry.update_category(OWNER, created.category.id, prefix="tnt")
        assert updated.prefix == "TNT"

    @pytest.mark.asyncio
    async def test_update_prefix_conflict(self, registry: CategoryRegistry):
        await registry.create_category(OWNER, "Tintas", prefix="TIN")
        other = await registry.create_category(OWNER, "Tijolos", prefix="TIJ")

        with pytest.raises(ConflictError):
            await registry.update_category(OWNER, other.category.id, prefix="TIN")

    @pytest.mark.asyncio
    async def test_update_missing(self, registry: CategoryRegistry):
        with pytest.raises(NotFoundError):
            await registry.update_category(OWNER, "missing", label="x")

    @pytest.mark.asyncio
    async def test_update_other_owner(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        with pytest.raises(ForbiddenError):
            await registry.update_category(OTHER, created.category.id, label="x")

    @pytest.mark.asyncio
    async def test_update_invalid_values(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        with pytest.raises(ValidationError):
            await registry.update_category(OWNER, created.category.id, prefix="T")
        with pytest.raises(ValidationError):
            await registry.update_category(OWNER, created.category.id, label="  ")


class TestDeleteCategory:
    """Tests for CategoryRegistry.delete_category()."""

    @pytest.mark.asyncio
    async def test_hard_delete(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")

        assert await registry.delete_category(OWNER, created.category.id) is True
        assert await registry.delete_category(OWNER, created.category.id) is False
        assert await registry.list_categories(OWNER, include_inactive=True) == []

    @pytest.mark.asyncio
    async def test_soft_delete(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        await registry.delete_category(OWNER, created.category.id, hard=False)

        assert await registry.list_categories(OWNER) == []
        inactive = await registry.list_categories(OWNER, include_inactive=True)
        assert [c.active for c in inactive] == [False]

    @pytest.mark.asyncio
    async def test_delete_other_owner(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")
        with pytest.raises(ForbiddenError):
            await registry.delete_category(OTHER, created.category.id)


class TestQueries:
    """Tests for list/get/map queries."""

    @pytest.mark.asyncio
    async def test_list_ordered_by_label(self, registry: CategoryRegistry):
        await registry.create_category(OWNER, "Tintas", prefix="TIN")
        await registry.create_category(OWNER, "Elétrica", prefix="ELE")
        await registry.create_category(OWNER, "Hidráulica", prefix="HID")
        await registry.create_category(OTHER, "Areia", prefix="ARE")

        labels = [c.label for c in await registry.list_categories(OWNER)]
        assert labels == ["Elétrica", "Hidráulica", "Tintas"]

    @pytest.mark.asyncio
    async def test_get_category(self, registry: CategoryRegistry):
        created = await registry.create_category(OWNER, "Tintas", prefix="TIN")

        fetched = await registry.get_category(OWNER, created.category.id)
        assert fetched.slug == "tintas"

        with pytest.raises(ForbiddenError):
            await registry.get_category(OTHER, created.category.id)
        with pytest.raises(NotFoundError):
            await registry.get_category(OWNER, "missing")

    @pytest.mark.asyncio
    async def test_maps(self, registry: CategoryRegistry):
        await registry.create_category(OWNER, "Tintas", prefix="TIN")
        await registry.create_category(OWNER, "Elétrica", prefix="ELE")

        assert await registry.prefix_map(OWNER) == {"TIN": "tintas", "ELE": "eletrica"}
        assert await registry.slug_map(OWNER) == {"tintas": "TIN", "eletrica": "ELE"}
