"""Tests for the classification orchestrator."""

import pytest

from orcasmart.catalog.errors import ValidationError
from orcasmart.catalog.orchestrator import Suggestion
from orcasmart.catalog.services import CatalogServices
from orcasmart.catalog.sku_allocator import GLOBAL_SCOPE, AllocationMode, scope_key_for

OWNER = "owner-1"


class TestSuggestion:
    """Tests for the Suggestion dataclass."""

    def test_none(self):
        s = Suggestion.none()
        assert (s.category, s.prefix, s.source, s.confidence) == (None, None, "none", 0.0)
        assert s.matched is False


class TestSuggest:
    """Tests for ClassificationOrchestrator.suggest()."""

    @pytest.mark.asyncio
    async def test_no_match(self, services: CatalogServices):
        result = await services.orchestrator.suggest(owner_id=OWNER, name="xyzzy widget")
        assert result == Suggestion.none()

    @pytest.mark.asyncio
    async def test_unknown_product_never_raises(self, services: CatalogServices):
        result = await services.orchestrator.suggest(owner_id=OWNER, name="xyzzy unknown widget")
        assert (result.category, result.prefix, result.source, result.confidence) == (
            None,
            None,
            "none",
            0.0,
        )

    @pytest.mark.asyncio
    async def test_compound_name_resolves_to_longest_term(self, services: CatalogServices):
        result = await services.orchestrator.suggest(name="tinta acrilica suvinil")
        assert result.prefix == "TIN"
        assert result.matched_term == "acrilica"

    @pytest.mark.asyncio
    async def test_owner_rule_overrides_global_term(self, services: CatalogServices):
        await services.rules.upsert_category_rule(
            OWNER, "ferragens-custom", ["parafuso sextavado"], prefix="FXC"
        )

        result = await services.orchestrator.suggest(owner_id=OWNER, name="parafuso sextavado m8")
        assert (result.category, result.prefix, result.source) == ("ferragens-custom", "FXC", "rule")

    @pytest.mark.asyncio
    async def test_owner_category_then_sequential_skus(self, services: CatalogServices):
        await services.categories.create_category(OWNER, "Tintas", prefix="TIN")

        result = await services.orchestrator.suggest(owner_id=OWNER, name="Tinta Suvinil Latex Branca")
        assert (result.category, result.prefix, result.source, result.confidence) == (
            "tintas",
            "TIN",
            "keyword",
            0.7,
        )
        assert await services.allocator.allocate("TIN", owner_id=OWNER) == "TIN-0001"
        assert await services.allocator.allocate("TIN", owner_id=OWNER) == "TIN-0002"

    @pytest.mark.asyncio
    async def test_nothing_given(self, services: CatalogServices):
        assert await services.orchestrator.suggest() == Suggestion.none()

    @pytest.mark.asyncio
    async def test_keyword(self, services: CatalogServices):
        result = await services.orchestrator.suggest(name="Tinta acrílica")
        assert result.source == "keyword"
        assert result.category == "tintas"
        assert result.prefix == "TIN"
        assert result.confidence == 0.7

    @pytest.mark.asyncio
    async def test_rule_beats_keyword(self, services: CatalogServices):
        await services.rules.upsert_category_rule(OWNER, "ferragens-custom", ["cabo"], prefix="FEC")

        with_owner = await services.orchestrator.suggest(owner_id=OWNER, name="Cabo de aço 6mm")
        assert with_owner.source == "rule"
        assert with_owner.category == "ferragens-custom"
        assert with_owner.confidence == 0.9

        anonymous = await services.orchestrator.suggest(name="Cabo de aço 6mm")
        assert anonymous.source == "keyword"
        assert anonymous.category == "ferragens"

    @pytest.mark.asyncio
    async def test_sku_prefix(self, services: CatalogServices):
        result = await services.orchestrator.suggest(name="Produto sem nome", sku="pint-0042")
        assert result.source == "prefix"
        assert result.category == "tintas"
        assert result.prefix == "PINT"
        assert result.confidence == 0.95

    @pytest.mark.asyncio
    async def test_filename_prefix(self, services: CatalogServices):
        result = await services.orchestrator.suggest(filename="fotos/ELE_0012.jpg")
        assert result.source == "prefix"
        assert result.category == "eletrica"

    @pytest.mark.asyncio
    async def test_filename_keyword(self, services: CatalogServices):
        result = await services.orchestrator.suggest(filename="uploads/lampada_led_9w.png")
        assert result.source == "keyword"
        assert result.category == "iluminacao"

    @pytest.mark.asyncio
    async def test_owner_prefix_first(self, services: CatalogServices):
        await services.categories.create_category(OWNER, "Pisos Premium", prefix="PPR")

        result = await services.orchestrator.suggest(owner_id=OWNER, sku="PPR-0003")
        assert result.source == "prefix"
        assert result.category == "pisos-premium"

    @pytest.mark.asyncio
    async def test_unknown_sku_prefix_falls_through(self, services: CatalogServices):
        result = await services.orchestrator.suggest(name="Tinta latex", sku="ZZZ-0001")
        assert result.source == "keyword"

    @pytest.mark.asyncio
    async def test_keyword_takes_owner_prefix_for_same_slug(self, services: CatalogServices):
        await services.categories.create_category(OWNER, "Tintas", prefix="TNT")

        result = await services.orchestrator.suggest(owner_id=OWNER, name="Tinta acrílica")
        assert result.source == "keyword"
        assert (result.category, result.prefix) == ("tintas", "TNT")

    @pytest.mark.asyncio
    async def test_keyword_takes_owner_slug_for_same_prefix(self, services: CatalogServices):
        await services.categories.create_category(OWNER, "Minhas Tintas", prefix="TIN")

        result = await services.orchestrator.suggest(owner_id=OWNER, name="Tinta acrílica")
        assert (result.category, result.prefix) == ("minhas-tintas", "TIN")


class TestFinalize:
    """Tests for ClassificationOrchestrator.finalize()."""

    @pytest.mark.asyncio
    async def test_explicit_category_allocates(self, services: CatalogServices):
        await services.categories.create_category(OWNER, "Tintas", prefix="TIN")

        first = await services.orchestrator.finalize(OWNER, "Tinta X", category="tintas")
        second = await services.orchestrator.finalize(OWNER, "Tinta Y", category="tintas")

        assert first.sku == "TIN-0001"
        assert second.sku == "TIN-0002"
        assert first.category_source == "prefix"

    @pytest.mark.asyncio
    async def test_explicit_category_forces_prefix(self, services: CatalogServices):
        result = await services.orchestrator.finalize(OWNER, "Tinta", sku="pint-0042", category="tintas")
        assert result.sku == "TIN-0042"
        assert result.prefix == "TIN"

    @pytest.mark.asyncio
    async def test_existing_sku_kept(self, services: CatalogServices):
        result = await services.orchestrator.finalize(OWNER, "Disjuntor 20A", sku="ELE-0099")
        assert result.sku == "ELE-0099"
        assert result.category == "eletrica"
        assert result.category_source == "prefix"
        assert await services.allocator.current(scope_key_for(AllocationMode.OWNER, OWNER), "ELE") == 0

    @pytest.mark.asyncio
    async def test_bare_number_gets_prefix(self, services: CatalogServices):
        result = await services.orchestrator.finalize(OWNER, "Tinta latex", sku="0042")
        assert result.sku == "TIN-0042"
        assert result.category_source == "keyword"

    @pytest.mark.asyncio
    async def test_fallback_category(self, services: CatalogServices):
        result = await services.orchestrator.finalize(OWNER, "xyzzy widget")
        assert result.category == "insumos"
        assert result.sku == "INS-0001"
        assert result.category_source == "none"

    @pytest.mark.asyncio
    async def test_unknown_explicit_category_derives_prefix(self, services: CatalogServices):
        result = await services.orchestrator.finalize(OWNER, "Vaso", category="Louças")
        assert result.category == "loucas"
        assert result.sku == "LOUCA-0001"

    @pytest.mark.asyncio
    async def test_global_mode(self, services: CatalogServices):
        result = await services.orchestrator.finalize(None, "Tinta latex", mode=AllocationMode.GLOBAL)
        assert result.sku == "TIN-0001"
        assert await services.allocator.current(GLOBAL_SCOPE, "TIN") == 1

    @pytest.mark.asyncio
    async def test_owner_mode_without_owner(self, services: CatalogServices):
        with pytest.raises(ValidationError):
            await services.orchestrator.finalize(None, "Tinta latex")

    @pytest.mark.asyncio
    async def test_learn_from_explicit_category(self, services: CatalogServices):
        await services.orchestrator.finalize(
            OWNER, "Rejunte flexível", category="acabamentos", learn=True
        )

        result = await services.orchestrator.suggest(owner_id=OWNER, name="Rejunte cinza 1kg")
        assert result.source == "rule"
        assert result.category == "acabamentos"


class TestEndToEnd:
    """Create a category, classify, allocate."""

    @pytest.mark.asyncio
    async def test_tintas_flow(self, services: CatalogServices):
        created = await services.categories.create_category(OWNER, "Tintas", prefix="TIN")
        assert created.category.slug == "tintas"

        suggestion = await services.orchestrator.suggest(owner_id=OWNER, name="Tinta acrílica Suvinil 18L")
        assert (suggestion.category, suggestion.prefix) == ("tintas", "TIN")

        first = await services.allocator.allocate(suggestion.prefix, owner_id=OWNER)
        second = await services.allocator.allocate(suggestion.prefix, owner_id=OWNER)
        assert (first, second) == ("TIN-0001", "TIN-0002")
