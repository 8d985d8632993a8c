"""Process-wide catalog components, wired once at startup."""

from dataclasses import dataclass

from orcasmart.catalog.category_registry import CategoryRegistry
from orcasmart.catalog.keyword_classifier import KeywordClassifier
from orcasmart.catalog.keyword_table import KeywordTable, get_keyword_table
from orcasmart.catalog.orchestrator import ClassificationOrchestrator
from orcasmart.catalog.rule_store import RuleStore
from orcasmart.catalog.sku_allocator import SkuAllocator
from orcasmart.infra.database import SessionFactory, get_session_factory


@dataclass(frozen=True)
class CatalogServices:
    """The catalog components sharing one session factory and keyword table."""

    keywords: KeywordClassifier
    rules: RuleStore
    categories: CategoryRegistry
    allocator: SkuAllocator
    orchestrator: ClassificationOrchestrator


def build_catalog_services(
    session_factory: SessionFactory,
    table: KeywordTable | None = None,
) -> CatalogServices:
    """Wire the catalog components together."""
    keywords = KeywordClassifier(table or get_keyword_table())
    rules = RuleStore(session_factory, keywords)
    categories = CategoryRegistry(session_factory)
    allocator = SkuAllocator(session_factory)
    return CatalogServices(
        keywords=keywords,
        rules=rules,
        categories=categories,
        allocator=allocator,
        orchestrator=ClassificationOrchestrator(rules, categories, keywords, allocator),
    )


# Singleton services
_services: CatalogServices | None = None


def get_catalog_services() -> CatalogServices:
    """Get catalog services singleton bound to the global database."""
    global _services
    if _services is None:
        _services = build_catalog_services(get_session_factory())
    return _services


def reset_catalog_services() -> None:
    """Drop the singleton (after the engine is closed)."""
    global _services
    _services = None
