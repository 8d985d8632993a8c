"""Catalog engine - categorization, user rules, categories and SKU allocation."""

from orcasmart.catalog.category_registry import CategoryRegistry, CategoryWriteResult
from orcasmart.catalog.errors import (
    CatalogError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from orcasmart.catalog.keyword_classifier import KeywordClassifier
from orcasmart.catalog.keyword_table import KeywordTable, get_keyword_table, load_keyword_table
from orcasmart.catalog.matching import Classification
from orcasmart.catalog.orchestrator import (
    ClassificationOrchestrator,
    FinalizedProduct,
    Suggestion,
)
from orcasmart.catalog.rule_store import Rule, RuleStore
from orcasmart.catalog.services import (
    CatalogServices,
    build_catalog_services,
    get_catalog_services,
    reset_catalog_services,
)
from orcasmart.catalog.sku_allocator import AllocationMode, SkuAllocator, format_sku

__all__ = [
    "AllocationMode",
    "CatalogError",
    "CatalogServices",
    "CategoryRegistry",
    "CategoryWriteResult",
    "Classification",
    "ClassificationOrchestrator",
    "ConflictError",
    "FinalizedProduct",
    "ForbiddenError",
    "KeywordClassifier",
    "KeywordTable",
    "NotFoundError",
    "Rule",
    "RuleStore",
    "SkuAllocator",
    "Suggestion",
    "TransientStoreError",
    "ValidationError",
    "build_catalog_services",
    "format_sku",
    "get_catalog_services",
    "get_keyword_table",
    "load_keyword_table",
    "reset_catalog_services",
]
