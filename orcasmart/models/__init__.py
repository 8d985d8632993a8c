"""SQLAlchemy models for the catalog engine."""

from orcasmart.models.base import Base, TimestampMixin
from orcasmart.models.catalog_rule import CatalogRule
from orcasmart.models.category import Category
from orcasmart.models.learned_term import LearnedTerm
from orcasmart.models.sku_counter import SkuCounter

__all__ = [
    "Base",
    "TimestampMixin",
    "CatalogRule",
    "Category",
    "LearnedTerm",
    "SkuCounter",
]
