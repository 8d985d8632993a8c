"""Tests for catalog models."""

from sqlalchemy import UniqueConstraint

from orcasmart.models import CatalogRule, Category, LearnedTerm, SkuCounter


def _unique_sets(model) -> set[tuple[str, ...]]:
    return {
        tuple(c.name for c in constraint.columns)
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    }


def test_category_tablename():
    """Category should map to catalog_categories table."""
    assert Category.__tablename__ == "catalog_categories"


def test_category_columns():
    columns = {c.name for c in Category.__table__.columns}
    assert {"id", "owner_id", "label", "slug", "prefix", "active", "created_at", "updated_at"} <= columns


def test_category_unique_per_owner():
    """Slug and prefix should each be unique within an owner."""
    assert _unique_sets(Category) == {("owner_id", "slug"), ("owner_id", "prefix")}


def test_catalog_rule_unique_per_category():
    assert CatalogRule.__tablename__ == "catalog_rules"
    assert _unique_sets(CatalogRule) == {("owner_id", "category")}


def test_catalog_rule_prefix_optional():
    assert CatalogRule.__table__.c.prefix.nullable is True


def test_learned_term_unique_per_normalized_term():
    assert LearnedTerm.__tablename__ == "catalog_learned_terms"
    assert _unique_sets(LearnedTerm) == {("owner_id", "term_norm")}


def test_sku_counter_primary_key():
    """Counters should be keyed by (scope, prefix)."""
    assert SkuCounter.__tablename__ == "sku_counters"
    assert [c.name for c in SkuCounter.__table__.primary_key.columns] == ["scope", "prefix"]
