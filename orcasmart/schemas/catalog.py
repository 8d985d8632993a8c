"""Catalog schemas: suggestions, rules, categories and SKUs."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from orcasmart.catalog.normalizer import MIN_PREFIX_LENGTH, clean_prefix

Source = Literal["rule", "prefix", "keyword", "none"]
Mode = Literal["owner", "global"]


def _optional_prefix(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    prefix = clean_prefix(v)
    if len(prefix) < MIN_PREFIX_LENGTH:
        raise ValueError(f"prefix must have at least {MIN_PREFIX_LENGTH} letters (A-Z)")
    return prefix


# =============================================================================
# Suggestion / finalize
# =============================================================================


class SuggestRequest(BaseModel):
    """Product data to classify. Every field is optional."""

    name: str | None = Field(default=None, max_length=500, description="Product name")
    filename: str | None = Field(default=None, max_length=500, description="Uploaded image filename")
    sku: str | None = Field(default=None, max_length=100, description="Existing product code")

    model_config = {"extra": "forbid"}


class SuggestionResponse(BaseModel):
    """Category suggestion."""

    category: str | None = Field(description="Category slug, null when nothing matched")
    prefix: str | None = Field(description="SKU prefix")
    source: Source = Field(description="Which step produced the suggestion")
    confidence: float = Field(ge=0.0, le=1.0, description="Coarse trust score")
    matched_term: str | None = Field(default=None, description="Term that matched")

    model_config = {"from_attributes": True}


class FinalizeRequest(BaseModel):
    """Product about to be saved."""

    name: str | None = Field(default=None, max_length=500, description="Product name")
    sku: str | None = Field(default=None, max_length=100, description="Code typed by the user")
    category: str | None = Field(default=None, max_length=200, description="Category chosen by the user")
    mode: Mode = Field(default="owner", description="SKU counter scope")
    learn: bool = Field(
        default=False,
        description="Learn terms from the name when the category was chosen explicitly",
    )

    model_config = {"extra": "forbid"}


class FinalizeResponse(BaseModel):
    """Settled category and SKU."""

    sku: str
    category: str
    prefix: str
    category_source: Source

    model_config = {"from_attributes": True}


# =============================================================================
# Rules
# =============================================================================


class LearnRequest(BaseModel):
    """Single term to learn for the caller."""

    term: str = Field(min_length=1, max_length=200, description="Raw term")
    category: str = Field(min_length=1, max_length=200, description="Category slug")
    prefix: str = Field(min_length=1, max_length=20, description="SKU prefix")

    model_config = {"extra": "forbid"}


class RuleRequest(BaseModel):
    """Create or merge an explicit category rule."""

    id: str | None = Field(default=None, description="Rule to update (omit to merge by category)")
    category: str = Field(min_length=1, max_length=200, description="Category slug")
    terms: list[str] = Field(min_length=1, description="Terms pointing at the category")
    priority: int | None = Field(default=None, description="Higher wins among equal terms")
    active: bool = Field(default=True)
    prefix: str | None = Field(default=None, max_length=20, description="SKU prefix")

    model_config = {"extra": "forbid"}

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str | None) -> str | None:
        """Clean the prefix to 2-5 uppercase letters."""
        return _optional_prefix(v)


class RuleResponse(BaseModel):
    """Category rule or learned term."""

    id: str
    kind: Literal["category", "learned"]
    category: str
    prefix: str | None
    terms: list[str]
    priority: int
    hits: int
    active: bool

    model_config = {"from_attributes": True}


class RuleListResponse(BaseModel):
    rules: list[RuleResponse]


# =============================================================================
# SKU
# =============================================================================


class SkuRequest(BaseModel):
    """Allocate the next SKU for a prefix."""

    prefix: str = Field(min_length=1, max_length=20, description="SKU prefix")
    mode: Mode = Field(default="owner", description="SKU counter scope")

    model_config = {"extra": "forbid"}

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Clean the prefix to 2-5 uppercase letters."""
        prefix = _optional_prefix(v)
        if prefix is None:
            raise ValueError("prefix is required")
        return prefix


class SkuResponse(BaseModel):
    sku: str
    prefix: str
    mode: Mode


# =============================================================================
# Categories
# =============================================================================


class CategoryCreateRequest(BaseModel):
    """Create (or reuse by slug) a category."""

    label: str = Field(min_length=1, max_length=200, description="Display name")
    prefix: str | None = Field(default=None, max_length=20, description="SKU prefix (derived when omitted)")
    slug: str | None = Field(default=None, max_length=200, description="Slug (derived when omitted)")

    model_config = {"extra": "forbid"}


class CategoryUpdateRequest(BaseModel):
    """Partial category update. The slug cannot change."""

    label: str | None = Field(default=None, max_length=200)
    prefix: str | None = Field(default=None, max_length=20)
    active: bool | None = Field(default=None)

    model_config = {"extra": "forbid"}


class CategoryResponse(BaseModel):
    id: str
    label: str
    slug: str
    prefix: str
    active: bool

    model_config = {"from_attributes": True}


class CategoryWriteResponse(BaseModel):
    category: CategoryResponse
    reused: bool = Field(description="True when an existing category with the same slug was updated")


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
