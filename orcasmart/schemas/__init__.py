"""Pydantic schemas for request/response validation."""

from orcasmart.schemas.catalog import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    CategoryWriteResponse,
    FinalizeRequest,
    FinalizeResponse,
    LearnRequest,
    RuleListResponse,
    RuleRequest,
    RuleResponse,
    SkuRequest,
    SkuResponse,
    SuggestionResponse,
    SuggestRequest,
)
from orcasmart.schemas.common import DeleteResponse, ErrorResponse, HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "DeleteResponse",
    "SuggestRequest",
    "SuggestionResponse",
    "FinalizeRequest",
    "FinalizeResponse",
    "LearnRequest",
    "RuleRequest",
    "RuleResponse",
    "RuleListResponse",
    "SkuRequest",
    "SkuResponse",
    "CategoryCreateRequest",
    "CategoryUpdateRequest",
    "CategoryResponse",
    "CategoryWriteResponse",
    "CategoryListResponse",
]
