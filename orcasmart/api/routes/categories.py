"""Category endpoints for the caller's taxonomy."""

from fastapi import APIRouter, Query

from orcasmart.api.deps import Owner, Services
from orcasmart.schemas.catalog import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    CategoryWriteResponse,
)
from orcasmart.schemas.common import DeleteResponse

router = APIRouter()


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    owner_id: Owner,
    services: Services,
    include_inactive: bool = Query(default=False, description="Include soft-deleted categories"),
) -> CategoryListResponse:
    categories = await services.categories.list_categories(owner_id, include_inactive)
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories]
    )


@router.post("", response_model=CategoryWriteResponse, summary="Create or reuse a category")
async def create_category(
    request: CategoryCreateRequest,
    owner_id: Owner,
    services: Services,
) -> CategoryWriteResponse:
    """Create a category; an existing slug is updated and reported as reused."""
    result = await services.categories.create_category(
        owner_id,
        request.label,
        prefix=request.prefix,
        slug=request.slug,
    )
    return CategoryWriteResponse(
        category=CategoryResponse.model_validate(result.category),
        reused=result.reused,
    )


@router.patch("/{category_id}", response_model=CategoryResponse, summary="Update a category")
async def update_category(
    category_id: str,
    request: CategoryUpdateRequest,
    owner_id: Owner,
    services: Services,
) -> CategoryResponse:
    category = await services.categories.update_category(
        owner_id,
        category_id,
        label=request.label,
        prefix=request.prefix,
        active=request.active,
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", response_model=DeleteResponse, summary="Delete a category")
async def delete_category(
    category_id: str,
    owner_id: Owner,
    services: Services,
    hard: bool = Query(default=True, description="False keeps the category as inactive"),
) -> DeleteResponse:
    deleted = await services.categories.delete_category(owner_id, category_id, hard=hard)
    return DeleteResponse(id=category_id, deleted=deleted)
