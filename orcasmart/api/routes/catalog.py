"""Catalog endpoints: suggestion, finalization, rules and SKU allocation.

Domain errors propagate to the exception handlers registered in main.
"""

from fastapi import APIRouter, status

from orcasmart.api.deps import OptionalOwner, Owner, Services
from orcasmart.catalog.sku_allocator import AllocationMode
from orcasmart.schemas.catalog import (
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
from orcasmart.schemas.common import DeleteResponse

router = APIRouter()


@router.post(
    "/suggest",
    response_model=SuggestionResponse,
    summary="Suggest a category and prefix for a product",
)
async def suggest(
    request: SuggestRequest,
    owner_id: OptionalOwner,
    services: Services,
) -> SuggestionResponse:
    """Owner rules first (when the caller is known), then SKU prefix, then keywords."""
    suggestion = await services.orchestrator.suggest(
        owner_id=owner_id,
        name=request.name,
        filename=request.filename,
        sku=request.sku,
    )
    return SuggestionResponse.model_validate(suggestion)


@router.post(
    "/finalize",
    response_model=FinalizeResponse,
    summary="Settle category and SKU for a product being saved",
)
async def finalize(
    request: FinalizeRequest,
    owner_id: OptionalOwner,
    services: Services,
) -> FinalizeResponse:
    product = await services.orchestrator.finalize(
        owner_id=owner_id,
        name=request.name,
        sku=request.sku,
        category=request.category,
        mode=AllocationMode(request.mode),
        learn=request.learn,
    )
    return FinalizeResponse.model_validate(product)


@router.post(
    "/learn",
    response_model=RuleResponse,
    summary="Learn a term for the caller",
)
async def learn(
    request: LearnRequest,
    owner_id: Owner,
    services: Services,
) -> RuleResponse:
    """Record a term, bumping its hit count when already known."""
    rule = await services.rules.learn_term(
        owner_id,
        request.term,
        request.category,
        request.prefix,
    )
    return RuleResponse.model_validate(rule)


@router.get(
    "/rules",
    response_model=RuleListResponse,
    summary="List the caller's rules and learned terms",
)
async def list_rules(owner_id: Owner, services: Services) -> RuleListResponse:
    rules = await services.rules.get_rules_for_owner(owner_id)
    return RuleListResponse(rules=[RuleResponse.model_validate(r) for r in rules])


@router.post(
    "/rules",
    response_model=RuleResponse,
    summary="Create or merge a category rule",
)
async def upsert_rule(
    request: RuleRequest,
    owner_id: Owner,
    services: Services,
) -> RuleResponse:
    rule = await services.rules.upsert_category_rule(
        owner_id,
        request.category,
        request.terms,
        priority=request.priority,
        active=request.active,
        rule_id=request.id,
        prefix=request.prefix,
    )
    return RuleResponse.model_validate(rule)


@router.delete(
    "/rules/{rule_id}",
    response_model=DeleteResponse,
    summary="Delete a rule or learned term",
)
async def delete_rule(rule_id: str, owner_id: Owner, services: Services) -> DeleteResponse:
    deleted = await services.rules.delete_rule(owner_id, rule_id)
    return DeleteResponse(id=rule_id, deleted=deleted)


@router.post(
    "/sku",
    response_model=SkuResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Allocate the next SKU for a prefix",
)
async def allocate_sku(
    request: SkuRequest,
    owner_id: OptionalOwner,
    services: Services,
) -> SkuResponse:
    """Owner mode requires the X-Owner-Id header; global mode does not."""
    sku = await services.allocator.allocate(
        request.prefix,
        owner_id=owner_id,
        mode=AllocationMode(request.mode),
    )
    return SkuResponse(sku=sku, prefix=request.prefix, mode=request.mode)
