"""FastAPI dependencies for dependency injection.

Provides:
- Owner id from the gateway header
- Catalog services
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from orcasmart.catalog.services import CatalogServices, get_catalog_services
from orcasmart.infra.logging import get_logger

logger = get_logger(__name__)


async def get_owner_id(
    x_owner_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """Extract the owner id from the request header.

    Authentication happens upstream; the gateway forwards the
    authenticated user as ``X-Owner-Id``.

    Returns:
        Owner id, or None for anonymous callers
    """
    if not x_owner_id or not x_owner_id.strip():
        logger.debug("No X-Owner-Id header")
        return None
    return x_owner_id.strip()


async def require_owner_id(
    owner_id: Annotated[str | None, Depends(get_owner_id)],
) -> str:
    """Owner id for endpoints that touch owner data.

    Raises:
        HTTPException: 401 if the header is missing
    """
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Owner-Id header",
        )
    return owner_id


async def get_services() -> CatalogServices:
    """Get catalog services dependency."""
    return get_catalog_services()


# Type aliases for cleaner annotations
OptionalOwner = Annotated[str | None, Depends(get_owner_id)]
Owner = Annotated[str, Depends(require_owner_id)]
Services = Annotated[CatalogServices, Depends(get_services)]
