"""FastAPI application entry point.

Catalog engine service: category suggestion, owner rules, category
registry and SKU allocation.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orcasmart import __version__
from orcasmart.api.routes import catalog_router, categories_router, health_router
from orcasmart.catalog.errors import (
    CatalogError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from orcasmart.catalog.keyword_table import get_keyword_table, reset_keyword_table
from orcasmart.catalog.services import reset_catalog_services
from orcasmart.config import settings
from orcasmart.infra.database import close_db_engine, create_schema, verify_db_connection
from orcasmart.infra.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from orcasmart.schemas.common import ErrorResponse

# Setup logging first
setup_logging()
logger = get_logger(__name__)

_ERROR_STATUS: dict[type[CatalogError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    TransientStoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Load the keyword table (fails fast on a broken table)
    - Create tables in dev
    - Verify database connection

    Shutdown:
    - Close database connections
    - Drop cached table and services
    """
    logger.info("Catalog engine starting", environment=settings.environment)

    table = get_keyword_table()
    logger.info("Keyword table ready", version=table.version, groups=len(table.groups))

    if settings.environment == "dev":
        try:
            await create_schema()
        except Exception as e:
            logger.warning("Failed to create schema", error=str(e))

    db_ok = await verify_db_connection()
    if not db_ok:
        logger.warning("Database connection failed - will retry on first request")

    yield

    logger.info("Catalog engine shutting down")
    await close_db_engine()
    reset_catalog_services()
    reset_keyword_table()
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="OrçaSmart Catalog Engine",
    description="Product categorization and SKU assignment",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

# CORS middleware (mainly for local development)
if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Bind the caller's owner id to every log event of the request."""
    owner_id = request.headers.get("X-Owner-Id", "").strip()
    bind_request_context(owner_id or None, method=request.method, path=request.url.path)

    try:
        response = await call_next(request)
        logger.debug("Request handled", status_code=response.status_code)
        return response
    finally:
        clear_request_context()


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Map catalog errors to HTTP status codes."""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Catalog request rejected",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        status_code=status_code,
    )

    body = ErrorResponse(error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    body = ErrorResponse(error="Internal server error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=body.model_dump())


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router, prefix="/catalog", tags=["Catalog"])
app.include_router(categories_router, prefix="/categories", tags=["Categories"])


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/")
async def root() -> dict:
    """Root endpoint - basic service info."""
    return {
        "service": "OrçaSmart Catalog Engine",
        "version": __version__,
        "environment": settings.environment,
    }
