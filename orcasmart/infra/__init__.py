"""Infrastructure - Database and logging."""

from orcasmart.infra.database import (
    DatabaseSession,
    close_db_engine,
    create_schema,
    get_db_session,
    transaction,
)
from orcasmart.infra.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "DatabaseSession",
    "close_db_engine",
    "create_schema",
    "get_db_session",
    "transaction",
    "setup_logging",
    "get_logger",
    "bind_request_context",
    "clear_request_context",
]
