"""Tests for structured logging helpers."""

import pytest
import structlog
from httpx import AsyncClient

from orcasmart import __version__
from orcasmart.config import settings
from orcasmart.infra.logging import (
    add_service_context,
    bind_request_context,
    clear_request_context,
)


@pytest.fixture(autouse=True)
def _clean_context():
    clear_request_context()
    yield
    clear_request_context()


class TestServiceContext:
    """Tests for the service identity processor."""

    def test_stamps_service_fields(self):
        event = add_service_context(None, "info", {"event": "SKU allocated"})
        assert event["service"] == settings.log_service_name == "orcasmart-catalog"
        assert event["version"] == __version__
        assert event["environment"] == settings.environment

    def test_keeps_explicit_values(self):
        event = add_service_context(None, "info", {"event": "x", "service": "seed-script"})
        assert event["service"] == "seed-script"


class TestRequestContext:
    """Tests for per-request context binding."""

    def test_binds_owner_and_values(self):
        bind_request_context("owner-1", path="/catalog/suggest", method=None)
        assert structlog.contextvars.get_contextvars() == {
            "owner_id": "owner-1",
            "path": "/catalog/suggest",
        }

    def test_anonymous_caller(self):
        bind_request_context(None, path="/health")
        assert "owner_id" not in structlog.contextvars.get_contextvars()

    def test_rebinding_replaces_previous_request(self):
        bind_request_context("owner-1", path="/a")
        bind_request_context("owner-2")
        assert structlog.contextvars.get_contextvars() == {"owner_id": "owner-2"}

    def test_clear(self):
        bind_request_context("owner-1")
        clear_request_context()
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_request_context_does_not_leak(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Owner-Id": "owner-1"})
        assert response.status_code == 200
        assert structlog.contextvars.get_contextvars() == {}
