"""Shared fixtures: temporary SQLite catalog database and wired components."""

import os
import tempfile
from pathlib import Path

# Settings are read once at import time, so the environment goes first.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="orcasmart-tests-"))
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_TMP_DIR / 'global.db'}")
os.environ.setdefault("STORE_RETRY_BACKOFF_SECONDS", "0.01")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from orcasmart.api.deps import get_services
from orcasmart.catalog.keyword_classifier import KeywordClassifier
from orcasmart.catalog.keyword_table import BUNDLED_TABLE_PATH, KeywordTable, load_keyword_table
from orcasmart.catalog.services import CatalogServices, build_catalog_services
from orcasmart.infra.database import build_session_factory, create_schema


@pytest.fixture(scope="session")
def keyword_table() -> KeywordTable:
    """The bundled keyword table."""
    return load_keyword_table(BUNDLED_TABLE_PATH)


@pytest.fixture
def keywords(keyword_table: KeywordTable) -> KeywordClassifier:
    return KeywordClassifier(keyword_table)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh file-backed SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def services(session_factory, keyword_table: KeywordTable) -> CatalogServices:
    return build_catalog_services(session_factory, keyword_table)


@pytest_asyncio.fixture
async def client(services: CatalogServices):
    """HTTP client over the app, with catalog services bound to the test database."""
    from orcasmart.main import app

    app.dependency_overrides[get_services] = lambda: services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
