"""Pytest configuration and fixtures for SeedTrace tests.

Provides in-memory and SQLite-backed identifier services and an HTTP
client bound to the app.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from seedtrace.database import create_schema, make_engine, make_sessionmaker
from seedtrace.identifiers import (
    IdentifierService,
    InMemoryCounterStore,
    InMemoryMappingStore,
    SequenceAllocator,
)
from seedtrace.main import create_app
from seedtrace.services.mappings import SqlMappingStore
from seedtrace.services.sequences import SqlCounterStore

# Fixed "today" so future-date checks do not depend on the wall clock
TODAY = date(2025, 12, 10)
BATCH_DATE = date(2025, 12, 6)


# ── In-memory engine ─────────────────────────────────────────────

@pytest.fixture
def counter_store() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def mapping_store() -> InMemoryMappingStore:
    return InMemoryMappingStore()


@pytest.fixture
def allocator(counter_store) -> SequenceAllocator:
    return SequenceAllocator(counter_store)


@pytest.fixture
def service(allocator, mapping_store) -> IdentifierService:
    return IdentifierService(allocator, mapping_store, today=lambda: TODAY)


# ── SQLite engine ────────────────────────────────────────────────

@pytest_asyncio.fixture
async def sql_engine(tmp_path):
    """File-backed SQLite database with all tables created."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'seedtrace_test.db'}")
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return make_sessionmaker(sql_engine)


@pytest.fixture
def sql_service(session_factory) -> IdentifierService:
    return IdentifierService(
        SequenceAllocator(SqlCounterStore(session_factory)),
        SqlMappingStore(session_factory),
        today=lambda: TODAY,
    )


# ── HTTP client ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """Client against a fresh app whose engine is the in-memory service."""
    app = create_app()
    app.state.identifier_service = service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "cache: Resolution cache tests")
