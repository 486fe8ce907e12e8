"""Wiring of the identifier engine into the FastAPI app.

Usage:
    In main.py:

        from seedtrace.services.engine import lifespan
        app = FastAPI(lifespan=lifespan, ...)

    In a router:

        service: IdentifierService = Depends(get_identifier_service)

Tests replace the engine with in-memory stores by setting
``app.state.identifier_service`` before the first request, or through
``app.dependency_overrides[get_identifier_service]``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seedtrace.config import Settings, settings
from seedtrace.database import async_session, create_schema, engine
from seedtrace.identifiers.allocator import SequenceAllocator
from seedtrace.identifiers.service import IdentifierService
from seedtrace.services.mappings import SqlMappingStore
from seedtrace.services.sequences import SqlCounterStore
from seedtrace.utils.cache import ResolutionCache, close_redis, get_redis

logger = logging.getLogger("seedtrace.engine")


async def build_service(
    session_factory: async_sessionmaker[AsyncSession] = async_session,
    config: Settings = settings,
) -> IdentifierService:
    """Assemble an IdentifierService over the SQL stores."""
    cache = None
    if config.resolution_cache_enabled:
        cache = ResolutionCache(await get_redis(), ttl=config.resolution_cache_ttl)

    return IdentifierService(
        allocator=SequenceAllocator(SqlCounterStore(session_factory)),
        store=SqlMappingStore(session_factory),
        cache=cache,
        default_requested_by=config.default_requested_by,
        max_bulk_serials=config.max_bulk_serials,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema (when configured) and the shared service."""
    if getattr(app.state, "identifier_service", None) is None:
        if settings.auto_create_schema:
            await create_schema(engine)
            logger.info("Database schema ensured")
        app.state.identifier_service = await build_service()
        logger.info("Identifier engine started")

    yield

    await close_redis()
    await engine.dispose()
    logger.info("Identifier engine stopped")


def get_identifier_service(request: Request) -> IdentifierService:
    return request.app.state.identifier_service
