import logging

from fastapi import FastAPI

from seedtrace.config import settings
from seedtrace.middleware.exceptions import register_exception_handlers
from seedtrace.routers import health, identifiers
from seedtrace.services.engine import lifespan


def create_app() -> FastAPI:
    app = FastAPI(
        title="SeedTrace",
        description="Batch and serial number engine for seed-to-sale traceability",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ── Exception Handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── Routers ──────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(identifiers.router, prefix="/api/identifiers", tags=["identifiers"])

    return app


logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

app = create_app()
