"""FastAPI application wiring for the credential service."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.service import Authenticator
from .repository import InMemoryAccountStore, PostgresAccountStore
from .security.passwords import PasswordHasher
from .seed import seed_accounts

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; the store backend is chosen from ``settings``."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise the credential store and authenticator for the app lifecycle."""
        hasher = PasswordHasher(settings.password_hash_rounds)
        pool: ConnectionPool | None = None
        if settings.store_backend == "memory":
            logger.info("credential store using in-memory backend")
            store = InMemoryAccountStore(hasher)
        elif settings.store_backend == "postgres":
            logger.info("credential store using postgres backend")
            pool = ConnectionPool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                open=False,
            )
            pool.open()
            store = PostgresAccountStore(pool, hasher)
        else:
            raise ValueError(f"unknown store backend: {settings.store_backend!r}")

        try:
            if isinstance(store, PostgresAccountStore):
                await asyncio.to_thread(store.ensure_schema)
            if settings.seed_demo_accounts:
                await seed_accounts(store)

            app.state.store = store
            app.state.authenticator = Authenticator(store, hasher)
            yield
        finally:
            if pool is not None:
                pool.close()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.dependency_overrides[get_settings] = lambda: settings

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(v1_router)
    return app


app = create_app()
