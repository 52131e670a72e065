"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings, RecorderSettings
from errors import register_error_handlers
from repositories.click_repository import ClickRepository
from repositories.indexes import ensure_indexes
from routes.analytics_routes import router as analytics_router
from routes.health_routes import router as health_router
from routes.link_routes import router as link_router
from routes.redirect_routes import router as redirect_router
from services.click_recorder import ClickRecorder
from shared.logging import configure_logging, get_logger

log = get_logger(__name__)


def build_recorder(db, settings: RecorderSettings) -> ClickRecorder:
    return ClickRecorder(
        ClickRepository(db),
        max_queue_size=settings.recorder_queue_size,
        write_timeout=settings.recorder_write_timeout_seconds,
        workers=settings.recorder_workers,
        shutdown_timeout=settings.recorder_shutdown_timeout_seconds,
    )


def register_routes(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(link_router)
    app.include_router(analytics_router)
    # Catch-all /{slug}; must stay last
    app.include_router(redirect_router)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    configure_logging(settings.logging, settings.env)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        await ensure_indexes(app.state.db)

        recorder = build_recorder(app.state.db, settings.recorder)
        app.state.recorder = recorder
        await recorder.start()
        log.info("app_started", env=settings.env, db_name=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await recorder.stop()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)

    return app
