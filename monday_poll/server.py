"""FastAPI application factory and uvicorn entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from monday_poll.api import router
from monday_poll.app import App, AppConfig
from monday_poll.settings import Settings, settings as default_settings
from monday_poll.store import RecordStore


def create_app(config: Optional[Settings] = None) -> FastAPI:
    cfg = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the record store on startup and close its pool on shutdown."""
        store = RecordStore.open(cfg.DATABASE_PATH, pool_size=cfg.DB_POOL_SIZE)
        try:
            app.state.poll_app = await App.create(store, AppConfig.from_settings(cfg))
            logger.info(
                f"Serving submissions from {cfg.DATABASE_PATH} "
                f"(clean_before={cfg.CLEAN_BEFORE}s, clean_timeout={cfg.CLEAN_TIMEOUT}s)"
            )
            yield
        finally:
            await store.close()
            logger.info("Record store closed.")

    app = FastAPI(title="monday-poll", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    from monday_poll.logging import setup_logger

    setup_logger()
    uvicorn.run(create_app(), host=default_settings.bind_host, port=default_settings.bind_port)
