"""Main FastAPI application for the Listening Insights API."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insights_api.constants import APP_DESCRIPTION, APP_TITLE, APP_VERSION, Routes, ServiceName
from insights_api.dependencies import db_manager
from insights_api.logging import configure_logging
from insights_api.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from insights_api.sessions.router import router as sessions_router
from insights_api.settings import get_settings


class InsightsApp:
    """Application container: configures middleware, routers, and lifespan."""

    app: FastAPI

    def __init__(self) -> None:
        configure_logging(ServiceName.API, get_settings().LOG_LEVEL)
        self.app = FastAPI(
            title=APP_TITLE,
            description=APP_DESCRIPTION,
            version=APP_VERSION,
            lifespan=self._lifespan,
        )
        self._setup_middleware()
        self._setup_routers()

    @staticmethod
    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Application lifespan: release database connections on shutdown."""
        try:
            yield
        finally:
            await db_manager.dispose()

    def _setup_middleware(self) -> None:
        settings = get_settings()

        # Security headers
        self.app.add_middleware(SecurityHeadersMiddleware)

        # Request-ID (generates/propagates X-Request-ID)
        self.app.add_middleware(RequestIDMiddleware)

        # CORS
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _setup_routers(self) -> None:
        self.app.include_router(sessions_router, tags=[Routes.SESSIONS_TAG])

        @self.app.get(Routes.HEALTH)
        async def health_check() -> dict[str, str]:
            """Health check endpoint."""
            return {"status": "healthy"}


_application = InsightsApp()
app: FastAPI = _application.app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run("insights_api.main:app", host="0.0.0.0", port=8000)
