"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from classfolio.api.routers.auth import router as auth_router
from classfolio.auth.http import handle_http_exception
from classfolio.auth.http import handle_unexpected_exception
from classfolio.auth.http import handle_validation_exception
from classfolio.core.config import Settings
from classfolio.core.config import load_settings
from classfolio.core.logging_config import setup_logging
from classfolio.runtime import build_runtime
from classfolio.runtime import startup

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its own runtime handles."""
    settings = settings or load_settings()
    setup_logging(settings.classfolio_log_level.upper())
    runtime = build_runtime(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        startup(runtime)
        logger.info(
            "classfolio started env=%s db=%s",
            settings.classfolio_app_env,
            settings.classfolio_sqlite_path,
        )
        yield

    app = FastAPI(title="classfolio", lifespan=lifespan)
    app.state.runtime = runtime
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
    app.include_router(auth_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
