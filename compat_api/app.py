"""FastAPI application factory"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from compat_api import __version__
from compat_api.core.config import get_settings
from compat_api.core.dependencies import close_discord_api, close_github_api
from compat_api.core.logging import setup_logging
from compat_api.routers import discord_router, games_router, reports_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "xenios-compat-api"

# Track server start time
_start_time: float = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time
    _start_time = time.time()

    settings = get_settings()

    logger.info("Starting compatibility API server")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Document: {settings.repo_full_name}@{settings.branch}:{settings.compat_path}")
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is empty; reads and commits will fail")
    if not settings.api_key:
        logger.warning("API_KEY is empty; /report and /board will reject every request")
    if not settings.discord_public_key:
        logger.warning("DISCORD_PUBLIC_KEY is empty; /discord will reject every request")

    yield

    logger.info("Shutting down compatibility API server")
    try:
        await close_github_api()
        await close_discord_api()
    except Exception as e:
        logger.exception(f"Error during shutdown: {e}")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as ``{"error": message}``"""
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    app = FastAPI(
        title="XeniOS Compatibility API",
        description="Receives compatibility reports from the app, Discord and GitHub",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # The app and the website call from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]

    # Register routers
    app.include_router(games_router.router)
    app.include_router(reports_router.router)
    app.include_router(discord_router.router)

    @app.get("/")
    @app.get("/health")
    async def health():
        """Liveness check (no external dependency)"""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "uptime_seconds": int(time.time() - _start_time),
        }

    logger.info("FastAPI application configured")

    return app
