"""
Application factory

Request pipeline, outermost first:

1. StructuredLoggingMiddleware - access log and request id
2. ConsentMiddleware - consent state derived from the request cookies
3. general admission control (router dependency on everything under /api)
4. per-operation admission control (posts, replies, login)
5. access control gate (per-operation role sets)
6. handler, whose cookie writes go through the consent-gated writer
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forum.config import Settings, settings
from forum.database import init_models
from forum.exception_handlers import register_exception_handlers
from forum.middleware.consent import ConsentMiddleware
from forum.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from forum.middleware.rate_limit import LimiterClass, configure_rate_limiting, rate_limit
from forum.routes import auth, categories, cookies, health, posts, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up the application...")
    await init_models()
    yield
    logger.info("Shutting down the application...")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application."""
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        description="Forum backend with consent-aware, rate-limited, role-gated request handling",
        debug=app_settings.debug,
        version=app_settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    register_exception_handlers(app)
    configure_rate_limiting(
        app,
        production=app_settings.is_production,
        storage_uri=app_settings.rate_limit_storage_uri,
    )

    # Added last runs first
    app.add_middleware(ConsentMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    api = APIRouter(prefix="/api", dependencies=[Depends(rate_limit(LimiterClass.GENERAL))])
    api.include_router(auth.router, prefix="/auth")
    api.include_router(users.router, prefix="/users")
    api.include_router(categories.router, prefix="/categories")
    api.include_router(posts.router, prefix="/posts")
    api.include_router(cookies.router, prefix="/cookies")

    app.include_router(health.router)
    app.include_router(api)

    if app_settings.debug:
        logger.info(f"Running in {app_settings.environment} mode")

    return app


setup_structured_logging(settings.log_level, json_format=settings.log_json)
app = create_app()
