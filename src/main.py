"""Pickle Connect API entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_engine
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter, rate_limit_exceeded_handler
from infrastructure.database.session import create_tables

logger = structlog.get_logger()

setup_logging()

DESCRIPTION = f"""\
## Player Profiles and Connections

Players publish a profile (name, skill rating, contact info, play
preferences), share it as a link or QR code, and connect with the players
they meet on court.

- **Profiles**: one per signed-in player, replaced in full on every save
- **Share links**: `/player/<id>` URLs, shown publicly without phone or email
- **Connections**: always mutual; connecting twice is reported, not repeated

### Authentication
Send the Supabase access token as `Authorization: Bearer <token>`.
`GET /api/v1/players/{{id}}` also works signed out.

### Rate Limits
- Reads: {READ_LIMIT}
- Writes: {WRITE_LIMIT}
"""

OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and readiness probes"},
    {"name": "profiles", "description": "Own profile, share link and public player view"},
    {"name": "connections", "description": "Connections between players"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prepare the document store on startup and release it on shutdown."""
    uses_database = settings.document_store_backend == "sqlalchemy"

    if uses_database and settings.auto_create_tables:
        await create_tables(get_engine())
        logger.info("documents_table_ready")

    logger.info(
        "app_started",
        environment=settings.app_env,
        document_store=settings.document_store_backend,
        public_origin=settings.public_origin,
    )
    yield

    if uses_database:
        await get_engine().dispose()
    logger.info("app_stopped")


def _add_middleware(app: FastAPI) -> None:
    # Starlette wraps in reverse: the last one added runs first
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "PUT", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )


def create_app() -> FastAPI:
    """Build the application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=DESCRIPTION,
        version=settings.app_version,
        debug=settings.debug,
        license_info={"name": "MIT"},
        openapi_tags=OPENAPI_TAGS,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    setup_exception_handlers(app)

    _add_middleware(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
