"""Liveness and readiness probes."""

import time
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.v1.dependencies import get_document_store
from core.config import settings
from core.exceptions import DocumentStoreError
from domain.repositories.document_store import IDocumentStore

logger = structlog.get_logger()

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    document_store: str | None = None
    document_store_latency_ms: float | None = None


def _report(status: str, **extra: object) -> HealthResponse:
    return HealthResponse(
        status=status,
        version=settings.app_version,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
        **extra,
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    """Answer without touching the document store."""
    return _report("healthy")


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Readiness probe",
)
async def detailed_health_check(
    store: IDocumentStore = Depends(get_document_store),
) -> HealthResponse:
    """
    Ping the document store as well.

    An unreachable store reports ``degraded`` with HTTP 200, so the probe
    itself never fails.
    """
    start = time.perf_counter()
    try:
        await store.ping()
    except DocumentStoreError as e:
        logger.warning("health_store_unreachable", error=e.message)
        return _report("degraded", document_store=f"unhealthy: {e.message}")

    return _report(
        "healthy",
        document_store="healthy",
        document_store_latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )
