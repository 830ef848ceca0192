"""Dependency injection factories for API v1."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import settings
from domain.repositories.document_store import IDocumentStore
from domain.services.profile_connection_service import ProfileConnectionService
from infrastructure.database.session import build_engine, build_session_factory
from infrastructure.database.sqlalchemy_document_store import SQLAlchemyDocumentStore
from infrastructure.memory.in_memory_document_store import InMemoryDocumentStore
from infrastructure.qr.segno_encoder import SegnoQREncoder


def create_document_store(backend: str = settings.document_store_backend) -> IDocumentStore:
    """Instantiate the configured document store backend."""
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "sqlalchemy":
        return SQLAlchemyDocumentStore(build_session_factory(get_engine()))
    raise ValueError(f"Unsupported document store backend: {backend!r}")


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the shared async engine."""
    return build_engine()


@lru_cache
def get_document_store() -> IDocumentStore:
    """Get the document store singleton."""
    return create_document_store()


def get_profile_connection_service(
    store: IDocumentStore = Depends(get_document_store),
) -> ProfileConnectionService:
    """Get a ProfileConnection service bound to the document store."""
    return ProfileConnectionService(store)


@lru_cache
def get_qr_encoder() -> SegnoQREncoder:
    """Get QR encoder instance."""
    return SegnoQREncoder()
