"""SQLAlchemy implementation of the document store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import DocumentStoreError
from domain.repositories.document_store import Document
from infrastructure.database.models import DocumentModel

logger = structlog.get_logger()


class SQLAlchemyDocumentStore:
    """SQLAlchemy implementation of IDocumentStore.

    All documents live in one ``documents`` table keyed by
    (collection, id). Each call runs in its own transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, committing on success and translating driver errors."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            # Connection failures from the driver are not always wrapped
            logger.error("document_store_failed", operation=operation, error=str(e))
            raise DocumentStoreError(operation) from e

    async def get(self, collection: str, id: str) -> Document | None:
        """Get a document by key."""
        async with self._session("get") as session:
            model = await session.get(DocumentModel, (collection, id))
            return self._to_document(model) if model else None

    async def put(self, collection: str, id: str, document: Document) -> None:
        """Create or fully replace a document."""
        async with self._session("put") as session:
            model = await session.get(DocumentModel, (collection, id))
            if model is None:
                session.add(DocumentModel(collection=collection, id=id, data=dict(document)))
            else:
                model.data = dict(document)

    async def insert(self, collection: str, document: Document) -> str:
        """Insert a document under a generated key."""
        ids = await self.insert_many(collection, [document])
        return ids[0]

    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        """Insert several documents in a single transaction."""
        ids = [uuid4().hex for _ in documents]
        async with self._session("insert_many") as session:
            session.add_all(
                DocumentModel(collection=collection, id=doc_id, data=dict(document))
                for doc_id, document in zip(ids, documents)
            )
        return ids

    async def query(self, collection: str, **equals: str) -> list[Document]:
        """Return documents whose top-level string fields equal the given values."""
        stmt = select(DocumentModel).where(DocumentModel.collection == collection)
        for key, value in equals.items():
            stmt = stmt.where(DocumentModel.data[key].as_string() == value)
        stmt = stmt.order_by(DocumentModel.created_at, DocumentModel.id)

        async with self._session("query") as session:
            result = await session.execute(stmt)
            return [self._to_document(model) for model in result.scalars()]

    async def ping(self) -> None:
        """Run a trivial statement against the database."""
        async with self._session("ping") as session:
            await session.execute(text("SELECT 1"))

    @staticmethod
    def _to_document(model: DocumentModel) -> Document:
        """Convert an ORM row to a plain document."""
        document = dict(model.data)
        document["id"] = model.id
        return document
