"""Document store protocol."""

from typing import Any, Protocol

Document = dict[str, Any]


class IDocumentStore(Protocol):
    """Collection/key addressed document persistence.

    Every single-document write is atomic. ``insert_many`` writes all of
    its documents or none of them. Documents returned by ``get`` and
    ``query`` carry their key under ``"id"``.
    """

    async def get(self, collection: str, id: str) -> Document | None:
        """Get a document by key. Returns None when absent."""
        ...

    async def put(self, collection: str, id: str, document: Document) -> None:
        """Create or fully replace the document at ``id``."""
        ...

    async def insert(self, collection: str, document: Document) -> str:
        """Insert a document under a generated key and return the key."""
        ...

    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        """Insert several documents atomically, returning their keys in order."""
        ...

    async def query(self, collection: str, **equals: str) -> list[Document]:
        """Return documents whose fields equal every given value.

        Each returned document carries its key under ``"id"``.
        """
        ...

    async def ping(self) -> None:
        """Raise if the store is unreachable."""
        ...
