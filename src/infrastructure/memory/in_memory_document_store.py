"""In-process implementation of the document store.

Used for local development (DOCUMENT_STORE_BACKEND=memory) and tests.
Documents are deep-copied on the way in and out so callers never share
mutable state with the store.
"""

import copy
from uuid import uuid4

from domain.repositories.document_store import Document


class InMemoryDocumentStore:
    """Dictionary-backed implementation of IDocumentStore."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    async def get(self, collection: str, id: str) -> Document | None:
        """Get a document by key."""
        document = self._collections.get(collection, {}).get(id)
        if document is None:
            return None
        return self._with_id(id, document)

    async def put(self, collection: str, id: str, document: Document) -> None:
        """Create or fully replace a document."""
        self._collections.setdefault(collection, {})[id] = copy.deepcopy(document)

    async def insert(self, collection: str, document: Document) -> str:
        """Insert a document under a generated key."""
        doc_id = uuid4().hex
        await self.put(collection, doc_id, document)
        return doc_id

    async def insert_many(self, collection: str, documents: list[Document]) -> list[str]:
        """Insert several documents; there is no await between the writes."""
        staged = {uuid4().hex: copy.deepcopy(doc) for doc in documents}
        self._collections.setdefault(collection, {}).update(staged)
        return list(staged)

    async def query(self, collection: str, **equals: str) -> list[Document]:
        """Return documents matching every equality filter, in insertion order."""
        return [
            self._with_id(doc_id, document)
            for doc_id, document in self._collections.get(collection, {}).items()
            if all(document.get(key) == value for key, value in equals.items())
        ]

    async def ping(self) -> None:
        return None

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        return len(self._collections.get(collection, {}))

    @staticmethod
    def _with_id(doc_id: str, document: Document) -> Document:
        result = copy.deepcopy(document)
        result["id"] = doc_id
        return result
