"""Unit tests for document store selection."""

import pytest

from api.v1.dependencies import create_document_store
from infrastructure.memory.in_memory_document_store import InMemoryDocumentStore


def test_memory_backend() -> None:
    assert isinstance(create_document_store("memory"), InMemoryDocumentStore)


def test_unknown_backend_raises() -> None:
    with pytest.raises(ValueError, match="firestore"):
        create_document_store("firestore")
