"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from uuid import uuid4

# Test settings must be in place before the app modules read them
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DOCUMENT_STORE_BACKEND"] = "memory"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["PUBLIC_ORIGIN"] = "https://pickle.test"

import pytest
from httpx import ASGITransport, AsyncClient

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.memory.in_memory_document_store import InMemoryDocumentStore

TEST_SECRET = "test-secret-key"


@pytest.fixture
def alice() -> Identity:
    """A signed-in player."""
    return Identity(id=f"alice-{uuid4().hex[:8]}", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob() -> Identity:
    """A second signed-in player, distinct from alice."""
    return Identity(id=f"bob-{uuid4().hex[:8]}", email="bob@example.com", display_name="Bob")


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key=TEST_SECRET,
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_headers_for(auth_provider: JWTAuthProvider) -> Callable[[Identity], dict[str, str]]:
    """Build authorization headers for any identity."""

    def _headers(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(identity)}"}

    return _headers


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """A fresh, empty document store."""
    return InMemoryDocumentStore()


@pytest.fixture
async def client(
    document_store: InMemoryDocumentStore,
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async test client wired to an in-memory document store.

    Tokens issued by ``auth_provider`` are accepted; requests without a
    token reach the routes as signed out.
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_document_store
    from main import create_app

    app = create_app()
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
