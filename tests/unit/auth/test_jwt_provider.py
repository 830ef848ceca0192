"""Unit tests for JWTAuthProvider.

Covers:
- identity extraction from HS256 tokens (ids, display name fallbacks)
- validate_token returning None when payload lacks sub or email
- _get_jwks_keys() fetching, caching, and error handling
- _validate_es256() with a mocked JWKS endpoint
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from domain.entities.identity import Identity
from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWTAuthProvider, _get_jwks_keys

JWKS_URL = "https://example.supabase.co/auth/v1/.well-known/jwks.json"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    """Create an HS256-signed JWT with a given payload."""
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _mock_jwks_client(fake_jwks: dict | None = None, error: Exception | None = None) -> AsyncMock:
    """Build an AsyncClient stand-in that serves ``fake_jwks`` or raises ``error``."""
    mock_response = MagicMock()
    mock_response.json.return_value = fake_jwks or {}
    mock_response.raise_for_status = MagicMock()

    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
    else:
        client.get.return_value = mock_response
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_jwks_cache():
    """Reset the module-level JWKS cache before and after every test."""
    jwt_provider_module._jwks_cache = None
    yield
    jwt_provider_module._jwks_cache = None


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    """JWTAuthProvider configured for HS256 (local/test tokens)."""
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


# ---------------------------------------------------------------------------
# Tests: identity extraction
# ---------------------------------------------------------------------------


class TestIdentityFromToken:
    async def test_round_trips_created_token(self, hs256_provider: JWTAuthProvider):
        identity = Identity(id="firebase-uid-123", email="p@example.com", display_name="Pat")

        result = await hs256_provider.validate_token(hs256_provider.create_token(identity))

        assert result is not None
        assert result.id == "firebase-uid-123"
        assert result.email == "p@example.com"
        assert result.display_name == "Pat"
        assert result.role == "authenticated"

    async def test_uuid_subject_becomes_string_id(self, hs256_provider: JWTAuthProvider):
        sub = str(uuid4())
        token = _make_hs256_token({"sub": sub, "email": "u@example.com", "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.id == sub

    async def test_google_full_name_is_used_as_display_name(
        self, hs256_provider: JWTAuthProvider
    ):
        token = _make_hs256_token(
            {
                "sub": "u1",
                "email": "u@example.com",
                "user_metadata": {"full_name": "Google Name"},
                "exp": 9999999999,
            }
        )

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.display_name == "Google Name"

    async def test_wrong_secret_is_rejected(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token(
            {"sub": "u1", "email": "u@example.com", "exp": 9999999999}, secret="other"
        )

        assert await hs256_provider.validate_token(token) is None

    async def test_expired_token_is_rejected(self, hs256_provider: JWTAuthProvider):
        expired = JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=-1)
        token = expired.create_token(Identity(id="u1", email="u@example.com"))

        assert await hs256_provider.validate_token(token) is None


# ---------------------------------------------------------------------------
# Tests: validate_token returns None for missing claims
# ---------------------------------------------------------------------------


class TestValidateTokenMissingClaims:
    """validate_token should return None when the decoded payload is missing
    the required 'sub' or 'email' claims."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "user@example.com", "exp": 9999999999},
            {"sub": "u1", "exp": 9999999999},
            {"sub": "", "email": "user@example.com", "exp": 9999999999},
            {"sub": "u1", "email": "", "exp": 9999999999},
        ],
    )
    async def test_should_return_none(self, hs256_provider: JWTAuthProvider, payload: dict):
        result = await hs256_provider.validate_token(_make_hs256_token(payload))

        assert result is None


# ---------------------------------------------------------------------------
# Tests: _get_jwks_keys
# ---------------------------------------------------------------------------


class TestGetJwksKeys:
    """Tests for the module-level _get_jwks_keys() helper."""

    async def test_should_return_empty_dict_when_no_supabase_url(self):
        with patch.object(jwt_provider_module, "settings", create=True) as mock_settings:
            mock_settings.supabase_jwks_url = ""

            assert await _get_jwks_keys() == {}

    async def test_should_fetch_and_cache_jwks_keys(self):
        """Keys are fetched once, mapped by kid, and served from cache after."""
        client = _mock_jwks_client(
            {
                "keys": [
                    {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},
                    {"kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},  # no kid
                ]
            }
        )

        with (
            patch.object(jwt_provider_module, "settings", create=True) as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys()

            assert list(result) == ["key-1"]
            assert result["key-1"]["kty"] == "EC"

            client.get.reset_mock()
            assert await _get_jwks_keys() == result
            client.get.assert_not_called()

    async def test_should_return_empty_dict_on_http_error(self):
        client = _mock_jwks_client(error=httpx.ConnectError("Connection refused"))

        with (
            patch.object(jwt_provider_module, "settings", create=True) as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            assert await _get_jwks_keys() == {}


# ---------------------------------------------------------------------------
# Tests: _validate_es256
# ---------------------------------------------------------------------------


class TestValidateEs256:
    """Tests for the ES256 validation path inside JWTAuthProvider."""

    async def test_should_return_none_when_header_has_no_kid(
        self, hs256_provider: JWTAuthProvider
    ):
        result = await hs256_provider._validate_es256(
            token="dummy.token.value",
            header={"alg": "ES256"},
        )

        assert result is None

    async def test_should_refetch_once_then_give_up_on_unknown_kid(
        self, hs256_provider: JWTAuthProvider
    ):
        with patch.object(
            jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
        ) as mock_get_jwks:
            mock_get_jwks.return_value = {"other-kid": {"kty": "EC"}}

            result = await hs256_provider._validate_es256(
                token="dummy.token.value",
                header={"alg": "ES256", "kid": "missing-kid"},
            )

            assert result is None
            assert mock_get_jwks.call_count == 2

    async def test_should_decode_token_when_kid_found_in_jwks(
        self, hs256_provider: JWTAuthProvider
    ):
        fake_key_data = {"kid": "test-kid", "kty": "EC", "crv": "P-256"}
        fake_payload = {"sub": "u1", "email": "test@example.com", "exp": 9999999999}

        with (
            patch.object(
                jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
            ) as mock_get_jwks,
            patch.object(jwt_provider_module, "ECKey") as mock_eckey_cls,
            patch.object(jwt_provider_module.jwt, "decode") as mock_decode,
        ):
            mock_get_jwks.return_value = {"test-kid": fake_key_data}
            mock_decode.return_value = fake_payload

            result = await hs256_provider._validate_es256(
                token="es256.token.value",
                header={"alg": "ES256", "kid": "test-kid"},
            )

            assert result == fake_payload
            mock_eckey_cls.assert_called_once_with(fake_key_data, algorithm="ES256")
            mock_decode.assert_called_once_with(
                "es256.token.value",
                mock_eckey_cls.return_value,
                algorithms=["ES256"],
                options={"verify_aud": False},
            )

    async def test_validate_token_delegates_es256_tokens(self, hs256_provider: JWTAuthProvider):
        fake_payload = {
            "sub": "supabase-user",
            "email": "es256user@example.com",
            "user_metadata": {"display_name": "ES256 User"},
            "role": "authenticated",
        }

        with (
            patch.object(
                jwt_provider_module.jwt,
                "get_unverified_header",
                return_value={"alg": "ES256", "kid": "k1"},
            ),
            patch.object(hs256_provider, "_validate_es256", new_callable=AsyncMock) as mock_es256,
        ):
            mock_es256.return_value = fake_payload

            result = await hs256_provider.validate_token("es256.token.here")

            mock_es256.assert_called_once_with("es256.token.here", {"alg": "ES256", "kid": "k1"})
            assert result == Identity(
                id="supabase-user",
                email="es256user@example.com",
                display_name="ES256 User",
                role="authenticated",
            )
