"""Bearer-token identity provider.

Players sign in with Google through Supabase on the client; the API only
sees the resulting access token. Two token flavours are accepted:

- ES256 tokens issued by Supabase, verified against the project's JWKS
- HS256 tokens signed with ``JWT_SECRET_KEY``, issued by
  :meth:`JWTAuthProvider.create_token` for local runs and tests

Claims used::

    {
        "sub": "player-id",
        "email": "player@example.com",
        "role": "authenticated",
        "user_metadata": {"full_name": "Jamie Doe"},
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from domain.entities.identity import Identity

logger = logging.getLogger(__name__)

# kid -> JWK, filled on first ES256 token and refreshed on an unknown kid
_jwks_cache: dict[str, Any] | None = None

# user_metadata keys that may hold the player's name, in order of preference
_NAME_CLAIMS = ("display_name", "full_name", "name")


async def _get_jwks_keys() -> dict[str, Any]:
    """Return the signing keys published by Supabase, keyed by kid."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            published = response.json().get("keys", [])
    except (httpx.HTTPError, ValueError):
        logger.exception("JWKS fetch from %s failed", jwks_url)
        return {}

    _jwks_cache = {key["kid"]: key for key in published if key.get("kid")}
    logger.info("Loaded %d signing keys", len(_jwks_cache))
    return _jwks_cache


def _identity_from_claims(claims: dict[str, Any]) -> Optional[Identity]:
    """Map verified claims to an Identity, or None if sub or email is missing."""
    subject = claims.get("sub")
    email = claims.get("email")
    if not subject or not email:
        return None

    metadata = claims.get("user_metadata") or {}
    display_name = next(
        (metadata[key] for key in _NAME_CLAIMS if metadata.get(key)),
        claims.get("name"),
    )
    return Identity(
        id=str(subject),
        email=email,
        display_name=display_name,
        role=claims.get("role"),
    )


class JWTAuthProvider:
    """Resolves bearer tokens to player identities."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Verify a token and return the player behind it.

        The ``alg`` header picks the verification path: ES256 goes through
        JWKS, anything else is checked against the shared secret.

        Returns:
            Identity, or None for a bad signature, expired token, or missing
            claims
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg", self._algorithm) == "ES256":
                claims = await self._validate_es256(token, header)
            else:
                claims = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if claims is None:
            return None
        return _identity_from_claims(claims)

    async def _validate_es256(
        self, token: str, header: dict
    ) -> Optional[dict]:
        """Verify a Supabase token with the key named by its ``kid``."""
        global _jwks_cache
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if key_data is None:
            # Supabase rotated its keys since the last fetch
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
        if key_data is None:
            logger.warning("No signing key for kid=%s", kid)
            return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, identity: Identity) -> str:
        """Sign an HS256 token for ``identity``, valid for ``expire_minutes``."""
        claims: dict[str, Any] = {
            "sub": identity.id,
            "email": identity.email,
            "aud": "authenticated",
            "role": identity.role or "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"display_name": identity.display_name},
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
