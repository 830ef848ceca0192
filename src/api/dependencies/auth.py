"""Caller identity dependencies.

Most routes need a signed-in player (``CurrentIdentity``). Share-link routes
also serve signed-out visitors and take ``OptionalIdentity`` instead; the
service then decides whether the missing identity matters.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import IIdentityProvider

bearer_scheme = HTTPBearer(auto_error=False, description="Supabase access token")

BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

_auth_provider: IIdentityProvider | None = None


def get_auth_provider() -> IIdentityProvider:
    """Return the process-wide identity provider."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_optional_identity(
    credentials: BearerCredentials,
    auth_provider: IIdentityProvider = Depends(get_auth_provider),
) -> Identity | None:
    """Resolve the caller, treating a missing or bad token as signed out."""
    if credentials is None:
        return None
    return await auth_provider.validate_token(credentials.credentials)


async def get_checked_optional_identity(
    credentials: BearerCredentials,
    auth_provider: IIdentityProvider = Depends(get_auth_provider),
) -> Identity | None:
    """
    Resolve the caller, allowing no token but rejecting a bad one.

    Raises:
        AuthenticationError: INVALID_TOKEN when a token is sent and does not
            verify
    """
    if credentials is None:
        return None
    return await get_current_identity(credentials, auth_provider)


async def get_current_identity(
    credentials: BearerCredentials,
    auth_provider: IIdentityProvider = Depends(get_auth_provider),
) -> Identity:
    """
    Resolve the caller or reject the request.

    Raises:
        AuthenticationError: UNAUTHORIZED without a token, INVALID_TOKEN when
            the token does not verify
    """
    if credentials is None:
        raise AuthenticationError(
            message="Sign in to continue",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    identity = await auth_provider.validate_token(credentials.credentials)
    if identity is None:
        raise AuthenticationError(
            message="Your session has expired. Please sign in again.",
            error_code=ErrorCode.INVALID_TOKEN,
        )
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[Identity | None, Depends(get_optional_identity)]
CheckedOptionalIdentity = Annotated[Identity | None, Depends(get_checked_optional_identity)]
