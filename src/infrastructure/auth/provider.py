"""Identity provider protocol."""

from typing import Optional, Protocol

from domain.entities.identity import Identity


class IIdentityProvider(Protocol):
    """Protocol for identity providers."""

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Resolve the caller behind a bearer token.

        Args:
            token: The bearer token to validate

        Returns:
            Identity if valid, None if invalid
        """
        ...

    def create_token(self, identity: Identity) -> str:
        """
        Issue a token for an identity.

        Args:
            identity: The identity to sign in

        Returns:
            The generated token string
        """
        ...
