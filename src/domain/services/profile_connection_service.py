"""Profile and connection service layer with business logic."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional

import structlog

from core.exceptions import (
    NotAuthenticatedError,
    ProfileValidationError,
    RequesterProfileMissingError,
    SelfConnectNotAllowedError,
    TargetProfileMissingError,
)
from domain.entities.connection import (
    CONNECTIONS_COLLECTION,
    Connection,
    ConnectOutcome,
    ConnectResult,
)
from domain.entities.identity import Identity
from domain.entities.profile import (
    PLAYERS_COLLECTION,
    Profile,
    ProfileFields,
    normalize_play_times,
)
from domain.repositories.document_store import IDocumentStore

logger = structlog.get_logger()


class ProfileConnectionService:
    """Service layer for player profiles and the connections between them.

    Holds no state between calls. Store failures propagate unchanged; no
    operation retries.
    """

    def __init__(
        self,
        store: IDocumentStore,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    async def get_profile(self, profile_id: str) -> Optional[Profile]:
        """Get a player profile by id.

        Returns:
            The Profile, or None if the player has not onboarded yet.
        """
        document = await self._store.get(PLAYERS_COLLECTION, profile_id)
        if document is None:
            return None
        return Profile.from_document(document, document_id=profile_id)

    async def upsert_profile(
        self, identity: Optional[Identity], fields: ProfileFields
    ) -> Profile:
        """Create or fully replace the caller's profile.

        Fields omitted by the caller are not carried over from the previous
        version. Email is the exception: it is taken from the existing
        profile, or from the identity on first save.

        Raises:
            NotAuthenticatedError: If no identity is supplied.
            ProfileValidationError: If the fields are invalid.
        """
        if identity is None:
            raise NotAuthenticatedError()

        errors = fields.validate()
        if errors:
            raise ProfileValidationError(errors)

        # Read raw so a malformed stored record can still be overwritten
        existing = await self._store.get(PLAYERS_COLLECTION, identity.id)
        stored_email = existing.get("email") if existing else None
        email = stored_email if isinstance(stored_email, str) and stored_email else identity.email

        profile = Profile(
            id=identity.id,
            name=fields.name.strip(),
            skill_rating=float(fields.skill_rating),
            phone=fields.phone,
            email=email,
            play_locations=fields.play_locations,
            play_times=normalize_play_times(fields.play_times or []),
            updated_at=self._clock(),
        )
        await self._store.put(PLAYERS_COLLECTION, profile.id, profile.to_document())

        logger.info(
            "profile_upserted",
            profile_id=profile.id,
            created=existing is None,
        )
        return profile

    async def list_connections(self, identity: Optional[Identity]) -> list[Connection]:
        """Get every connection owned by the caller, in store order."""
        if identity is None:
            raise NotAuthenticatedError()

        documents = await self._store.query(CONNECTIONS_COLLECTION, ownerId=identity.id)
        return [Connection.from_document(doc) for doc in documents]

    async def is_connected(self, owner_id: str, peer_id: str) -> bool:
        """Check whether ``owner_id`` holds a connection record to ``peer_id``."""
        existing = await self._store.query(
            CONNECTIONS_COLLECTION, ownerId=owner_id, peerId=peer_id
        )
        return bool(existing)

    async def connect(
        self, requester: Optional[Identity], target_profile_id: str
    ) -> ConnectResult:
        """Connect the caller with another player.

        Writes the requester->target and target->requester records together.

        Returns:
            ConnectResult with outcome CONNECTED, or ALREADY_CONNECTED when
            the requester already owns a record for this peer (nothing is
            written in that case).

        Raises:
            NotAuthenticatedError: If no identity is supplied.
            SelfConnectNotAllowedError: If the target is the requester.
            RequesterProfileMissingError: If the requester has not onboarded.
            TargetProfileMissingError: If the target profile does not exist.
        """
        if requester is None:
            raise NotAuthenticatedError("Please sign in to connect with players")

        if target_profile_id == requester.id:
            raise SelfConnectNotAllowedError(requester.id)

        own_profile = await self.get_profile(requester.id)
        if own_profile is None:
            raise RequesterProfileMissingError(requester.id, target_profile_id)

        target = await self.get_profile(target_profile_id)
        if target is None:
            raise TargetProfileMissingError(target_profile_id)

        existing = await self._store.query(
            CONNECTIONS_COLLECTION,
            ownerId=requester.id,
            peerId=target_profile_id,
        )
        if existing:
            logger.info(
                "already_connected",
                owner_id=requester.id,
                peer_id=target_profile_id,
            )
            return ConnectResult(outcome=ConnectOutcome.ALREADY_CONNECTED, peer=target)

        # A reverse record without its partner predates paired writes.
        # Flag it; the new pair is written as usual.
        reverse = await self._store.query(
            CONNECTIONS_COLLECTION,
            ownerId=target_profile_id,
            peerId=requester.id,
        )
        if reverse:
            logger.warning(
                "one_sided_connection_detected",
                owner_id=target_profile_id,
                peer_id=requester.id,
                record_ids=[doc.get("id") for doc in reverse],
            )

        connected_at = self._clock()
        pair = [
            Connection.between(own_profile, target, connected_at),
            Connection.between(target, own_profile, connected_at),
        ]
        ids = await self._store.insert_many(
            CONNECTIONS_COLLECTION, [conn.to_document() for conn in pair]
        )
        for conn, doc_id in zip(pair, ids):
            conn.id = doc_id

        logger.info(
            "connection_created",
            owner_id=requester.id,
            peer_id=target_profile_id,
        )
        return ConnectResult(
            outcome=ConnectOutcome.CONNECTED,
            peer=target,
            connections=pair,
        )
