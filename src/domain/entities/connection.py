"""Connection domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Mapping, Optional

from core.exceptions import InvalidDocumentError
from domain.entities.profile import Profile

CONNECTIONS_COLLECTION = "connections"


@dataclass
class Connection:
    """A directed link from ``owner_id`` to ``peer_id``.

    Connections are always created in pairs (A->B and B->A). The peer
    snapshot fields are copied at connection time and never refreshed.
    """

    owner_id: str
    peer_id: str
    peer_name_snapshot: str
    peer_rating_snapshot: float
    connected_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None

    @classmethod
    def between(cls, owner: Profile, peer: Profile, connected_at: datetime) -> "Connection":
        """Build the owner->peer record with a snapshot of the peer."""
        return cls(
            owner_id=owner.id,
            peer_id=peer.id,
            peer_name_snapshot=peer.name,
            peer_rating_snapshot=peer.skill_rating,
            connected_at=connected_at,
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored ``connections`` document shape."""
        return {
            "ownerId": self.owner_id,
            "peerId": self.peer_id,
            "peerNameSnapshot": self.peer_name_snapshot,
            "peerRatingSnapshot": self.peer_rating_snapshot,
            "connectedAt": self.connected_at.isoformat(),
        }

    @classmethod
    def from_document(
        cls, document: Mapping[str, Any], document_id: str | None = None
    ) -> "Connection":
        """Parse a stored ``connections`` document, rejecting malformed records."""
        doc_id = document_id or document.get("id")
        try:
            owner_id = document["ownerId"]
            peer_id = document["peerId"]
            name = document["peerNameSnapshot"]
            rating = document["peerRatingSnapshot"]
            raw_connected = document["connectedAt"]
        except KeyError as e:
            raise InvalidDocumentError(
                CONNECTIONS_COLLECTION, doc_id, f"missing field {e.args[0]!r}"
            ) from e

        if not all(isinstance(v, str) and v for v in (owner_id, peer_id)):
            raise InvalidDocumentError(
                CONNECTIONS_COLLECTION, doc_id, "ownerId and peerId must be non-empty strings"
            )
        if not isinstance(name, str):
            raise InvalidDocumentError(CONNECTIONS_COLLECTION, doc_id, "peerNameSnapshot must be a string")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise InvalidDocumentError(
                CONNECTIONS_COLLECTION, doc_id, "peerRatingSnapshot must be a number"
            )
        try:
            connected_at = datetime.fromisoformat(raw_connected)
        except (TypeError, ValueError) as e:
            raise InvalidDocumentError(
                CONNECTIONS_COLLECTION, doc_id, "connectedAt must be an ISO-8601 timestamp"
            ) from e

        return cls(
            id=doc_id,
            owner_id=owner_id,
            peer_id=peer_id,
            peer_name_snapshot=name,
            peer_rating_snapshot=float(rating),
            connected_at=connected_at,
        )


class ConnectOutcome(StrEnum):
    """Terminal outcomes of a successful connect call."""

    CONNECTED = "connected"
    ALREADY_CONNECTED = "already_connected"


@dataclass
class ConnectResult:
    """Result of connecting to another player, with the peer for display."""

    outcome: ConnectOutcome
    peer: Profile
    connections: list[Connection] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.outcome == ConnectOutcome.CONNECTED
