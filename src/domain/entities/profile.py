"""Player profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable, Mapping

from core.exceptions import InvalidDocumentError

PLAYERS_COLLECTION = "players"

SKILL_RATING_MIN = 2.0
SKILL_RATING_MAX = 5.0


class PlayTime(StrEnum):
    """Time of day a player is usually available."""

    MORNING = "morning"
    NOON = "noon"
    NIGHT = "night"


def normalize_play_times(values: Iterable[str | PlayTime]) -> list[PlayTime]:
    """De-duplicate play times and return them in canonical order.

    Raises:
        ValueError: If a value is not a known play time.
    """
    wanted = {PlayTime(value) for value in values}
    return [pt for pt in PlayTime if pt in wanted]


@dataclass
class ProfileFields:
    """User-editable profile fields submitted from the onboarding/edit form."""

    name: str
    skill_rating: float
    phone: str
    play_locations: str
    play_times: list[PlayTime] = field(default_factory=list)

    def validate(self) -> list[dict[str, str]]:
        """Return a list of field errors; empty when the fields are valid."""
        errors: list[dict[str, str]] = []

        if not isinstance(self.name, str) or not self.name.strip():
            errors.append({"field": "name", "message": "Name is required"})

        rating = self.skill_rating
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            errors.append({"field": "skill_rating", "message": "Skill rating is required"})
        elif not SKILL_RATING_MIN <= rating <= SKILL_RATING_MAX:
            errors.append(
                {
                    "field": "skill_rating",
                    "message": f"Skill rating must be between {SKILL_RATING_MIN} "
                    f"and {SKILL_RATING_MAX}",
                }
            )

        if not isinstance(self.phone, str):
            errors.append({"field": "phone", "message": "Phone is required"})

        if not isinstance(self.play_locations, str):
            errors.append({"field": "play_locations", "message": "Play locations are required"})

        try:
            normalize_play_times(self.play_times or [])
        except ValueError:
            errors.append(
                {
                    "field": "play_times",
                    "message": "Play times must be morning, noon or night",
                }
            )

        return errors


@dataclass
class Profile:
    """Domain entity for a player's profile, keyed by the owner's identity id."""

    id: str
    name: str
    skill_rating: float
    phone: str
    email: str
    play_locations: str
    play_times: list[PlayTime] = field(default_factory=list)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored ``players`` document shape."""
        return {
            "id": self.id,
            "name": self.name,
            "skillRating": self.skill_rating,
            "phone": self.phone,
            "email": self.email,
            "playTimes": [pt.value for pt in self.play_times],
            "playLocations": self.play_locations,
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any], document_id: str | None = None) -> "Profile":
        """Parse a stored ``players`` document, rejecting malformed records.

        Raises:
            InvalidDocumentError: If a key is missing or has the wrong type.
        """
        doc_id = document_id or document.get("id")

        def fail(reason: str) -> InvalidDocumentError:
            return InvalidDocumentError(PLAYERS_COLLECTION, doc_id, reason)

        try:
            profile_id = document_id or document.get("id")
            name = document["name"]
            rating = document["skillRating"]
            phone = document["phone"]
            email = document["email"]
            locations = document["playLocations"]
            raw_times = document.get("playTimes") or []
            raw_updated = document["updatedAt"]
        except KeyError as e:
            raise fail(f"missing field {e.args[0]!r}") from e

        if not isinstance(profile_id, str) or not profile_id:
            raise fail("id must be a non-empty string")
        for key, value in (
            ("name", name),
            ("phone", phone),
            ("email", email),
            ("playLocations", locations),
        ):
            if not isinstance(value, str):
                raise fail(f"{key} must be a string")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise fail("skillRating must be a number")
        if not SKILL_RATING_MIN <= rating <= SKILL_RATING_MAX:
            raise fail("skillRating out of range")
        if not isinstance(raw_times, list):
            raise fail("playTimes must be a list")

        try:
            play_times = normalize_play_times(raw_times)
        except ValueError as e:
            raise fail("unknown play time") from e

        try:
            updated_at = datetime.fromisoformat(raw_updated)
        except (TypeError, ValueError) as e:
            raise fail("updatedAt must be an ISO-8601 timestamp") from e

        return cls(
            id=profile_id,
            name=name,
            skill_rating=float(rating),
            phone=phone,
            email=email,
            play_locations=locations,
            play_times=play_times,
            updated_at=updated_at,
        )
