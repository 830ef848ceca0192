"""Pydantic schemas for Profile API."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.profile import SKILL_RATING_MAX, SKILL_RATING_MIN, PlayTime


class ProfileUpsert(BaseModel):
    """Schema for creating or replacing the caller's profile.

    Email is not accepted here: it comes from the identity provider.
    """

    name: str = Field(..., min_length=1, max_length=120)
    skill_rating: float = Field(..., ge=SKILL_RATING_MIN, le=SKILL_RATING_MAX)
    phone: str = Field(..., max_length=30)
    play_times: list[PlayTime] = Field(default_factory=list)
    play_locations: str = Field(..., max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject whitespace-only names."""
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class ProfileResponse(BaseModel):
    """Schema for the owner's full view of a profile."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "b7c1d2e3-0000-4000-8000-000000000001",
                "name": "Jamie Doe",
                "skill_rating": 3.5,
                "phone": "555-0100",
                "email": "jamie@example.com",
                "play_times": ["morning", "night"],
                "play_locations": "Central Park Courts, Riverside Courts",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: str
    name: str
    skill_rating: float
    phone: str
    email: str
    play_times: list[PlayTime]
    play_locations: str
    updated_at: datetime


class ProfileDataResponse(BaseModel):
    """Envelope for a single profile."""

    data: ProfileResponse


class ConnectAction(StrEnum):
    """What the viewer of a public profile can do next."""

    SIGN_IN = "sign_in"
    CREATE_PROFILE = "create_profile"
    CONNECT = "connect"
    CONNECTED = "connected"
    SELF = "self"


class PublicProfileResponse(BaseModel):
    """Read-only view of a profile reached through a share link.

    Contact details are not included.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    skill_rating: float
    play_times: list[PlayTime]
    play_locations: str


class PublicProfileView(BaseModel):
    """Public profile plus the viewer's next step."""

    data: PublicProfileResponse
    connect_action: ConnectAction


class IdentityResponse(BaseModel):
    """The signed-in caller and their onboarding state."""

    id: str
    email: str
    display_name: str | None = None
    has_profile: bool
    profile: ProfileResponse | None = None


class ShareResponse(BaseModel):
    """Share link for the caller's profile."""

    url: str
    qr_code: str | None = Field(
        None,
        description="PNG QR code as a data URI; null when it could not be rendered",
    )
