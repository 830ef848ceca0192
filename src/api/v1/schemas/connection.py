"""Pydantic schemas for Connection API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.profile import PublicProfileResponse


class ConnectionResponse(BaseModel):
    """Schema for a connection owned by the caller."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "9f0e8d7c6b5a49382716050403020100",
                "peer_id": "b7c1d2e3-0000-4000-8000-000000000002",
                "peer_name": "Alex Smith",
                "peer_rating": 4.0,
                "connected_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: str | None = None
    peer_id: str
    peer_name: str
    peer_rating: float
    connected_at: datetime


class ConnectionListResponse(BaseModel):
    """Schema for list of Connections response."""

    data: list[ConnectionResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ConnectResponse(BaseModel):
    """Result of a connect request."""

    status: str
    message: str
    peer: PublicProfileResponse
