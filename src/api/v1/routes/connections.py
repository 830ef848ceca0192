"""Connection API routes."""

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies.auth import CheckedOptionalIdentity, CurrentIdentity
from api.v1.dependencies import get_profile_connection_service
from api.v1.routes.profiles import to_public_response
from api.v1.schemas.connection import (
    ConnectionListResponse,
    ConnectionResponse,
    ConnectResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.connection import ConnectOutcome
from domain.services.profile_connection_service import ProfileConnectionService

router = APIRouter(tags=["connections"])


@router.get(
    "/me/connections",
    response_model=ConnectionListResponse,
    summary="List own connections",
    responses={
        200: {"description": "Connections owned by the caller, newest first"},
        401: {"description": "Not signed in"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_my_connections(
    request: Request,
    identity: CurrentIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> ConnectionListResponse:
    """List the players the caller is connected with."""
    connections = await service.list_connections(identity)
    connections.sort(key=lambda c: c.connected_at, reverse=True)
    data = [
        ConnectionResponse(
            id=conn.id,
            peer_id=conn.peer_id,
            peer_name=conn.peer_name_snapshot,
            peer_rating=conn.peer_rating_snapshot,
            connected_at=conn.connected_at,
        )
        for conn in connections
    ]
    return ConnectionListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/players/{profile_id}/connect",
    response_model=ConnectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Connect with a player",
    responses={
        200: {"description": "Already connected, nothing written"},
        201: {"description": "Connection pair created"},
        400: {"description": "Cannot connect with yourself"},
        401: {"description": "Not signed in"},
        404: {"description": "Player not found"},
        409: {"description": "Caller must create a profile first"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def connect_with_player(
    request: Request,
    response: Response,
    profile_id: str,
    identity: CheckedOptionalIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> ConnectResponse:
    """Connect the caller with the player behind a share link."""
    result = await service.connect(identity, profile_id)

    if result.outcome == ConnectOutcome.ALREADY_CONNECTED:
        response.status_code = status.HTTP_200_OK
        message = f"Already connected with {result.peer.name}"
    else:
        message = f"Connected with {result.peer.name}!"

    return ConnectResponse(
        status=result.outcome.value,
        message=message,
        peer=to_public_response(result.peer),
    )
