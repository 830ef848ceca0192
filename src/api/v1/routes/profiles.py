"""Profile API routes."""

import base64

import structlog
from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentIdentity, OptionalIdentity
from api.v1.dependencies import get_profile_connection_service, get_qr_encoder
from api.v1.schemas.profile import (
    ConnectAction,
    IdentityResponse,
    ProfileDataResponse,
    ProfileResponse,
    ProfileUpsert,
    PublicProfileResponse,
    PublicProfileView,
    ShareResponse,
)
from core.config import settings
from core.exceptions import PlayerNotFoundError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.identity import Identity
from domain.entities.profile import Profile, ProfileFields
from domain.services.profile_connection_service import ProfileConnectionService
from domain.services.share_link import build_share_url
from infrastructure.qr.segno_encoder import SegnoQREncoder

logger = structlog.get_logger()

router = APIRouter(tags=["profiles"])


def _to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        skill_rating=profile.skill_rating,
        phone=profile.phone,
        email=profile.email,
        play_times=profile.play_times,
        play_locations=profile.play_locations,
        updated_at=profile.updated_at,
    )


def to_public_response(profile: Profile) -> PublicProfileResponse:
    """Strip contact details for the public view."""
    return PublicProfileResponse(
        id=profile.id,
        name=profile.name,
        skill_rating=profile.skill_rating,
        play_times=profile.play_times,
        play_locations=profile.play_locations,
    )


async def _connect_action(
    service: ProfileConnectionService,
    viewer: Identity | None,
    profile_id: str,
) -> ConnectAction:
    """Work out which call to action the viewer of a profile should see."""
    if viewer is None:
        return ConnectAction.SIGN_IN
    if viewer.id == profile_id:
        return ConnectAction.SELF
    if await service.get_profile(viewer.id) is None:
        return ConnectAction.CREATE_PROFILE
    if await service.is_connected(viewer.id, profile_id):
        return ConnectAction.CONNECTED
    return ConnectAction.CONNECT


@router.get(
    "/me",
    response_model=IdentityResponse,
    summary="Get signed-in player",
    responses={
        200: {"description": "Identity and onboarding state"},
        401: {"description": "Not signed in"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_me(
    request: Request,
    identity: CurrentIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> IdentityResponse:
    """Return the caller's identity, and their profile if they have onboarded."""
    profile = await service.get_profile(identity.id)
    return IdentityResponse(
        id=identity.id,
        email=identity.email,
        display_name=identity.display_name,
        has_profile=profile is not None,
        profile=_to_response(profile) if profile else None,
    )


@router.get(
    "/me/profile",
    response_model=ProfileDataResponse,
    summary="Get own profile",
    responses={
        200: {"description": "The caller's profile"},
        404: {"description": "Caller has not created a profile"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    identity: CurrentIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> ProfileDataResponse:
    """Get the caller's full profile, contact details included."""
    profile = await service.get_profile(identity.id)
    if profile is None:
        raise PlayerNotFoundError(identity.id)
    return ProfileDataResponse(data=_to_response(profile))


@router.put(
    "/me/profile",
    response_model=ProfileDataResponse,
    summary="Create or update own profile",
    responses={
        200: {"description": "Profile saved"},
        401: {"description": "Not signed in"},
        422: {"description": "Invalid profile fields"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def upsert_my_profile(
    request: Request,
    body: ProfileUpsert,
    identity: CurrentIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> ProfileDataResponse:
    """Save the caller's profile, replacing any previous version entirely."""
    profile = await service.upsert_profile(
        identity,
        ProfileFields(
            name=body.name,
            skill_rating=body.skill_rating,
            phone=body.phone,
            play_times=list(body.play_times),
            play_locations=body.play_locations,
        ),
    )
    return ProfileDataResponse(data=_to_response(profile))


@router.get(
    "/me/share",
    response_model=ShareResponse,
    summary="Get share link and QR code",
    responses={
        200: {"description": "Share URL, with a QR code when it could be rendered"},
        404: {"description": "Caller has not created a profile"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_share_link(
    request: Request,
    identity: CurrentIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
    encoder: SegnoQREncoder = Depends(get_qr_encoder),
) -> ShareResponse:
    """Build the caller's public /player/<id> link and its QR code."""
    profile = await service.get_profile(identity.id)
    if profile is None:
        raise PlayerNotFoundError(identity.id)

    url = build_share_url(settings.public_origin, profile.id)

    qr_code = None
    try:
        png = encoder.encode(url)
        qr_code = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
    except Exception as e:
        # Cosmetic: the link still works without the image
        logger.warning("qr_encode_failed", profile_id=profile.id, error=str(e))

    return ShareResponse(url=url, qr_code=qr_code)


@router.get(
    "/players/{profile_id}",
    response_model=PublicProfileView,
    summary="View a shared profile",
    responses={
        200: {"description": "Public profile and the viewer's next step"},
        404: {"description": "Player not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_player(
    request: Request,
    profile_id: str,
    viewer: OptionalIdentity,
    service: ProfileConnectionService = Depends(get_profile_connection_service),
) -> PublicProfileView:
    """Resolve a share link. Works signed out; contact details are hidden."""
    profile = await service.get_profile(profile_id)
    if profile is None:
        raise PlayerNotFoundError(profile_id)

    return PublicProfileView(
        data=to_public_response(profile),
        connect_action=await _connect_action(service, viewer, profile_id),
    )
