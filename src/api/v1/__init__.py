"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.connections import router as connections_router
from api.v1.routes.profiles import router as profiles_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(connections_router)
