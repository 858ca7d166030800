"""API v1 router."""

from fastapi import APIRouter

from assetwatch.api.v1.endpoints import (
    auth,
    assets,
    notifications,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(assets.router, prefix="/assets", tags=["Assets"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["Notifications"]
)
