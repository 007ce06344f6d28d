"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/profile")
async def get_profile(current_user: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    return await service.get_or_create_profile(current_user)


@router.put("/profile")
async def update_profile(
    request: schemas.UpdateProfileRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_profile(current_user, request)


@router.get("/public-profile/{user_id}")
async def public_profile(user_id: str) -> dict:
    """
    Seller storefront: profile, listings, reviews received and block status.
    """
    return await service.public_profile(user_id)
