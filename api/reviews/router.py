"""
Review API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.post("/profile-reviews")
async def create_profile_review(
    request: schemas.ProfileReviewRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.create_profile_review(auth_dependencies.user_id(current_user), request)


@router.post("/reviews")
async def create_transaction_review(
    request: schemas.TransactionReviewRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.create_transaction_review(auth_dependencies.user_id(current_user), request)


@router.post("/review-responses")
async def respond_to_review(
    request: schemas.ReviewResponseRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.respond_to_review(auth_dependencies.user_id(current_user), request)
