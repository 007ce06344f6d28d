"""
Profile business logic.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from auth import service as auth_service
from products import repository as product_repository
from reviews import repository as review_repository

from . import repository, schemas


def _blank_to_none(value: str | None) -> str | None:
    # Empty strings from form fields mean "leave unchanged".
    if value is None:
        return None
    value = value.strip()
    return value or None


async def get_or_create_profile(user: dict) -> dict[str, Any]:
    user_id = str(user["id"])
    profile = await repository.get_profile(user_id)
    if profile is not None:
        return profile
    return await repository.create_default_profile(user_id, name=auth_service.display_name(user))


async def update_profile(user: dict, payload: schemas.UpdateProfileRequest) -> dict[str, Any]:
    await get_or_create_profile(user)
    updated = await repository.update_profile(
        str(user["id"]),
        name=_blank_to_none(payload.name),
        phone=_blank_to_none(payload.phone),
        location=_blank_to_none(payload.location),
        bio=_blank_to_none(payload.bio),
        whatsapp_number=_blank_to_none(payload.whatsapp_number),
        business_name=_blank_to_none(payload.business_name),
        business_type=_blank_to_none(payload.business_type),
        is_seller=payload.is_seller,
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return updated


def attach_responses(reviews: list[dict[str, Any]], responses: list[dict[str, Any]]) -> list[dict[str, Any]]:
    by_review: dict[int, list[dict[str, Any]]] = {}
    for response in responses:
        by_review.setdefault(int(response["review_id"]), []).append(response)
    return [{**review, "responses": by_review.get(int(review["id"]), [])} for review in reviews]


async def public_profile(user_id: str) -> dict[str, Any]:
    profile = await repository.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    products = await product_repository.list_seller_products(user_id)

    transaction_reviews = await review_repository.list_transaction_reviews_for(user_id)
    transaction_responses = await review_repository.list_responses(
        "transaction",
        [int(r["id"]) for r in transaction_reviews],
    )

    profile_reviews = await review_repository.list_profile_reviews_for(user_id)
    profile_responses = await review_repository.list_responses(
        "profile",
        [int(r["id"]) for r in profile_reviews],
    )

    return {
        **profile,
        "products": products,
        "reviews_received": attach_responses(transaction_reviews, transaction_responses),
        "profile_reviews": attach_responses(profile_reviews, profile_responses),
        "is_blocked": await repository.is_blocked(user_id),
    }
