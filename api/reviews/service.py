"""
Review business logic and rating aggregation.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from profiles import repository as profile_repository
from transactions import repository as transaction_repository

from . import repository, schemas

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES = {"delivered", "completed"}


async def recompute_rating(user_id: str) -> tuple[float, int]:
    rating_avg, rating_count = await repository.rating_stats(user_id)
    await profile_repository.apply_rating(user_id, rating_avg=rating_avg, rating_count=rating_count)
    logger.info("rating_recomputed user_id=%s rating_avg=%.2f rating_count=%s", user_id, rating_avg, rating_count)
    return rating_avg, rating_count


async def create_profile_review(reviewer_id: str, payload: schemas.ProfileReviewRequest) -> dict[str, Any]:
    reviewed_id = payload.reviewed_id.strip()
    if reviewer_id == reviewed_id:
        raise HTTPException(status_code=400, detail="Cannot review your own profile")

    if await repository.get_profile_review_by_pair(reviewer_id, reviewed_id) is not None:
        raise HTTPException(status_code=400, detail="You have already reviewed this profile")

    review = await repository.insert_profile_review(
        reviewer_id=reviewer_id,
        reviewed_id=reviewed_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    if review is None:
        raise HTTPException(status_code=400, detail="You have already reviewed this profile")

    await recompute_rating(reviewed_id)
    return review


async def create_transaction_review(reviewer_id: str, payload: schemas.TransactionReviewRequest) -> dict[str, Any]:
    transaction = await transaction_repository.get_transaction(payload.transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")

    buyer_id = str(transaction["buyer_id"])
    seller_id = str(transaction["seller_id"])
    if reviewer_id == buyer_id:
        reviewed_id, review_type = seller_id, "buyer_to_seller"
    elif reviewer_id == seller_id:
        reviewed_id, review_type = buyer_id, "seller_to_buyer"
    else:
        raise HTTPException(status_code=404, detail="Transaction not found")

    if str(transaction["status"]) not in REVIEWABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Transaction can only be reviewed after delivery")

    review = await repository.insert_transaction_review(
        transaction_id=payload.transaction_id,
        reviewer_id=reviewer_id,
        reviewed_id=reviewed_id,
        rating=payload.rating,
        comment=payload.comment,
        review_type=review_type,
    )
    if review is None:
        raise HTTPException(status_code=409, detail="You have already reviewed this transaction")

    await recompute_rating(reviewed_id)
    return review


async def respond_to_review(responder_id: str, payload: schemas.ReviewResponseRequest) -> dict[str, Any]:
    reviewed_id = await repository.get_review_target(payload.review_type, payload.review_id)
    if reviewed_id is None or reviewed_id != responder_id:
        raise HTTPException(status_code=403, detail="Cannot respond to this review")

    return await repository.insert_review_response(
        review_id=payload.review_id,
        review_type=payload.review_type,
        responder_id=responder_id,
        response_text=payload.response_text.strip(),
    )


async def delete_review(review_type: str, review_id: int) -> dict[str, Any]:
    reviewed_id = await repository.delete_review(review_type, review_id)
    if reviewed_id is None:
        raise HTTPException(status_code=404, detail="Review not found")

    await recompute_rating(reviewed_id)
    return {"success": True, "message": "Review deleted successfully"}
