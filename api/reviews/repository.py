"""
Review persistence (raw SQL).

Two review kinds feed a user's rating:
- `reviews`: tied to a transaction, written by the other party
- `profile_reviews`: free-standing, one per (reviewer, reviewed) pair
"""

from __future__ import annotations

from typing import Any

from core import db

REVIEWER_TRANSACTION_COUNT_SQL = """
  (SELECT count(*) FROM transactions tx
   WHERE tx.buyer_id = {alias}.reviewer_id OR tx.seller_id = {alias}.reviewer_id)::int
"""


async def list_transaction_reviews_for(user_id: str) -> list[dict[str, Any]]:
    count_sql = REVIEWER_TRANSACTION_COUNT_SQL.format(alias="r")
    return await db.fetch_all(
        f"""
        SELECT r.id, r.transaction_id, r.reviewer_id, r.reviewed_id, r.rating, r.comment,
          r.review_type, r.is_featured, r.created_at, r.updated_at,
          up.name AS reviewer_name,
          p.title AS product_title,
          {count_sql} AS reviewer_transaction_count
        FROM reviews r
        LEFT JOIN user_profiles up ON up.user_id = r.reviewer_id
        LEFT JOIN transactions t ON t.id = r.transaction_id
        LEFT JOIN products p ON p.id = t.product_id
        WHERE r.reviewed_id = $1
        ORDER BY r.created_at DESC, r.id DESC
        """,
        user_id,
    )


async def list_profile_reviews_for(user_id: str) -> list[dict[str, Any]]:
    count_sql = REVIEWER_TRANSACTION_COUNT_SQL.format(alias="pr")
    return await db.fetch_all(
        f"""
        SELECT pr.id, pr.reviewer_id, pr.reviewed_id, pr.rating, pr.comment, pr.is_visible,
          pr.created_at, pr.updated_at,
          up.name AS reviewer_name,
          {count_sql} AS reviewer_transaction_count
        FROM profile_reviews pr
        LEFT JOIN user_profiles up ON up.user_id = pr.reviewer_id
        WHERE pr.reviewed_id = $1
          AND pr.is_visible = true
        ORDER BY pr.created_at DESC, pr.id DESC
        """,
        user_id,
    )


async def list_responses(review_type: str, review_ids: list[int]) -> list[dict[str, Any]]:
    if not review_ids:
        return []
    return await db.fetch_all(
        """
        SELECT rr.id, rr.review_id, rr.review_type, rr.responder_id, rr.response_text,
          rr.created_at, rr.updated_at,
          up.name AS responder_name
        FROM review_responses rr
        LEFT JOIN user_profiles up ON up.user_id = rr.responder_id
        WHERE rr.review_type = $1
          AND rr.review_id = ANY($2::bigint[])
        ORDER BY rr.created_at ASC, rr.id ASC
        """,
        review_type,
        review_ids,
    )


async def get_profile_review_by_pair(reviewer_id: str, reviewed_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, reviewer_id, reviewed_id, rating
        FROM profile_reviews
        WHERE reviewer_id = $1
          AND reviewed_id = $2
        """,
        reviewer_id,
        reviewed_id,
    )


async def insert_profile_review(
    *,
    reviewer_id: str,
    reviewed_id: str,
    rating: int,
    comment: str | None,
) -> dict[str, Any] | None:
    """
    Returns None when the pair already has a review.
    """
    return await db.fetch_one(
        """
        INSERT INTO profile_reviews (reviewer_id, reviewed_id, rating, comment)
        VALUES ($1, $2, $3, $4)
        ON CONFLICT (reviewer_id, reviewed_id) DO NOTHING
        RETURNING id, reviewer_id, reviewed_id, rating, comment, is_visible, created_at, updated_at
        """,
        reviewer_id,
        reviewed_id,
        rating,
        comment,
    )


async def get_review_target(review_type: str, review_id: int) -> str | None:
    """
    The reviewed user id of a review, or None if the review does not exist.
    """
    table = "profile_reviews" if review_type == "profile" else "reviews"
    value = await db.fetch_val(f"SELECT reviewed_id FROM {table} WHERE id = $1", review_id)
    return str(value) if value is not None else None


async def insert_review_response(
    *,
    review_id: int,
    review_type: str,
    responder_id: str,
    response_text: str,
) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO review_responses (review_id, review_type, responder_id, response_text)
        VALUES ($1, $2, $3, $4)
        RETURNING id, review_id, review_type, responder_id, response_text, created_at, updated_at
        """,
        review_id,
        review_type,
        responder_id,
        response_text,
    )
    if row is None:
        raise RuntimeError("Failed to create review response.")
    return row


async def insert_transaction_review(
    *,
    transaction_id: int,
    reviewer_id: str,
    reviewed_id: str,
    rating: int,
    comment: str | None,
    review_type: str,
) -> dict[str, Any] | None:
    """
    Returns None when this reviewer already reviewed the transaction.
    """
    return await db.fetch_one(
        """
        INSERT INTO reviews (transaction_id, reviewer_id, reviewed_id, rating, comment, review_type)
        VALUES ($1, $2, $3, $4, $5, $6)
        ON CONFLICT (transaction_id, reviewer_id) DO NOTHING
        RETURNING id, transaction_id, reviewer_id, reviewed_id, rating, comment, review_type,
                  is_featured, created_at, updated_at
        """,
        transaction_id,
        reviewer_id,
        reviewed_id,
        rating,
        comment,
        review_type,
    )


async def rating_stats(user_id: str) -> tuple[float, int]:
    """
    Mean and count over visible profile reviews plus transaction reviews.
    """
    row = await db.fetch_one(
        """
        SELECT COALESCE(avg(x.rating), 0)::float8 AS rating_avg, count(*)::int AS rating_count
        FROM (
          SELECT rating FROM profile_reviews WHERE reviewed_id = $1 AND is_visible = true
          UNION ALL
          SELECT rating FROM reviews WHERE reviewed_id = $1
        ) x
        """,
        user_id,
    )
    row = row or {}
    return float(row.get("rating_avg") or 0.0), int(row.get("rating_count") or 0)


async def list_all_reviews() -> list[dict[str, Any]]:
    """
    Transaction and profile reviews for moderation, newest first.
    """
    return await db.fetch_all(
        """
        SELECT *
        FROM (
          SELECT r.id, r.reviewer_id, r.reviewed_id, r.rating, r.comment, r.created_at,
            r.transaction_id, true AS is_visible,
            reviewer.name AS reviewer_name,
            reviewed.name AS reviewed_name,
            'transaction' AS review_type_name
          FROM reviews r
          LEFT JOIN user_profiles reviewer ON reviewer.user_id = r.reviewer_id
          LEFT JOIN user_profiles reviewed ON reviewed.user_id = r.reviewed_id
          UNION ALL
          SELECT pr.id, pr.reviewer_id, pr.reviewed_id, pr.rating, pr.comment, pr.created_at,
            NULL::bigint AS transaction_id, pr.is_visible,
            reviewer.name AS reviewer_name,
            reviewed.name AS reviewed_name,
            'profile' AS review_type_name
          FROM profile_reviews pr
          LEFT JOIN user_profiles reviewer ON reviewer.user_id = pr.reviewer_id
          LEFT JOIN user_profiles reviewed ON reviewed.user_id = pr.reviewed_id
        ) all_reviews
        ORDER BY created_at DESC, id DESC
        """
    )


async def delete_review(review_type: str, review_id: int) -> str | None:
    """
    Delete a review and its responses. Returns the reviewed user id, or None.
    """
    table = "profile_reviews" if review_type == "profile" else "reviews"
    async with db.transaction() as conn:
        await conn.execute(
            "DELETE FROM review_responses WHERE review_id = $1 AND review_type = $2",
            review_id,
            review_type,
        )
        reviewed_id = await conn.fetchval(
            f"DELETE FROM {table} WHERE id = $1 RETURNING reviewed_id",
            review_id,
        )
    return str(reviewed_id) if reviewed_id is not None else None
