"""
Profile persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db

PROFILE_COLUMNS = """
  id, user_id, name, phone, location, bio, profile_image_url, whatsapp_number,
  business_name, business_type, is_seller, is_buyer, rating_avg, rating_count,
  total_sales, total_purchases, created_at, updated_at
"""


async def get_profile(user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {PROFILE_COLUMNS}
        FROM user_profiles
        WHERE user_id = $1
        """,
        user_id,
    )


async def create_default_profile(user_id: str, *, name: str | None) -> dict[str, Any]:
    # ON CONFLICT covers two first requests racing to create the same profile.
    row = await db.fetch_one(
        f"""
        INSERT INTO user_profiles (user_id, name, is_seller, is_buyer)
        VALUES ($1, $2, false, true)
        ON CONFLICT (user_id) DO UPDATE
        SET user_id = EXCLUDED.user_id
        RETURNING {PROFILE_COLUMNS}
        """,
        user_id,
        name,
    )
    if row is None:
        raise RuntimeError("Failed to create profile.")
    return row


async def update_profile(
    user_id: str,
    *,
    name: str | None,
    phone: str | None,
    location: str | None,
    bio: str | None,
    whatsapp_number: str | None,
    business_name: str | None,
    business_type: str | None,
    is_seller: bool | None,
) -> dict[str, Any] | None:
    """
    Partial update: NULL parameters keep the stored value.
    """
    return await db.fetch_one(
        f"""
        UPDATE user_profiles
        SET name = COALESCE($2, name),
            phone = COALESCE($3, phone),
            location = COALESCE($4, location),
            bio = COALESCE($5, bio),
            whatsapp_number = COALESCE($6, whatsapp_number),
            business_name = COALESCE($7, business_name),
            business_type = COALESCE($8, business_type),
            is_seller = COALESCE($9, is_seller),
            updated_at = now()
        WHERE user_id = $1
        RETURNING {PROFILE_COLUMNS}
        """,
        user_id,
        name,
        phone,
        location,
        bio,
        whatsapp_number,
        business_name,
        business_type,
        is_seller,
    )


async def is_seller(user_id: str) -> bool:
    value = await db.fetch_val(
        "SELECT is_seller FROM user_profiles WHERE user_id = $1",
        user_id,
    )
    return bool(value)


async def is_blocked(user_id: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM blocked_users
        WHERE user_id = $1
          AND (expires_at IS NULL OR expires_at > now())
        LIMIT 1
        """,
        user_id,
    )
    return row is not None


async def list_profiles_with_block_status() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {PROFILE_COLUMNS},
          EXISTS (
            SELECT 1 FROM blocked_users b
            WHERE b.user_id = user_profiles.user_id
              AND (b.expires_at IS NULL OR b.expires_at > now())
          ) AS is_blocked
        FROM user_profiles
        ORDER BY created_at DESC, id DESC
        """
    )


async def apply_rating(user_id: str, *, rating_avg: float, rating_count: int) -> None:
    await db.execute(
        """
        UPDATE user_profiles
        SET rating_avg = $2,
            rating_count = $3,
            updated_at = now()
        WHERE user_id = $1
        """,
        user_id,
        rating_avg,
        rating_count,
    )
