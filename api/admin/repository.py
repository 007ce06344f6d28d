"""
Admin persistence (raw SQL).
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from core import db


def _json_dumps(value: object) -> str:
    return json.dumps(value, ensure_ascii=True)


async def get_admin_user(user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, user_id, role, permissions, created_at, updated_at
        FROM admin_users
        WHERE user_id = $1
        """,
        user_id,
    )


async def upsert_admin_user(user_id: str, *, role: str, permissions: dict[str, Any]) -> None:
    await db.execute(
        """
        INSERT INTO admin_users (user_id, role, permissions)
        VALUES ($1, $2, $3::jsonb)
        ON CONFLICT (user_id) DO UPDATE
        SET role = EXCLUDED.role,
            permissions = EXCLUDED.permissions,
            updated_at = now()
        """,
        user_id,
        role,
        _json_dumps(permissions),
    )


async def consume_setup_key(setup_key: str, *, user_id: str) -> bool:
    """
    Spend an unused setup key and grant super_admin to the user.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            """
            UPDATE admin_setup
            SET is_used = true,
                used_by = $2
            WHERE setup_key = $1
              AND is_used = false
            RETURNING id
            """,
            setup_key,
            user_id,
        )
        if row is None:
            return False
        await conn.execute(
            """
            INSERT INTO admin_users (user_id, role, permissions)
            VALUES ($1, 'super_admin', $2::jsonb)
            ON CONFLICT (user_id) DO UPDATE
            SET role = EXCLUDED.role,
                permissions = EXCLUDED.permissions,
                updated_at = now()
            """,
            user_id,
            _json_dumps({"all": True}),
        )
        return True


async def marketplace_counts() -> dict[str, Any]:
    row = await db.fetch_one(
        """
        SELECT
          (SELECT count(*) FROM user_profiles)::int AS total_users,
          (SELECT count(*) FROM user_profiles WHERE is_seller = true)::int AS total_sellers,
          (SELECT count(*) FROM user_profiles WHERE is_buyer = true)::int AS total_buyers,
          (SELECT count(*) FROM products WHERE is_available = true)::int AS total_products,
          (SELECT count(*) FROM transactions)::int AS total_transactions,
          (SELECT COALESCE(sum(amount_cents), 0) FROM transactions WHERE status <> 'cancelled')::bigint
            AS gross_volume_cents,
          (SELECT COALESCE(sum(price_paid_cents), 0) FROM featured_products)::bigint AS featured_revenue_cents
        """
    )
    return row or {}


async def record_action(
    *,
    admin_id: str,
    target_user_id: str,
    action_type: str,
    reason: str | None,
    notes: str | None,
    block_reason: str,
    block_expires_at: datetime | None,
) -> dict[str, Any]:
    """
    Log an admin action and apply its side effect (block/unblock).
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO admin_actions (admin_id, target_user_id, action_type, reason, notes)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id, admin_id, target_user_id, action_type, reason, notes, created_at
            """,
            admin_id,
            target_user_id,
            action_type,
            reason,
            notes,
        )
        if action_type == "block":
            await conn.execute(
                """
                INSERT INTO blocked_users (user_id, blocked_by, reason, expires_at)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (user_id) DO UPDATE
                SET blocked_by = EXCLUDED.blocked_by,
                    reason = EXCLUDED.reason,
                    blocked_at = now(),
                    expires_at = EXCLUDED.expires_at
                """,
                target_user_id,
                admin_id,
                block_reason,
                block_expires_at,
            )
        elif action_type == "unblock":
            await conn.execute("DELETE FROM blocked_users WHERE user_id = $1", target_user_id)

    if row is None:
        raise RuntimeError("Failed to record admin action.")
    return dict(row)


async def create_featured_product(
    *,
    product_id: int,
    seller_id: str,
    featured_type: str,
    price_paid_cents: int,
    expires_at: datetime,
) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO featured_products (product_id, seller_id, featured_type, price_paid_cents, expires_at)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING id, product_id, seller_id, featured_type, price_paid_cents, expires_at, is_active, created_at
        """,
        product_id,
        seller_id,
        featured_type,
        price_paid_cents,
        expires_at,
    )
    if row is None:
        raise RuntimeError("Failed to create featured product.")
    return row


async def reviewed_by(user_id: str) -> list[str]:
    """
    Users whose rating includes a review written by `user_id`.
    """
    rows = await db.fetch_all(
        """
        SELECT DISTINCT reviewed_id
        FROM (
          SELECT reviewed_id FROM reviews WHERE reviewer_id = $1
          UNION
          SELECT reviewed_id FROM profile_reviews WHERE reviewer_id = $1
        ) x
        WHERE reviewed_id <> $1
        """,
        user_id,
    )
    return [str(r["reviewed_id"]) for r in rows]


async def delete_user_cascade(user_id: str) -> bool:
    """
    Remove a user and everything they own or take part in.

    Returns True when a profile row was deleted.
    """
    async with db.transaction() as conn:
        await conn.execute("DELETE FROM product_likes WHERE user_id = $1", user_id)
        await conn.execute("DELETE FROM review_responses WHERE responder_id = $1", user_id)
        await conn.execute(
            """
            DELETE FROM review_responses
            WHERE (review_type = 'profile' AND review_id IN (
                     SELECT id FROM profile_reviews WHERE reviewer_id = $1 OR reviewed_id = $1))
               OR (review_type = 'transaction' AND review_id IN (
                     SELECT id FROM reviews WHERE reviewer_id = $1 OR reviewed_id = $1))
            """,
            user_id,
        )
        await conn.execute("DELETE FROM profile_reviews WHERE reviewer_id = $1 OR reviewed_id = $1", user_id)
        await conn.execute("DELETE FROM reviews WHERE reviewer_id = $1 OR reviewed_id = $1", user_id)
        await conn.execute(
            """
            DELETE FROM chat_messages
            WHERE sender_id = $1
               OR conversation_id IN (
                 SELECT id FROM chat_conversations WHERE buyer_id = $1 OR seller_id = $1)
            """,
            user_id,
        )
        await conn.execute("DELETE FROM chat_conversations WHERE buyer_id = $1 OR seller_id = $1", user_id)
        await conn.execute(
            """
            DELETE FROM transaction_updates
            WHERE transaction_id IN (SELECT id FROM transactions WHERE buyer_id = $1 OR seller_id = $1)
            """,
            user_id,
        )
        await conn.execute("DELETE FROM transactions WHERE buyer_id = $1 OR seller_id = $1", user_id)
        for table in ("product_images", "product_likes", "featured_products"):
            await conn.execute(
                f"DELETE FROM {table} WHERE product_id IN (SELECT id FROM products WHERE seller_id = $1)",
                user_id,
            )
        await conn.execute("DELETE FROM products WHERE seller_id = $1", user_id)
        await conn.execute("DELETE FROM uploaded_images WHERE user_id = $1", user_id)
        await conn.execute("DELETE FROM blocked_users WHERE user_id = $1", user_id)
        await conn.execute("DELETE FROM admin_actions WHERE target_user_id = $1", user_id)
        await conn.execute("DELETE FROM admin_messages WHERE user_id = $1", user_id)
        await conn.execute("DELETE FROM admin_conversations WHERE user_id = $1", user_id)
        await conn.execute("DELETE FROM admin_users WHERE user_id = $1", user_id)
        status = await conn.execute("DELETE FROM user_profiles WHERE user_id = $1", user_id)
    return db.affected_rows(status) > 0


async def send_admin_message(
    *,
    admin_id: str,
    user_id: str,
    subject: str | None,
    message: str,
    message_type: str,
) -> dict[str, Any]:
    async with db.transaction() as conn:
        conversation_id = await conn.fetchval(
            """
            INSERT INTO admin_conversations (admin_id, user_id, conversation_type)
            VALUES ($1, $2, 'admin_chat')
            ON CONFLICT (admin_id, user_id) DO UPDATE
            SET last_message_at = now()
            RETURNING id
            """,
            admin_id,
            user_id,
        )
        row = await conn.fetchrow(
            """
            INSERT INTO admin_messages (admin_id, user_id, subject, message, message_type)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id, admin_id, user_id, subject, message, message_type, is_read, created_at
            """,
            admin_id,
            user_id,
            subject,
            message,
            message_type,
        )
    if conversation_id is None or row is None:
        raise RuntimeError("Failed to send admin message.")
    return dict(row)


async def list_admin_messages_for(user_id: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT am.id, am.admin_id, am.user_id, am.subject, am.message, am.message_type,
          am.is_read, am.created_at,
          up.name AS user_name
        FROM admin_messages am
        LEFT JOIN user_profiles up ON up.user_id = am.user_id
        WHERE am.user_id = $1
        ORDER BY am.created_at ASC, am.id ASC
        """,
        user_id,
    )


async def list_inbox(user_id: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, admin_id, user_id, subject, message, message_type, is_read, created_at
        FROM admin_messages
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        user_id,
    )


async def mark_admin_message_read(message_id: int, *, user_id: str) -> bool:
    status = await db.execute(
        """
        UPDATE admin_messages
        SET is_read = true
        WHERE id = $1
          AND user_id = $2
        """,
        message_id,
        user_id,
    )
    return db.affected_rows(status) > 0
