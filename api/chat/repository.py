"""
Buyer/seller chat persistence (raw SQL).

A conversation is unique per (buyer, seller, product). Unread counts are
computed from `chat_messages.is_read` for messages the viewer did not send.
"""

from __future__ import annotations

from typing import Any

from core import db

CONVERSATION_COLUMNS = "cc.id, cc.buyer_id, cc.seller_id, cc.product_id, cc.last_message_at, cc.created_at, cc.updated_at"

MESSAGE_COLUMNS = "cm.id, cm.conversation_id, cm.sender_id, cm.message, cm.message_type, cm.image_url, cm.is_read, cm.created_at"


async def list_conversations_for(user_id: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {CONVERSATION_COLUMNS},
          p.title AS product_title,
          p.main_image_url AS product_image_url,
          CASE WHEN cc.buyer_id = $1 THEN seller_up.name ELSE buyer_up.name END AS other_user_name,
          last_msg.message AS last_message,
          (
            SELECT count(*)
            FROM chat_messages m
            WHERE m.conversation_id = cc.id
              AND m.sender_id <> $1
              AND m.is_read = false
          )::int AS unread_count
        FROM chat_conversations cc
        LEFT JOIN products p ON p.id = cc.product_id
        LEFT JOIN user_profiles seller_up ON seller_up.user_id = cc.seller_id
        LEFT JOIN user_profiles buyer_up ON buyer_up.user_id = cc.buyer_id
        LEFT JOIN LATERAL (
          SELECT m.message
          FROM chat_messages m
          WHERE m.conversation_id = cc.id
          ORDER BY m.created_at DESC, m.id DESC
          LIMIT 1
        ) last_msg ON true
        WHERE cc.buyer_id = $1
           OR cc.seller_id = $1
        ORDER BY cc.last_message_at DESC, cc.id DESC
        """,
        user_id,
    )


async def list_all_conversations() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {CONVERSATION_COLUMNS},
          p.title AS product_title,
          buyer_up.name AS buyer_name,
          seller_up.name AS seller_name,
          (SELECT count(*) FROM chat_messages m WHERE m.conversation_id = cc.id)::int AS message_count,
          (
            SELECT m.message
            FROM chat_messages m
            WHERE m.conversation_id = cc.id
            ORDER BY m.created_at DESC, m.id DESC
            LIMIT 1
          ) AS last_message
        FROM chat_conversations cc
        LEFT JOIN products p ON p.id = cc.product_id
        LEFT JOIN user_profiles buyer_up ON buyer_up.user_id = cc.buyer_id
        LEFT JOIN user_profiles seller_up ON seller_up.user_id = cc.seller_id
        ORDER BY cc.last_message_at DESC, cc.id DESC
        """
    )


async def get_conversation_for_participant(conversation_id: int, *, user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {CONVERSATION_COLUMNS}
        FROM chat_conversations cc
        WHERE cc.id = $1
          AND (cc.buyer_id = $2 OR cc.seller_id = $2)
        """,
        conversation_id,
        user_id,
    )


async def get_conversation_by_parties(*, buyer_id: str, seller_id: str, product_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {CONVERSATION_COLUMNS}
        FROM chat_conversations cc
        WHERE cc.buyer_id = $1
          AND cc.seller_id = $2
          AND cc.product_id = $3
        """,
        buyer_id,
        seller_id,
        product_id,
    )


async def list_messages(conversation_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {MESSAGE_COLUMNS}, up.name AS sender_name
        FROM chat_messages cm
        LEFT JOIN user_profiles up ON up.user_id = cm.sender_id
        WHERE cm.conversation_id = $1
        ORDER BY cm.created_at ASC, cm.id ASC
        """,
        conversation_id,
    )


async def mark_read(conversation_id: int, *, reader_id: str) -> int:
    status = await db.execute(
        """
        UPDATE chat_messages
        SET is_read = true,
            updated_at = now()
        WHERE conversation_id = $1
          AND sender_id <> $2
          AND is_read = false
        """,
        conversation_id,
        reader_id,
    )
    return db.affected_rows(status)


async def insert_message(
    conversation_id: int,
    *,
    sender_id: str,
    message: str,
    message_type: str,
    image_url: str | None,
) -> dict[str, Any]:
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO chat_messages AS cm (conversation_id, sender_id, message, message_type, image_url)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {MESSAGE_COLUMNS}
            """,
            conversation_id,
            sender_id,
            message,
            message_type,
            image_url,
        )
        await conn.execute(
            "UPDATE chat_conversations SET last_message_at = now(), updated_at = now() WHERE id = $1",
            conversation_id,
        )
    if row is None:
        raise RuntimeError("Failed to insert chat message.")
    return dict(row)


async def create_conversation(
    *,
    buyer_id: str,
    seller_id: str,
    product_id: int,
    initial_message: str | None,
) -> dict[str, Any]:
    """
    Create the conversation (or return the one a concurrent request created)
    and optionally post the opening message.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO chat_conversations AS cc (buyer_id, seller_id, product_id)
            VALUES ($1, $2, $3)
            ON CONFLICT (buyer_id, seller_id, product_id) DO UPDATE
            SET updated_at = cc.updated_at
            RETURNING {CONVERSATION_COLUMNS}
            """,
            buyer_id,
            seller_id,
            product_id,
        )
        if row is None:
            raise RuntimeError("Failed to create conversation.")

        if initial_message:
            await conn.execute(
                """
                INSERT INTO chat_messages (conversation_id, sender_id, message)
                VALUES ($1, $2, $3)
                """,
                row["id"],
                buyer_id,
                initial_message,
            )
        return dict(row)
