"""
Transaction persistence (raw SQL).

Every status change appends a `transaction_updates` row in the same DB
transaction as the change itself, so the history never diverges from the
current status.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

TRANSACTION_COLUMNS = """
  t.id, t.buyer_id, t.seller_id, t.product_id, t.amount_cents, t.status,
  t.payment_method, t.notes, t.escrow_released, t.delivery_confirmed_at,
  t.admin_released_at, t.created_at, t.updated_at
"""


async def _log_update(
    conn: asyncpg.Connection,
    transaction_id: int,
    *,
    status: str,
    updated_by: str,
    comment: str | None,
) -> None:
    await conn.execute(
        """
        INSERT INTO transaction_updates (transaction_id, status, comment, updated_by)
        VALUES ($1, $2, $3, $4)
        """,
        transaction_id,
        status,
        comment,
        updated_by,
    )


async def create_transaction(
    *,
    buyer_id: str,
    seller_id: str,
    product_id: int,
    amount_cents: int,
    notes: str | None,
    payment_method: str | None,
) -> dict[str, Any]:
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO transactions AS t (buyer_id, seller_id, product_id, amount_cents, notes, payment_method)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {TRANSACTION_COLUMNS}
            """,
            buyer_id,
            seller_id,
            product_id,
            amount_cents,
            notes,
            payment_method,
        )
        if row is None:
            raise RuntimeError("Failed to create transaction.")
        await _log_update(conn, int(row["id"]), status=str(row["status"]), updated_by=buyer_id, comment=notes)
        return dict(row)


async def list_for_user(user_id: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {TRANSACTION_COLUMNS},
          p.title AS product_title,
          p.main_image_url,
          buyer.name AS buyer_name,
          seller.name AS seller_name
        FROM transactions t
        LEFT JOIN products p ON p.id = t.product_id
        LEFT JOIN user_profiles buyer ON buyer.user_id = t.buyer_id
        LEFT JOIN user_profiles seller ON seller.user_id = t.seller_id
        WHERE t.buyer_id = $1
           OR t.seller_id = $1
        ORDER BY t.created_at DESC, t.id DESC
        """,
        user_id,
    )


async def list_all() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {TRANSACTION_COLUMNS},
          p.title AS product_title,
          buyer.name AS buyer_name,
          seller.name AS seller_name
        FROM transactions t
        LEFT JOIN products p ON p.id = t.product_id
        LEFT JOIN user_profiles buyer ON buyer.user_id = t.buyer_id
        LEFT JOIN user_profiles seller ON seller.user_id = t.seller_id
        ORDER BY t.created_at DESC, t.id DESC
        """
    )


async def get_transaction(transaction_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {TRANSACTION_COLUMNS},
          p.title AS product_title,
          p.main_image_url
        FROM transactions t
        LEFT JOIN products p ON p.id = t.product_id
        WHERE t.id = $1
        """,
        transaction_id,
    )


async def list_updates(transaction_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, transaction_id, status, comment, updated_by, created_at
        FROM transaction_updates
        WHERE transaction_id = $1
        ORDER BY created_at ASC, id ASC
        """,
        transaction_id,
    )


async def change_status(
    transaction_id: int,
    *,
    from_status: str,
    to_status: str,
    updated_by: str,
    comment: str | None,
) -> dict[str, Any] | None:
    """
    Move a transaction from `from_status` to `to_status`.

    The WHERE clause re-checks the current status, so a concurrent change makes
    this return None instead of applying a stale transition.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            UPDATE transactions AS t
            SET status = $3,
                delivery_confirmed_at = CASE WHEN $3 = 'delivered' THEN now() ELSE t.delivery_confirmed_at END,
                updated_at = now()
            WHERE t.id = $1
              AND t.status = $2
            RETURNING {TRANSACTION_COLUMNS}
            """,
            transaction_id,
            from_status,
            to_status,
        )
        if row is None:
            return None
        await _log_update(conn, transaction_id, status=to_status, updated_by=updated_by, comment=comment)
        return dict(row)


async def release_escrow(transaction_id: int, *, admin_id: str, comment: str | None) -> dict[str, Any] | None:
    """
    Release escrow on a delivered transaction and complete it.

    Also bumps the seller's sales and the buyer's purchases counters.
    Returns None when the transaction is not in a releasable state.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            UPDATE transactions AS t
            SET escrow_released = true,
                admin_released_at = now(),
                status = 'completed',
                updated_at = now()
            WHERE t.id = $1
              AND t.status = 'delivered'
              AND t.escrow_released = false
            RETURNING {TRANSACTION_COLUMNS}
            """,
            transaction_id,
        )
        if row is None:
            return None

        await _log_update(conn, transaction_id, status="completed", updated_by=admin_id, comment=comment)
        await conn.execute(
            "UPDATE user_profiles SET total_sales = total_sales + 1, updated_at = now() WHERE user_id = $1",
            row["seller_id"],
        )
        await conn.execute(
            "UPDATE user_profiles SET total_purchases = total_purchases + 1, updated_at = now() WHERE user_id = $1",
            row["buyer_id"],
        )
        return dict(row)
