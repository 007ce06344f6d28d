"""
Support desk persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db

STAFF_COLUMNS = "id, username, name, email, role, is_active"
TICKET_COLUMNS = """
  id, user_id, user_name, user_email, subject, message, status, priority, category,
  assigned_to, created_at, updated_at
"""
RESPONSE_COLUMNS = "id, ticket_id, responder_id, responder_name, message, is_internal, created_at, updated_at"


async def get_staff_credentials(username: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {STAFF_COLUMNS}, password_hash
        FROM support_staff
        WHERE username = $1
        """,
        username,
    )


async def get_active_staff(staff_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {STAFF_COLUMNS}
        FROM support_staff
        WHERE id = $1
          AND is_active = true
        """,
        staff_id,
    )


async def list_tickets() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {TICKET_COLUMNS}
        FROM support_tickets
        ORDER BY
          CASE status
            WHEN 'open' THEN 1
            WHEN 'in_progress' THEN 2
            WHEN 'resolved' THEN 3
            WHEN 'closed' THEN 4
            ELSE 5
          END,
          CASE priority
            WHEN 'urgent' THEN 1
            WHEN 'high' THEN 2
            WHEN 'medium' THEN 3
            WHEN 'low' THEN 4
            ELSE 5
          END,
          created_at DESC,
          id DESC
        """
    )


async def ticket_exists(ticket_id: int) -> bool:
    row = await db.fetch_one("SELECT 1 AS ok FROM support_tickets WHERE id = $1", ticket_id)
    return row is not None


async def list_responses(ticket_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {RESPONSE_COLUMNS}
        FROM support_responses
        WHERE ticket_id = $1
        ORDER BY created_at ASC, id ASC
        """,
        ticket_id,
    )


async def add_response(
    ticket_id: int,
    *,
    responder_id: str,
    responder_name: str,
    message: str,
    is_internal: bool,
) -> dict[str, Any] | None:
    """
    Insert a staff response and bump the ticket's updated_at.

    Returns None if the ticket disappeared.
    """
    async with db.transaction() as conn:
        touched = await conn.fetchval(
            "UPDATE support_tickets SET updated_at = now() WHERE id = $1 RETURNING id",
            ticket_id,
        )
        if touched is None:
            return None
        row = await conn.fetchrow(
            f"""
            INSERT INTO support_responses (ticket_id, responder_id, responder_name, message, is_internal)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {RESPONSE_COLUMNS}
            """,
            ticket_id,
            responder_id,
            responder_name,
            message,
            is_internal,
        )
    return db.record_to_dict(row)


async def update_status(ticket_id: int, status: str) -> bool:
    result = await db.execute(
        """
        UPDATE support_tickets
        SET status = $2,
            updated_at = now()
        WHERE id = $1
        """,
        ticket_id,
        status,
    )
    return db.affected_rows(result) > 0


async def create_ticket(
    *,
    user_id: str | None,
    user_name: str,
    user_email: str,
    subject: str,
    message: str,
    category: str,
    priority: str,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO support_tickets (user_id, user_name, user_email, subject, message, category, priority)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING {TICKET_COLUMNS}
        """,
        user_id,
        user_name,
        user_email,
        subject,
        message,
        category,
        priority,
    )
    if row is None:
        raise RuntimeError("Failed to create support ticket.")
    return row
