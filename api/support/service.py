"""
Support desk business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Response, status

from auth import security
from auth import service as auth_service
from core import settings

from . import repository, schemas
from .dependencies import SUPPORT_COOKIE_NAME

logger = logging.getLogger(__name__)


def staff_summary(staff: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": staff["id"],
        "username": staff["username"],
        "name": staff["name"],
        "email": staff["email"],
        "role": staff["role"],
    }


async def login(payload: schemas.StaffLoginRequest, response: Response) -> dict[str, Any]:
    staff = await repository.get_staff_credentials(payload.username.strip())
    if (
        staff is None
        or not bool(staff["is_active"])
        or not security.verify_password(payload.password, str(staff["password_hash"]))
    ):
        logger.info("support_login_failed username=%s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = security.build_session_token(subject=str(staff["id"]), token_type=security.SUPPORT_TOKEN)
    auth_service.set_cookie(response, SUPPORT_COOKIE_NAME, token, max_age=settings.staff_session_max_age_s())

    logger.info("support_login staff_id=%s", staff["id"])
    return {"success": True, "user": staff_summary(staff)}


def logout(response: Response) -> dict[str, bool]:
    auth_service.clear_cookie(response, SUPPORT_COOKIE_NAME)
    return {"success": True}


async def list_tickets() -> list[dict[str, Any]]:
    return await repository.list_tickets()


async def list_responses(ticket_id: int) -> list[dict[str, Any]]:
    if not await repository.ticket_exists(ticket_id):
        raise HTTPException(status_code=404, detail="Ticket not found")
    return await repository.list_responses(ticket_id)


async def add_response(ticket_id: int, staff: dict[str, Any], payload: schemas.TicketResponseRequest) -> dict[str, Any]:
    response = await repository.add_response(
        ticket_id,
        responder_id=str(staff["id"]),
        responder_name=str(staff["name"]),
        message=payload.message.strip(),
        is_internal=payload.is_internal,
    )
    if response is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return response


async def update_status(ticket_id: int, payload: schemas.TicketStatusRequest) -> dict[str, bool]:
    updated = await repository.update_status(ticket_id, payload.status)
    if not updated:
        raise HTTPException(status_code=404, detail="Ticket not found")

    logger.info("support_ticket_status ticket_id=%s status=%s", ticket_id, payload.status)
    return {"success": True}


async def create_ticket(payload: schemas.CreateTicketRequest, user_id: str | None) -> dict[str, Any]:
    ticket = await repository.create_ticket(
        user_id=user_id,
        user_name=payload.user_name.strip(),
        user_email=payload.user_email.strip(),
        subject=payload.subject.strip(),
        message=payload.message.strip(),
        category=payload.category,
        priority=payload.priority,
    )
    logger.info("support_ticket_created ticket_id=%s user_id=%s", ticket["id"], user_id)
    return ticket
