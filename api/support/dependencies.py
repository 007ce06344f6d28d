"""
Support staff session dependency.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from auth import security

from . import repository

SUPPORT_COOKIE_NAME = "support_session"

logger = logging.getLogger(__name__)


def _unauthenticated(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_current_staff(request: Request) -> dict:
    token = (request.cookies.get(SUPPORT_COOKIE_NAME) or "").strip()
    if not token:
        raise _unauthenticated()

    try:
        payload = security.decode_session_token(token, token_type=security.SUPPORT_TOKEN)
        staff_id = int(payload["sub"])
    except (security.AuthSecurityError, ValueError) as exc:
        logger.info("support_session_rejected reason=%s", exc)
        raise _unauthenticated("Invalid session") from exc

    staff = await repository.get_active_staff(staff_id)
    if staff is None:
        raise _unauthenticated("Invalid session")
    return staff
