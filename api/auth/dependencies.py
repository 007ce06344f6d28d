"""
Auth dependencies for protected FastAPI routes.

The session token is read from the session cookie set by `POST /api/sessions`,
falling back to an `Authorization: Bearer <token>` header for API clients.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Request, status

from core import settings

from . import service

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format.",
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token


async def get_session_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str | None:
    cookie_token = (request.cookies.get(settings.session_cookie_name()) or "").strip()
    if cookie_token:
        return cookie_token
    return _extract_bearer_token(authorization)


async def get_current_user(session_token: str | None = Depends(get_session_token)) -> dict:
    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return await service.get_user_from_session(session_token)


async def get_optional_user(request: Request) -> dict | None:
    """
    Like get_current_user, but anonymous or invalid sessions yield None.
    """
    try:
        session_token = await get_session_token(request, request.headers.get("authorization"))
        if not session_token:
            return None
        return await service.get_user_from_session(session_token)
    except HTTPException as exc:
        logger.info("optional_user_unresolved status=%s detail=%s", exc.status_code, exc.detail)
        return None


def user_id(user: dict) -> str:
    return str(user["id"])
