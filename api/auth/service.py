"""
Auth business logic (end-user sessions via the hosted identity service).
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Response, status

from core import identity, settings

logger = logging.getLogger(__name__)

OAUTH_PROVIDER = "google"


def set_cookie(response: Response, name: str, value: str, *, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure(),
        samesite=settings.cookie_samesite(),
    )


def clear_cookie(response: Response, name: str) -> None:
    set_cookie(response, name, "", max_age=0)


async def oauth_redirect_url(provider: str = OAUTH_PROVIDER) -> str:
    try:
        return await identity.oauth_redirect_url(provider)
    except identity.IdentityError as exc:
        logger.error("oauth_redirect_failed provider=%s error=%s", provider, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OAuth configuration error",
        ) from exc


async def create_session(code: str | None, response: Response) -> dict[str, bool]:
    code = (code or "").strip()
    if not code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No authorization code provided",
        )

    try:
        session_token = await identity.exchange_code(code)
    except identity.IdentityError as exc:
        logger.error("session_create_failed error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Session creation failed",
        ) from exc

    set_cookie(
        response,
        settings.session_cookie_name(),
        session_token,
        max_age=settings.session_cookie_max_age_s(),
    )
    return {"success": True}


async def logout(session_token: str | None, response: Response) -> dict[str, bool]:
    if session_token:
        try:
            await identity.delete_session(session_token)
        except identity.IdentityError as exc:
            logger.error("session_delete_failed error=%s", exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Logout failed",
            ) from exc

    clear_cookie(response, settings.session_cookie_name())
    return {"success": True}


async def get_user_from_session(session_token: str) -> dict:
    try:
        user = await identity.get_user(session_token)
    except identity.IdentityError as exc:
        logger.error("identity_lookup_failed error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Identity service unavailable.",
        ) from exc

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session.",
        )
    return user


def display_name(user: dict) -> str | None:
    """
    Best-effort display name from the identity payload.
    """
    google_data = user.get("google_user_data") or {}
    name = google_data.get("name") if isinstance(google_data, dict) else None
    name = str(name or user.get("name") or "").strip()
    return name or None
