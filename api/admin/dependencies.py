"""
Admin session resolution.

A request is treated as an admin when, in order:
1. it carries a valid signed `admin_session` cookie (direct admin login), or
2. it carries an end-user session whose user has an `admin_users` row.

Anything else is a regular user (or anonymous) and gets 403 from admin routes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException, Request, status

from auth import dependencies as auth_dependencies
from auth import security

from . import repository

ADMIN_COOKIE_NAME = "admin_session"
SOURCE_COOKIE = "cookie"
SOURCE_DATABASE = "database"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminPrincipal:
    admin_id: str
    role: str
    source: str
    permissions: dict[str, Any] = field(default_factory=dict)


def _permissions(value: Any) -> dict[str, Any]:
    # asyncpg hands jsonb back as text unless a codec is registered.
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def principal_from_cookie(request: Request) -> AdminPrincipal | None:
    token = (request.cookies.get(ADMIN_COOKIE_NAME) or "").strip()
    if not token:
        return None
    try:
        payload = security.decode_session_token(token, token_type=security.ADMIN_TOKEN)
    except security.AuthSecurityError as exc:
        logger.info("admin_cookie_rejected reason=%s", exc)
        return None
    return AdminPrincipal(
        admin_id=str(payload["sub"]),
        role=str(payload.get("role") or "super_admin"),
        source=SOURCE_COOKIE,
        permissions={"all": True},
    )


async def resolve_admin(request: Request) -> tuple[AdminPrincipal | None, dict | None]:
    """
    Return (admin principal or None, end user or None).
    """
    principal = principal_from_cookie(request)
    if principal is not None:
        return principal, None

    user = await auth_dependencies.get_optional_user(request)
    if user is None:
        return None, None

    admin_row = await repository.get_admin_user(auth_dependencies.user_id(user))
    if admin_row is None:
        return None, user

    principal = AdminPrincipal(
        admin_id=auth_dependencies.user_id(user),
        role=str(admin_row["role"]),
        source=SOURCE_DATABASE,
        permissions=_permissions(admin_row.get("permissions")),
    )
    return principal, user


async def require_admin(request: Request) -> AdminPrincipal:
    principal, _ = await resolve_admin(request)
    if principal is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not an admin")
    return principal
