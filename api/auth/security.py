"""
Auth security helpers.

End-user credentials live in the hosted identity service. What this module
guards is local: support staff passwords (bcrypt) and the signed cookies that
carry admin and support sessions (JWT).
"""

from __future__ import annotations

import hmac
import time
from typing import Any

import bcrypt
import jwt

from core import settings

ADMIN_TOKEN = "admin"
SUPPORT_TOKEN = "support"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return settings.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest((a or "").encode("utf-8"), (b or "").encode("utf-8"))


def build_session_token(*, subject: str, token_type: str, extra: dict[str, Any] | None = None) -> str:
    issued_at = now_epoch_s()
    payload: dict[str, Any] = {
        **(extra or {}),
        "sub": str(subject),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + settings.staff_session_max_age_s(),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_session_token(token: str, *, token_type: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Session token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid session token.") from exc

    if str(payload.get("type") or "").strip().lower() != token_type:
        raise AuthSecurityError(f"Token is not a {token_type} session.")
    if not str(payload.get("sub") or "").strip():
        raise AuthSecurityError("Session token has no subject.")

    return payload
