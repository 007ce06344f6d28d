"""
Hosted identity service HTTP client.

End users sign in through an external users service (Google OAuth). This
backend never sees passwords; it only exchanges OAuth codes for opaque session
tokens and resolves tokens back to users.

Used endpoints (relative to USERS_SERVICE_API_URL):
- GET    /oauth/{provider}/redirect_url -> {"redirect_url": "..."}
- POST   /sessions                      -> {"session_token": "..."}
- GET    /users/me                      -> {"id": "...", "email": "...", ...}
- DELETE /sessions/current
"""

from __future__ import annotations

from typing import Any

import httpx

from . import settings


# Identity failures are explicit and separable from other runtime errors.
class IdentityError(RuntimeError):
    pass


def _base_url() -> str:
    base_url = settings.env_str("USERS_SERVICE_API_URL")
    if not base_url:
        raise IdentityError("USERS_SERVICE_API_URL is empty.")
    return base_url.rstrip("/")


def _headers(session_token: str | None = None) -> dict[str, str]:
    headers = {"x-api-key": settings.env_str("USERS_SERVICE_API_KEY")}
    if session_token:
        headers["Authorization"] = f"Bearer {session_token}"
    return headers


def _timeout_s() -> float:
    return settings.env_float("USERS_SERVICE_TIMEOUT_S", 10.0)


async def _request(
    method: str,
    path: str,
    *,
    session_token: str | None = None,
    json: dict[str, Any] | None = None,
) -> httpx.Response:
    try:
        async with httpx.AsyncClient(base_url=_base_url(), timeout=_timeout_s()) as client:
            return await client.request(method, path, headers=_headers(session_token), json=json)
    except httpx.HTTPError as exc:
        raise IdentityError(f"Identity service request failed: {method} {path}: {exc}") from exc


def _fail(resp: httpx.Response, what: str) -> IdentityError:
    # Avoid dumping huge bodies; include a small snippet.
    return IdentityError(f"Identity {what} failed: {resp.status_code} {resp.text[:300]}")


async def oauth_redirect_url(provider: str) -> str:
    resp = await _request("GET", f"/oauth/{provider}/redirect_url")
    if resp.status_code != 200:
        raise _fail(resp, "redirect url")

    url = (resp.json() or {}).get("redirect_url")
    if not isinstance(url, str) or not url:
        raise IdentityError("Identity service returned no redirect url.")
    return url


async def exchange_code(code: str) -> str:
    """
    Exchange an OAuth authorization code for a session token.
    """
    code = (code or "").strip()
    if not code:
        raise IdentityError("Authorization code is empty.")

    resp = await _request("POST", "/sessions", json={"code": code})
    if resp.status_code not in (200, 201):
        raise _fail(resp, "code exchange")

    token = (resp.json() or {}).get("session_token")
    if not isinstance(token, str) or not token:
        raise IdentityError("Identity service returned no session token.")
    return token


async def get_user(session_token: str) -> dict[str, Any] | None:
    """
    Resolve a session token to the identity user, or None if it is not valid.
    """
    resp = await _request("GET", "/users/me", session_token=session_token)
    if resp.status_code in (401, 403, 404):
        return None
    if resp.status_code != 200:
        raise _fail(resp, "user lookup")

    data = resp.json()
    if not isinstance(data, dict) or not str(data.get("id") or "").strip():
        raise IdentityError("Identity service returned a user without id.")
    return data


async def delete_session(session_token: str) -> None:
    resp = await _request("DELETE", "/sessions/current", session_token=session_token)
    # Already gone is fine.
    if resp.status_code not in (200, 204, 401, 404):
        raise _fail(resp, "session delete")
