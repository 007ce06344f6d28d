"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from . import dependencies, schemas, service

router = APIRouter()


@router.get("/oauth/google/redirect_url")
async def google_redirect_url() -> dict:
    return {"redirectUrl": await service.oauth_redirect_url("google")}


@router.post("/sessions")
async def create_session(request: schemas.SessionRequest, response: Response) -> dict:
    return await service.create_session(request.code, response)


@router.get("/users/me")
async def me(current_user: dict = Depends(dependencies.get_current_user)) -> dict:
    return current_user


@router.get("/logout")
async def logout(
    response: Response,
    session_token: str | None = Depends(dependencies.get_session_token),
) -> dict:
    return await service.logout(session_token, response)
