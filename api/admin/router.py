"""
Admin API endpoints, plus the end-user inbox for admin messages.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from auth import dependencies as auth_dependencies
from transactions import schemas as transaction_schemas

from . import dependencies, schemas, service
from .dependencies import AdminPrincipal

router = APIRouter()
inbox_router = APIRouter()


@router.post("/admin/direct-login")
async def direct_login(request: schemas.DirectLoginRequest, response: Response) -> dict:
    return await service.direct_login(request, response)


@router.post("/admin/setup")
async def setup(
    request: schemas.SetupRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.setup(auth_dependencies.user_id(current_user), request)


@router.post("/admin/logout")
async def logout(response: Response) -> dict:
    return service.logout(response)


@router.get("/admin/check")
async def check(request: Request) -> dict:
    principal, user = await dependencies.resolve_admin(request)
    if principal is not None:
        return service.describe(principal)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not an admin")


@router.get("/admin/stats")
async def stats(_: AdminPrincipal = Depends(dependencies.require_admin)) -> dict:
    return await service.stats()


@router.get("/admin/users")
async def list_users(_: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.list_users()


@router.get("/admin/products")
async def list_products(_: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.list_products()


@router.get("/admin/reviews")
async def list_reviews(_: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.list_reviews()


@router.get("/admin/transactions")
async def list_transactions(_: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.list_transactions()


@router.post("/admin/transactions/{transaction_id}/release-escrow")
async def release_escrow(
    transaction_id: int,
    request: transaction_schemas.EscrowReleaseRequest | None = None,
    principal: AdminPrincipal = Depends(dependencies.require_admin),
) -> dict:
    comment = request.comment if request is not None else None
    return await service.release_escrow(principal, transaction_id, comment)


@router.post("/admin/actions")
async def record_action(
    request: schemas.AdminActionRequest,
    principal: AdminPrincipal = Depends(dependencies.require_admin),
) -> dict:
    return await service.record_action(principal, request)


@router.post("/admin/featured-products")
async def feature_product(
    request: schemas.FeaturedProductRequest,
    _: AdminPrincipal = Depends(dependencies.require_admin),
) -> dict:
    return await service.feature_product(request)


@router.delete("/admin/products/{product_id}")
async def delete_product(product_id: int, _: AdminPrincipal = Depends(dependencies.require_admin)) -> dict:
    return await service.delete_product(product_id)


@router.delete("/admin/users/{user_id}")
async def delete_user(user_id: str, _: AdminPrincipal = Depends(dependencies.require_admin)) -> dict:
    return await service.delete_user(user_id)


@router.delete("/admin/reviews/{review_id}")
async def delete_review(
    review_id: int,
    review_type: Literal["transaction", "profile"] = Query(..., alias="type"),
    _: AdminPrincipal = Depends(dependencies.require_admin),
) -> dict:
    return await service.delete_review(review_type, review_id)


@router.post("/admin/send-message")
async def send_message(
    request: schemas.AdminMessageRequest,
    principal: AdminPrincipal = Depends(dependencies.require_admin),
) -> dict:
    return await service.send_message(principal, request)


@router.get("/admin/user-conversations/{user_id}")
async def user_conversation(user_id: str, _: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.user_conversation(user_id)


@router.get("/admin/conversations")
async def list_chat_conversations(_: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.list_chat_conversations()


@router.get("/admin/conversations/{conversation_id}/messages")
async def chat_messages(conversation_id: int, _: AdminPrincipal = Depends(dependencies.require_admin)) -> list[dict]:
    return await service.chat_messages(conversation_id)


@inbox_router.get("/admin-messages")
async def inbox(current_user: dict = Depends(auth_dependencies.get_current_user)) -> list[dict]:
    return await service.inbox(auth_dependencies.user_id(current_user))


@inbox_router.post("/admin-messages/{message_id}/read")
async def mark_inbox_read(
    message_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.mark_inbox_read(message_id, auth_dependencies.user_id(current_user))
