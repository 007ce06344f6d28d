"""
Admin business logic: staff login, moderation, featured listings, messaging.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, Response, status

from auth import security
from auth import service as auth_service
from chat import repository as chat_repository
from core import settings
from products import repository as product_repository
from profiles import repository as profile_repository
from reviews import repository as review_repository
from reviews import service as review_service
from transactions import repository as transaction_repository
from transactions import service as transaction_service

from . import repository, schemas
from .dependencies import ADMIN_COOKIE_NAME, AdminPrincipal

logger = logging.getLogger(__name__)

SUPER_ADMIN = "super_admin"
FULL_PERMISSIONS = {"all": True}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def direct_login(payload: schemas.DirectLoginRequest, response: Response) -> dict[str, Any]:
    expected_password = settings.admin_password()
    if not expected_password:
        logger.warning("admin_direct_login_disabled reason=no_password_configured")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials")

    # Evaluate both comparisons so timing does not reveal which one failed.
    username_ok = security.constant_time_equals(payload.username, settings.admin_username())
    password_ok = security.constant_time_equals(payload.password, expected_password)
    if not (username_ok and password_ok):
        logger.info("admin_direct_login_failed username=%s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials")

    principal_id = settings.admin_principal_id()
    token = security.build_session_token(
        subject=principal_id,
        token_type=security.ADMIN_TOKEN,
        extra={"role": SUPER_ADMIN},
    )
    auth_service.set_cookie(response, ADMIN_COOKIE_NAME, token, max_age=settings.staff_session_max_age_s())
    await repository.upsert_admin_user(principal_id, role=SUPER_ADMIN, permissions=FULL_PERMISSIONS)

    logger.info("admin_direct_login principal=%s", principal_id)
    return {"success": True, "message": "Admin login successful"}


async def setup(user_id: str, payload: schemas.SetupRequest) -> dict[str, Any]:
    granted = await repository.consume_setup_key(payload.setup_key.strip(), user_id=user_id)
    if not granted:
        raise HTTPException(status_code=400, detail="Invalid or already used setup key")

    logger.info("admin_setup_granted user_id=%s", user_id)
    return {"success": True, "message": "Admin access granted"}


def logout(response: Response) -> dict[str, bool]:
    auth_service.clear_cookie(response, ADMIN_COOKIE_NAME)
    return {"success": True}


def describe(principal: AdminPrincipal) -> dict[str, Any]:
    return {
        "admin_id": principal.admin_id,
        "role": principal.role,
        "source": principal.source,
        "permissions": principal.permissions,
    }


def commission_cents(gross_volume_cents: int, rate: float | None = None) -> int:
    if rate is None:
        rate = settings.commission_rate()
    return int(math.floor(int(gross_volume_cents or 0) * rate))


async def stats() -> dict[str, Any]:
    counts = await repository.marketplace_counts()
    return {
        "total_users": int(counts.get("total_users") or 0),
        "total_sellers": int(counts.get("total_sellers") or 0),
        "total_buyers": int(counts.get("total_buyers") or 0),
        "total_products": int(counts.get("total_products") or 0),
        "total_transactions": int(counts.get("total_transactions") or 0),
        "total_revenue_cents": commission_cents(int(counts.get("gross_volume_cents") or 0)),
        "featured_revenue_cents": int(counts.get("featured_revenue_cents") or 0),
    }


async def list_users() -> list[dict[str, Any]]:
    return await profile_repository.list_profiles_with_block_status()


async def list_products() -> list[dict[str, Any]]:
    return await product_repository.list_all_products()


async def list_reviews() -> list[dict[str, Any]]:
    return await review_repository.list_all_reviews()


async def list_transactions() -> list[dict[str, Any]]:
    return await transaction_repository.list_all()


async def record_action(principal: AdminPrincipal, payload: schemas.AdminActionRequest) -> dict[str, Any]:
    expires_at = None
    if payload.action_type == "block" and payload.duration_days:
        expires_at = _utc_now() + timedelta(days=payload.duration_days)

    action = await repository.record_action(
        admin_id=principal.admin_id,
        target_user_id=payload.target_user_id,
        action_type=payload.action_type,
        reason=payload.reason,
        notes=payload.notes,
        block_reason=payload.reason or "Blocked by admin",
        block_expires_at=expires_at,
    )
    logger.info(
        "admin_action admin_id=%s target=%s action=%s expires_at=%s",
        principal.admin_id,
        payload.target_user_id,
        payload.action_type,
        expires_at.isoformat() if expires_at else None,
    )
    return {"success": True, "action": action}


async def feature_product(payload: schemas.FeaturedProductRequest) -> dict[str, Any]:
    product = await product_repository.get_product(payload.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    featured = await repository.create_featured_product(
        product_id=payload.product_id,
        seller_id=str(product["seller_id"]),
        featured_type=payload.featured_type,
        price_paid_cents=payload.price_cents,
        expires_at=_utc_now() + timedelta(days=payload.duration_days),
    )
    logger.info(
        "product_featured product_id=%s type=%s days=%s",
        payload.product_id,
        payload.featured_type,
        payload.duration_days,
    )
    return {"success": True, "featured": featured}


async def delete_product(product_id: int) -> dict[str, Any]:
    deleted = await product_repository.delete_product_cascade(product_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Product not found")

    logger.info("admin_product_deleted product_id=%s", product_id)
    return {"success": True, "message": "Product deleted successfully"}


async def delete_user(user_id: str) -> dict[str, Any]:
    affected = await repository.reviewed_by(user_id)
    profile_deleted = await repository.delete_user_cascade(user_id)

    for reviewed_id in affected:
        await review_service.recompute_rating(reviewed_id)

    logger.info(
        "admin_user_deleted user_id=%s profile_deleted=%s ratings_recomputed=%s",
        user_id,
        profile_deleted,
        len(affected),
    )
    return {"success": True, "message": "User deleted successfully"}


async def delete_review(review_type: str, review_id: int) -> dict[str, Any]:
    return await review_service.delete_review(review_type, review_id)


async def release_escrow(principal: AdminPrincipal, transaction_id: int, comment: str | None) -> dict[str, Any]:
    return await transaction_service.release_escrow(transaction_id, principal.admin_id, comment)


async def send_message(principal: AdminPrincipal, payload: schemas.AdminMessageRequest) -> dict[str, Any]:
    message = await repository.send_admin_message(
        admin_id=principal.admin_id,
        user_id=payload.user_id,
        subject=(payload.subject or "").strip() or None,
        message=payload.message.strip(),
        message_type=payload.message_type,
    )
    return {"success": True, "message": message}


async def user_conversation(user_id: str) -> list[dict[str, Any]]:
    return await repository.list_admin_messages_for(user_id)


async def list_chat_conversations() -> list[dict[str, Any]]:
    return await chat_repository.list_all_conversations()


async def chat_messages(conversation_id: int) -> list[dict[str, Any]]:
    return await chat_repository.list_messages(conversation_id)


async def inbox(user_id: str) -> list[dict[str, Any]]:
    return await repository.list_inbox(user_id)


async def mark_inbox_read(message_id: int, user_id: str) -> dict[str, bool]:
    updated = await repository.mark_admin_message_read(message_id, user_id=user_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Message not found")
    return {"success": True}
