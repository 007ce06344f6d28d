"""
Product business logic.

A listing is editable only for a short window after creation (30 minutes by
default, `PRODUCT_EDIT_WINDOW_MINUTES`). After that the seller can still
delete it but not change it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException

from core import settings
from profiles import repository as profile_repository

from . import repository, schemas

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_within_edit_window(created_at: datetime, *, now: datetime | None = None) -> bool:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or _utc_now()
    window = timedelta(minutes=settings.product_edit_window_minutes())
    return now - created_at <= window


def _product_fields(payload: schemas.ProductRequest) -> dict[str, Any]:
    fields = payload.model_dump()
    # Empty optional strings are stored as NULL.
    for key, value in fields.items():
        if isinstance(value, str) and key != "title":
            fields[key] = value.strip() or None
    fields["title"] = payload.title.strip()
    return fields


async def list_products(
    *,
    page: int = 1,
    limit: int = 50,
    search: str = "",
    hair_type: str = "",
    hair_color: str = "",
    hair_origin: str = "",
) -> list[dict[str, Any]]:
    page = max(page, 1)
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return await repository.list_products(
        search=(search or "").strip(),
        hair_type=(hair_type or "").strip(),
        hair_color=(hair_color or "").strip(),
        hair_origin=(hair_origin or "").strip(),
        limit=limit,
        offset=(page - 1) * limit,
    )


async def get_product(product_id: int) -> dict[str, Any]:
    product = await repository.get_product_detail(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    images = await repository.list_product_images(product_id)
    return {
        **product,
        "images": images,
        "can_edit": is_within_edit_window(product["created_at"]),
    }


async def create_product(seller_id: str, payload: schemas.ProductRequest) -> dict[str, Any]:
    if not await profile_repository.is_seller(seller_id):
        raise HTTPException(status_code=403, detail="User must be a seller to create products")

    product = await repository.create_product(seller_id, _product_fields(payload))
    logger.info("product_created product_id=%s seller_id=%s", product["id"], seller_id)
    return product


async def add_product_image(seller_id: str, payload: schemas.ProductImageRequest) -> dict[str, Any]:
    product = await repository.get_product(payload.product_id)
    if product is None or str(product["seller_id"]) != seller_id:
        raise HTTPException(status_code=403, detail="Product not found or unauthorized")

    return await repository.add_product_image(
        payload.product_id,
        image_url=payload.image_url,
        display_order=payload.display_order,
    )


async def update_product(product_id: int, seller_id: str, payload: schemas.ProductRequest) -> dict[str, Any]:
    existing = await repository.get_owned_product(product_id, seller_id=seller_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Product not found or unauthorized")

    if not is_within_edit_window(existing["created_at"]):
        minutes = settings.product_edit_window_minutes()
        raise HTTPException(
            status_code=403,
            detail=f"Product can only be edited within {minutes} minutes of creation",
        )

    updated = await repository.update_product(product_id, seller_id=seller_id, fields=_product_fields(payload))
    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found or unauthorized")
    return updated


async def delete_own_product(product_id: int, seller_id: str) -> dict[str, Any]:
    existing = await repository.get_owned_product(product_id, seller_id=seller_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Product not found or unauthorized")

    await repository.delete_product_cascade(product_id)
    logger.info("product_deleted product_id=%s seller_id=%s", product_id, seller_id)
    return {"success": True, "message": "Product deleted successfully"}


async def toggle_like(product_id: int, user_id: str) -> dict[str, bool]:
    if await repository.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    liked = await repository.toggle_like(product_id, user_id=user_id)
    return {"liked": liked}


async def like_status(product_id: int, user_id: str) -> dict[str, bool]:
    return {"liked": await repository.has_liked(product_id, user_id=user_id)}
