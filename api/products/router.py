"""
Product API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=service.MAX_PAGE_SIZE),
    search: str = Query(default="", max_length=200),
    hair_type: str = Query(default="", max_length=50),
    hair_color: str = Query(default="", max_length=50),
    hair_origin: str = Query(default="", max_length=50),
) -> list[dict]:
    return await service.list_products(
        page=page,
        limit=limit,
        search=search,
        hair_type=hair_type,
        hair_color=hair_color,
        hair_origin=hair_origin,
    )


@router.post("/products/images")
async def add_product_image(
    request: schemas.ProductImageRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.add_product_image(auth_dependencies.user_id(current_user), request)


@router.get("/products/{product_id}")
async def get_product(product_id: int) -> dict:
    return await service.get_product(product_id)


@router.post("/products")
async def create_product(
    request: schemas.ProductRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.create_product(auth_dependencies.user_id(current_user), request)


@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    request: schemas.ProductRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_product(product_id, auth_dependencies.user_id(current_user), request)


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete_own_product(product_id, auth_dependencies.user_id(current_user))


@router.post("/products/{product_id}/like")
async def toggle_like(
    product_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.toggle_like(product_id, auth_dependencies.user_id(current_user))


@router.get("/products/{product_id}/like-status")
async def like_status(
    product_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.like_status(product_id, auth_dependencies.user_id(current_user))
