"""
FastAPI router for image uploads.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter()


@router.post("/upload")
async def upload_image(
    file: UploadFile = File(...),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    """
    Upload an image (JPG, PNG, WEBP or GIF) and get back a data URL.

    The returned `url` can be used directly as `main_image_url` or as a
    product gallery image.
    """
    image = await service.store_image(file, user_id=auth_dependencies.user_id(current_user))
    return {
        "url": image.data_url,
        "id": image.id,
        "filename": image.filename,
        "size": image.size_bytes,
        "message": "Image uploaded successfully",
    }


@router.get("/images/{image_id}")
async def get_image(image_id: str) -> dict:
    return {"url": await service.get_image_url(image_id)}
