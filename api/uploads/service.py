"""
Image upload "service layer".

Images are stored inline as base64 `data:` URLs in the database, so the
frontend can render them without a separate object store:
- Validate content type
- Read file bytes with a size limit
- Encode to a data URL and persist
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from uuid import uuid4

from fastapi import HTTPException, UploadFile

from core import settings

from . import repository

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredImage:
    id: str
    filename: str
    content_type: str
    size_bytes: int
    data_url: str


def validate_content_type(file: UploadFile) -> str:
    content_type = (file.content_type or "").strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}. Use JPG, PNG, WEBP or GIF.",
        )
    return content_type


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            max_mb = max_bytes / 1024 / 1024
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_mb:.0f}MB.",
            )

    if not buf:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    return bytes(buf)


def to_data_url(content_type: str, data: bytes) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


async def store_image(file: UploadFile, *, user_id: str) -> StoredImage:
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided. Please select an image file to upload.")

    content_type = validate_content_type(file)
    data = await read_upload_bytes(file, max_bytes=settings.max_image_upload_bytes())

    image = StoredImage(
        id=str(uuid4()),
        filename=file.filename,
        content_type=content_type,
        size_bytes=len(data),
        data_url=to_data_url(content_type, data),
    )
    await repository.insert_image(
        image_id=image.id,
        user_id=user_id,
        filename=image.filename,
        content_type=image.content_type,
        data_url=image.data_url,
        file_size=image.size_bytes,
    )
    logger.info("image_uploaded image_id=%s user_id=%s size_bytes=%s", image.id, user_id, image.size_bytes)
    return image


async def get_image_url(image_id: str) -> str:
    row = await repository.get_image(image_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return str(row["data_url"])
