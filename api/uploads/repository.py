"""
Uploaded image persistence.
"""

from __future__ import annotations

from typing import Any

from core import db


async def insert_image(
    *,
    image_id: str,
    user_id: str,
    filename: str,
    content_type: str,
    data_url: str,
    file_size: int,
) -> None:
    await db.execute(
        """
        INSERT INTO uploaded_images (id, user_id, filename, content_type, data_url, file_size)
        VALUES ($1, $2, $3, $4, $5, $6)
        """,
        image_id,
        user_id,
        filename,
        content_type,
        data_url,
        file_size,
    )


async def get_image(image_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, user_id, filename, content_type, data_url, file_size, created_at
        FROM uploaded_images
        WHERE id = $1
        """,
        image_id,
    )
