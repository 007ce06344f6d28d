"""
Pydantic schemas for product endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProductRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    hair_type: str | None = Field(default=None, max_length=50)
    hair_color: str | None = Field(default=None, max_length=50)
    hair_length: float | None = Field(default=None, gt=0)
    weight_grams: float | None = Field(default=None, gt=0)
    hair_origin: str | None = Field(default=None, max_length=50)
    hair_texture: str | None = Field(default=None, max_length=50)
    price_cents: int = Field(..., gt=0)
    main_image_url: str | None = None


class ProductImageRequest(BaseModel):
    product_id: int
    image_url: str = Field(..., min_length=1)
    display_order: int = Field(default=0, ge=0)
