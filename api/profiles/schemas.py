"""
Pydantic schemas for profile endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    phone: str | None = Field(default=None, max_length=40)
    location: str | None = Field(default=None, max_length=200)
    bio: str | None = Field(default=None, max_length=500)
    whatsapp_number: str | None = Field(default=None, max_length=40)
    business_name: str | None = Field(default=None, max_length=200)
    business_type: str | None = Field(default=None, max_length=100)
    is_seller: bool | None = None
