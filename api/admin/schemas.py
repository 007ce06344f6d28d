"""
Pydantic schemas for admin endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DirectLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=200)


class SetupRequest(BaseModel):
    setup_key: str = Field(..., min_length=1, max_length=200)


class AdminActionRequest(BaseModel):
    target_user_id: str = Field(..., min_length=1)
    action_type: Literal["block", "unblock", "warn", "review", "note"]
    reason: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=4000)
    # Only used by "block"; omitted means the block does not expire.
    duration_days: int | None = Field(default=None, ge=1, le=3650)


class FeaturedProductRequest(BaseModel):
    product_id: int
    featured_type: Literal["premium", "standard", "highlight"]
    duration_days: int = Field(..., ge=1, le=365)
    price_cents: int = Field(..., ge=0)


class AdminMessageRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=4000)
    subject: str | None = Field(default=None, max_length=200)
    message_type: str = Field(default="notification", max_length=50)
