"""
Pydantic schemas for chat endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    message_type: Literal["text", "image"] = "text"
    image_url: str | None = None


class StartConversationRequest(BaseModel):
    product_id: int
    initial_message: str | None = Field(default=None, max_length=4000)
