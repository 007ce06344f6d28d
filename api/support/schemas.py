"""
Pydantic schemas for support desk endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]
TicketCategory = Literal["technical", "transaction", "account", "product", "general"]


class StaffLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=200)


class TicketResponseRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    message: str = Field(..., min_length=1, max_length=8000)
    is_internal: bool = False


class TicketStatusRequest(BaseModel):
    status: TicketStatus


class CreateTicketRequest(BaseModel):
    user_name: str = Field(..., min_length=1, max_length=200)
    user_email: str = Field(..., min_length=3, max_length=320)
    subject: str = Field(..., min_length=1, max_length=300)
    message: str = Field(..., min_length=1, max_length=8000)
    category: TicketCategory = "general"
    priority: TicketPriority = "medium"
