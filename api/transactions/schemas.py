"""
Pydantic schemas for transaction endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

TransactionStatus = Literal["pending", "paid", "shipped", "delivered", "completed", "cancelled"]


class CreateTransactionRequest(BaseModel):
    product_id: int
    notes: str | None = Field(default=None, max_length=1000)
    payment_method: str | None = Field(default=None, max_length=50)


class StatusUpdateRequest(BaseModel):
    status: TransactionStatus
    comment: str | None = Field(default=None, max_length=1000)


class EscrowReleaseRequest(BaseModel):
    comment: str | None = Field(default=None, max_length=1000)
