"""
Pydantic schemas for review endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ReviewKind = Literal["transaction", "profile"]


class ProfileReviewRequest(BaseModel):
    reviewed_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class TransactionReviewRequest(BaseModel):
    transaction_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class ReviewResponseRequest(BaseModel):
    review_id: int
    review_type: ReviewKind
    response_text: str = Field(..., min_length=1, max_length=2000)
