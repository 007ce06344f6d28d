"""
Auth API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SessionRequest(BaseModel):
    # Optional so a missing code answers 400 with a readable message, not 422.
    code: str | None = Field(default=None, max_length=2048)
