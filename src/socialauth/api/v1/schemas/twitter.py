# Twitter schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel, Field


class PostTweetRequest(BaseModel):
    body: str = Field(..., min_length=1, max_length=280)
