# Twitch schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel, Field


class TwitchUpdateRequest(BaseModel):
    """New title and category for a channel."""

    login: str = Field(..., min_length=1)
    game: str
    title: str = Field(..., max_length=140)


class CommercialResponse(BaseModel):
    """Reported commercial length and cooldown, in seconds."""

    length: int
    message: str
    retry_after: int
