# Auth / availability schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel


class AvailResponse(BaseModel):
    """Which providers have a stored credential."""

    twitch: bool
    twitter: bool
