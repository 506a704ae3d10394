# Twitch router — id lookups, channel update, commercials.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from socialauth.api.deps import get_providers, require_api_key
from socialauth.api.v1.schemas.common import DataResponse
from socialauth.api.v1.schemas.twitch import CommercialResponse, TwitchUpdateRequest
from socialauth.integrations.providers import Providers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Twitch"], dependencies=[Depends(require_api_key)])


@router.get("/twitch/login_to_id", response_model=DataResponse[str])
async def login_to_id(
    login: str = Query(..., min_length=1),
    providers: Providers = Depends(get_providers),
):
    """Resolve a channel login to its broadcaster id."""
    channel_id = await providers.twitch.get_channel_id(login)
    return DataResponse[str](data=channel_id)


@router.get("/twitch/game_to_id", response_model=DataResponse[str])
async def game_to_id(
    game: str = Query(..., min_length=1),
    providers: Providers = Depends(get_providers),
):
    """Resolve a category name to its id ("" when nothing matches)."""
    game_id = await providers.twitch.get_game_id(game)
    return DataResponse[str](data=game_id)


@router.post("/twitch/update", status_code=204)
async def twitch_update(body: TwitchUpdateRequest, providers: Providers = Depends(get_providers)):
    """Change the live title and category of a channel."""
    await providers.twitch.update_broadcast(body.login, body.game, body.title)
    return Response(status_code=204)


@router.post("/twitch/commercial", response_model=CommercialResponse)
async def twitch_commercial(
    login: str = Query(..., min_length=1),
    length: int = Query(..., ge=1, le=180),
    providers: Providers = Depends(get_providers),
):
    """Start a commercial break on the channel."""
    channel_id = await providers.twitch.get_channel_id(login)
    res = await providers.twitch.run_commercial(channel_id, length)
    return CommercialResponse(length=res.length, message=res.message, retry_after=res.retry_after)
