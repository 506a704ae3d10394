# Twitter router — post a status update.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from socialauth.api.deps import get_providers, require_api_key
from socialauth.api.v1.schemas.twitter import PostTweetRequest
from socialauth.integrations.providers import Providers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Twitter"], dependencies=[Depends(require_api_key)])


@router.post("/tweet", status_code=204)
async def post_tweet(body: PostTweetRequest, providers: Providers = Depends(get_providers)):
    """Post *body* as a tweet from the connected account."""
    await providers.twitter.post_update(body.body)
    return Response(status_code=204)
