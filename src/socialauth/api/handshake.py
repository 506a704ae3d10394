# Handshake router — "connect" redirects and provider callbacks.
# Created: 2026-10-12
#
# Not API-key protected: these are opened in the operator's browser.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from socialauth.api.deps import get_providers
from socialauth.integrations.providers import Providers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Handshake"])


@router.get("/", response_class=PlainTextResponse)
async def index(providers: Providers = Depends(get_providers)):
    lines = [
        f"{name}: {'connected' if connected else 'not connected'}"
        for name, connected in providers.availability().items()
    ]
    return "\n".join(lines) + "\n"


@router.get("/twitch/authorize")
async def twitch_authorize(providers: Providers = Depends(get_providers)):
    """Redirect to the Twitch consent screen."""
    return RedirectResponse(await providers.twitch.flow.begin(), status_code=302)


@router.get("/twitch/authorize/callback")
async def twitch_authorize_callback(
    request: Request, providers: Providers = Depends(get_providers)
):
    """Exchange the authorization code and store the credential."""
    await providers.twitch.flow.complete(dict(request.query_params))
    return RedirectResponse("/", status_code=302)


@router.get("/twitter/authorize")
async def twitter_authorize(providers: Providers = Depends(get_providers)):
    """Fetch a request token and redirect to the Twitter consent screen."""
    return RedirectResponse(await providers.twitter.flow.begin(), status_code=302)


@router.get("/twitter/authorize/callback")
async def twitter_authorize_callback(
    request: Request, providers: Providers = Depends(get_providers)
):
    """Exchange the pending request token and verifier for an access token."""
    await providers.twitter.flow.complete(dict(request.query_params))
    return RedirectResponse("/", status_code=302)
