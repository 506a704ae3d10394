# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-12

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

from socialauth.integrations.providers import Providers


def get_providers(request: Request) -> Providers:
    """The Providers handle created by the app factory."""
    return request.app.state.providers


async def require_api_key(request: Request) -> None:
    """Static shared-secret check on the ``Authorization`` header.

    Usage::

        @router.get("/avail", dependencies=[Depends(require_api_key)])
        async def check_avail(...): ...
    """
    expected: str = request.app.state.api_key
    supplied = request.headers.get("Authorization")
    if not supplied or not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(status_code=400, detail="malformed or unauthorized request")
