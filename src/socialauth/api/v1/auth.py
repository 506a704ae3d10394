# Auth router — provider availability and raw stored credentials.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from socialauth.api.deps import get_providers, require_api_key
from socialauth.api.v1.schemas.auth import AvailResponse
from socialauth.integrations.providers import Providers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"], dependencies=[Depends(require_api_key)])


@router.get("/avail", response_model=AvailResponse)
async def check_avail(providers: Providers = Depends(get_providers)):
    """Report which providers are connected."""
    return AvailResponse(**providers.availability())


@router.get("/auth")
async def get_auth_info(
    service: str = Query(..., min_length=1),
    providers: Providers = Depends(get_providers),
):
    """Return the stored credential file for *service* as-is."""
    store = providers.store_for(service)
    if store is None:
        raise HTTPException(status_code=404, detail=f"Unknown service: {service}")
    return Response(content=store.read_raw(), media_type="application/json")
