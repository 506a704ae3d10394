"""API server for ``socialauth serve``.

Builds the provider handle (loading stored credentials), mounts the
handshake routes and the ``/api/v1/`` routers, and renders every
GatewayError as a ``{status, error, message}`` JSON body.
"""

from __future__ import annotations

import logging
import secrets

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from socialauth.api.v1.schemas.common import ErrorResponse
from socialauth.config import Settings, get_settings
from socialauth.integrations.errors import REASONS, GatewayError
from socialauth.integrations.providers import Providers, build_providers

logger = logging.getLogger(__name__)


def _error_body(status: int, message: str) -> dict:
    return ErrorResponse(status=status, error=REASONS.get(status, "unknown"), message=message).model_dump()


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    status = exc.status if 400 <= exc.status < 600 else 502
    return JSONResponse(status_code=status, content=exc.to_dict())


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.status_code, str(exc.detail)))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(400, "malformed request"))


def create_api_app(
    settings: Settings | None = None,
    providers: Providers | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Raises CorruptCredentialError when a stored credential file is invalid.
    """
    from socialauth import __version__
    from socialauth.api.handshake import router as handshake_router
    from socialauth.api.v1 import mount_v1_routers

    settings = settings or get_settings()
    if providers is None:
        providers = build_providers(settings, transport=transport)

    app = FastAPI(
        title="socialauth API",
        description="Twitch and Twitter account linking and actions.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.providers = providers
    api_key = settings.api_key
    if not api_key:
        api_key = secrets.token_urlsafe(30)
        logger.warning("No SOCIALAUTH_API_KEY configured, generated one for this run: %s", api_key)
    app.state.api_key = api_key

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(handshake_router)
    mount_v1_routers(app)

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    dev: bool = False,
    log_level: str = "info",
) -> None:
    """Start the API server."""
    import uvicorn

    logger.info("socialauth listening on http://%s:%d", host, port)

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "socialauth.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_api_app()
        uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
