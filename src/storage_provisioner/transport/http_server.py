"""Starlette HTTP application exposing the provisioning endpoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from storage_provisioner.app import AppContext, build_app_context
from storage_provisioner.config import Settings, load_settings
from storage_provisioner.provisioning.orchestrator import (
    INVALID_INPUT_MESSAGE,
    ProvisioningResult,
    configuration_error_result,
)

logger = logging.getLogger(__name__)

PROVISION_PATH = "/api/provision"


def _result_response(result: ProvisioningResult) -> JSONResponse:
    return JSONResponse(result.to_body(), status_code=result.status_code)


def create_http_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    """Create the HTTP application.

    *transport* replaces the appliance client's network transport; tests pass
    an ``httpx.MockTransport`` here.
    """
    if settings is None:
        settings = load_settings()
    context = build_app_context(settings, transport=transport)

    async def provision_handler(request: Request) -> Response:
        provisioner = context.provisioner
        if provisioner is None:
            logger.error("Appliance URL or API token is not configured.")
            return _result_response(configuration_error_result())

        try:
            payload = await request.json()
        except ValueError:
            return _result_response(
                ProvisioningResult(400, INVALID_INPUT_MESSAGE, "request body must be valid JSON")
            )

        result = await provisioner.provision(payload)
        return _result_response(result)

    async def health_handler(request: Request) -> Response:
        return JSONResponse({"status": "healthy"})

    async def ready_handler(request: Request) -> Response:
        if context.provisioner is None:
            return JSONResponse(
                {"status": "not_ready", "reason": "appliance not configured"},
                status_code=503,
            )
        return JSONResponse({"status": "ready"})

    routes = [
        Route(PROVISION_PATH, endpoint=provision_handler, methods=["POST"]),
        Route("/health", endpoint=health_handler, methods=["GET"]),
        Route("/ready", endpoint=ready_handler, methods=["GET"]),
    ]

    middleware: list[Middleware] = []
    if settings.server.http_enable_cors and settings.server.http_allowed_origins:
        from starlette.middleware.cors import CORSMiddleware

        middleware.append(
            Middleware(
                CORSMiddleware,
                allow_origins=list(settings.server.http_allowed_origins),
                allow_methods=["POST", "GET", "OPTIONS"],
                allow_headers=["Content-Type", "Accept"],
            )
        )

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Starting provisioning HTTP server...")
        try:
            yield
        finally:
            logger.info("Stopping provisioning HTTP server...")
            await _close_context(context)

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.context = context
    return app


async def _close_context(context: AppContext) -> None:
    try:
        await context.aclose()
    except Exception:
        logger.warning("Error while releasing application resources", exc_info=True)
