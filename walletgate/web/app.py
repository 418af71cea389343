"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from walletgate.config.logging import setup_logging
from walletgate.config.settings import get_settings
from walletgate.exceptions import GatewayError, VerificationError
from walletgate.gateway.base import VERIFICATION_COMMANDS
from walletgate.web.dependencies import build_workflow, create_gateway
from walletgate.web.health import VERSION, check_health
from walletgate.web.middleware import RateLimitMiddleware, RequestIDMiddleware
from walletgate.web.routes.interactions import router as interactions_router
from walletgate.web.routes.pages import router as pages_router
from walletgate.web.routes.verification import router as verification_router

if TYPE_CHECKING:
    from walletgate.config.settings import Settings
    from walletgate.gateway.base import CommunityGateway
    from walletgate.verification.workflow import VerificationWorkflow

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    gateway: CommunityGateway | None = None,
    workflow: VerificationWorkflow | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)

    gateway = gateway or create_gateway(settings)
    workflow = workflow or build_workflow(settings, gateway)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.register_commands:
            try:
                await gateway.register_commands(VERIFICATION_COMMANDS)
            except GatewayError as exc:
                logger.error("command_registration_failed", error=str(exc))
        yield
        await workflow.workspaces.shutdown()

    app = FastAPI(
        title="walletgate",
        description="Wallet-ownership verification for community roles",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.workflow = workflow
    app.state.gateway = gateway

    @app.exception_handler(VerificationError)
    async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.user_message, "code": exc.code},
        )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        logger.error("gateway_error", path=request.url.path, status=exc.status_code, error=str(exc))
        return JSONResponse(
            status_code=502,
            content={"error": VerificationError.user_message, "code": "gateway_error"},
        )

    # Middleware (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.public_base_url],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    app.add_middleware(RateLimitMiddleware, max_requests=30, window_seconds=60)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(pages_router)
    app.include_router(verification_router)
    app.include_router(interactions_router)

    @app.get("/api/health")
    async def health_check() -> dict[str, object]:
        return check_health(settings, app.state.workflow)

    logger.info("app_created", gateway_mode=settings.gateway_mode.value)
    return app
