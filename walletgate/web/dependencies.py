"""Builds the verification services and exposes them to routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import HTTPException, Request

from walletgate.allowlist.client import AllowlistClient
from walletgate.chain.token_check import TokenBalanceChecker
from walletgate.crypto.signature import SignatureVerifier
from walletgate.gateway.discord_rest import DiscordRestGateway
from walletgate.gateway.memory import InMemoryCommunityGateway
from walletgate.state.challenge_store import InMemoryChallengeStore
from walletgate.state.cooldown import CooldownTracker
from walletgate.types import GatewayMode
from walletgate.verification.roles import RoleGrantor
from walletgate.verification.workflow import VerificationWorkflow
from walletgate.verification.workspace import WorkspaceManager

if TYPE_CHECKING:
    from walletgate.config.settings import Settings
    from walletgate.gateway.base import CommunityGateway

logger = structlog.get_logger(__name__)


def create_gateway(settings: Settings) -> CommunityGateway:
    """Create the community gateway selected by settings."""
    if settings.gateway_mode == GatewayMode.MEMORY:
        logger.warning("gateway_in_memory", note="roles and channels are not real")
        return InMemoryCommunityGateway(bot_id=settings.application_id)
    return DiscordRestGateway(
        token=settings.bot_token,
        application_id=settings.application_id,
        guild_id=settings.guild_id,
        api_url=settings.discord_api_url,
    )


def build_workflow(settings: Settings, gateway: CommunityGateway | None = None) -> VerificationWorkflow:
    """Wire a VerificationWorkflow with fresh in-memory registries."""
    gateway = gateway or create_gateway(settings)
    challenges = InMemoryChallengeStore()
    token_checker = None
    if settings.sbt_contract:
        token_checker = TokenBalanceChecker(rpc_url=settings.rpc_url, contract=settings.sbt_contract)

    return VerificationWorkflow(
        allowlist=AllowlistClient(
            url=settings.allowlist_url,
            api_key=settings.allowlist_api_key,
            entries_field=settings.allowlist_entries_field,
        ),
        verifier=SignatureVerifier(),
        challenges=challenges,
        cooldowns=CooldownTracker(),
        workspaces=WorkspaceManager(gateway, challenges),
        roles=RoleGrantor(gateway, settings.role_name),
        public_base_url=settings.public_base_url,
        cooldown_seconds=settings.cooldown_seconds,
        challenge_expiry_seconds=settings.challenge_expiry_seconds,
        success_grace_seconds=settings.success_grace_seconds,
        token_checker=token_checker,
    )


def get_workflow(request: Request) -> VerificationWorkflow:
    """FastAPI dependency returning the app's workflow."""
    workflow: VerificationWorkflow | None = getattr(request.app.state, "workflow", None)
    if workflow is None:
        raise HTTPException(status_code=500, detail="Verification service not configured")
    return workflow


def get_gateway(request: Request) -> CommunityGateway:
    """FastAPI dependency returning the app's community gateway."""
    gateway: CommunityGateway | None = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=500, detail="Community gateway not configured")
    return gateway
