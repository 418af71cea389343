"""Slash-command interactions delivered by the community platform.

Every request is signed by the platform. The requester is the member the
platform names in the payload, never a value the caller chooses. Commands
are acknowledged with a deferred reply and finished in the background,
since the platform only waits a few seconds for the first response.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import ValidationError

from walletgate.exceptions import GatewayError, VerificationError
from walletgate.gateway.base import CommunityGateway
from walletgate.models.interactions import CommandData, Interaction, InteractionMember
from walletgate.types import EPHEMERAL, InteractionResponseType, InteractionType
from walletgate.verification import messages
from walletgate.verification.workflow import VerificationWorkflow
from walletgate.web.auth import verify_interaction_signature
from walletgate.web.dependencies import get_gateway, get_workflow

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["interactions"])

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"

WorkflowDep = Annotated[VerificationWorkflow, Depends(get_workflow)]
GatewayDep = Annotated[CommunityGateway, Depends(get_gateway)]

CommandHandler = Callable[[VerificationWorkflow, InteractionMember, CommandData], Awaitable[str]]


def _reply(content: str) -> dict[str, Any]:
    return {
        "type": InteractionResponseType.CHANNEL_MESSAGE,
        "data": {"content": content, "flags": EPHEMERAL},
    }


async def _begin(workflow: VerificationWorkflow, member: InteractionMember, data: CommandData) -> str:
    result = await workflow.begin(member.user.id, member.display_name, data.option("wallet"))
    if result.already_verified or result.workspace is None:
        return messages.already_verified()
    return messages.ticket_created(result.workspace.channel_id)


async def _submit(workflow: VerificationWorkflow, member: InteractionMember, data: CommandData) -> str:
    result = await workflow.submit(member.user.id, data.option("signature") or "")
    return messages.verified(result.wallet)


_COMMANDS: dict[str, CommandHandler] = {
    "begin-verification": _begin,
    "submit-signature": _submit,
}


async def _run_command(
    workflow: VerificationWorkflow,
    gateway: CommunityGateway,
    token: str,
    member: InteractionMember,
    data: CommandData,
) -> None:
    try:
        content = await _COMMANDS[data.name](workflow, member, data)
    except VerificationError as exc:
        content = exc.user_message
    except GatewayError as exc:
        logger.error("interaction_command_failed", command=data.name, error=str(exc))
        content = VerificationError.user_message

    try:
        await gateway.edit_interaction_response(token, content)
    except GatewayError as exc:
        logger.warning("interaction_reply_failed", command=data.name, error=str(exc))


@router.post("/interactions")
async def receive_interaction(
    request: Request,
    background_tasks: BackgroundTasks,
    workflow: WorkflowDep,
    gateway: GatewayDep,
) -> dict[str, Any]:
    """Answer a signed interaction request."""
    settings = request.app.state.settings
    public_key = settings.discord_public_key
    if not public_key:
        raise HTTPException(status_code=404, detail="Interactions are not configured")

    payload = await request.body()
    if not verify_interaction_signature(
        payload,
        request.headers.get(SIGNATURE_HEADER, ""),
        request.headers.get(TIMESTAMP_HEADER, ""),
        public_key,
    ):
        logger.warning("interaction_signature_invalid")
        raise HTTPException(status_code=401, detail="Invalid request signature")

    try:
        interaction = Interaction.model_validate_json(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Malformed interaction") from exc

    if interaction.type == InteractionType.PING:
        return {"type": InteractionResponseType.PONG}

    data = interaction.data
    member = interaction.member
    if interaction.type != InteractionType.APPLICATION_COMMAND or data is None:
        return _reply("Unsupported interaction.")
    if member is None or interaction.guild_id != settings.guild_id:
        return _reply("Use this command inside the community server.")
    if data.name not in _COMMANDS:
        logger.info("interaction_unknown_command", command=data.name)
        return _reply("Unknown command.")

    background_tasks.add_task(_run_command, workflow, gateway, interaction.token, member, data)
    logger.info("interaction_deferred", command=data.name, requester_id=member.user.id)
    return {
        "type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE,
        "data": {"flags": EPHEMERAL},
    }
