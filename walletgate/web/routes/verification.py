"""Verification command endpoints and the signer-page callback."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from walletgate.models.api import (
    BeginVerificationRequest,
    BeginVerificationResponse,
    SignatureResponse,
    SignatureSubmission,
)
from walletgate.verification import messages
from walletgate.verification.workflow import VerificationWorkflow
from walletgate.web.auth import require_command_secret
from walletgate.web.dependencies import get_workflow

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["verification"])

WorkflowDep = Annotated[VerificationWorkflow, Depends(get_workflow)]


@router.post(
    "/commands/begin-verification",
    response_model=BeginVerificationResponse,
    dependencies=[Depends(require_command_secret)],
)
async def begin_verification(
    body: BeginVerificationRequest, workflow: WorkflowDep
) -> BeginVerificationResponse:
    """Handle the ``begin-verification [wallet]`` command."""
    result = await workflow.begin(body.requester_id, body.display_name, body.wallet)
    if result.already_verified:
        return BeginVerificationResponse(already_verified=True, message=messages.already_verified())

    workspace = result.workspace
    return BeginVerificationResponse(
        message=messages.ticket_created(workspace.channel_id) if workspace else None,
        signer_url=result.signer_url,
        workspace=workspace.name if workspace else None,
    )


async def _submit(body: SignatureSubmission, workflow: VerificationWorkflow) -> SignatureResponse:
    result = await workflow.submit(body.requester_id, body.signature)
    return SignatureResponse(wallet=result.wallet)


@router.post(
    "/commands/submit-signature",
    response_model=SignatureResponse,
    dependencies=[Depends(require_command_secret)],
)
async def submit_signature_command(
    body: SignatureSubmission, workflow: WorkflowDep
) -> SignatureResponse:
    """Handle the ``submit-signature <signature>`` command."""
    return await _submit(body, workflow)


@router.post("/signature", response_model=SignatureResponse)
async def submit_signature(body: SignatureSubmission, workflow: WorkflowDep) -> SignatureResponse:
    """Receive a signature posted by the signer page."""
    return await _submit(body, workflow)
