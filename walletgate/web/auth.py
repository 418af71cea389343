"""Caller authentication for the command endpoints."""

from __future__ import annotations

import hmac
import time

import structlog
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import HTTPException, Request

logger = structlog.get_logger(__name__)

# Interaction timestamp tolerance in seconds (5 minutes)
_INTERACTION_TOLERANCE = 300

COMMAND_SECRET_HEADER = "X-Command-Secret"


def verify_interaction_signature(
    payload: bytes,
    signature: str,
    timestamp: str,
    public_key: str,
    now: float | None = None,
) -> bool:
    """Verify a platform interaction request.

    The platform signs ``timestamp + body`` with the application's Ed25519
    key and sends the hex signature in ``X-Signature-Ed25519``.
    """
    if not signature or not timestamp:
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        return False
    now = time.time() if now is None else now
    if abs(now - ts) > _INTERACTION_TOLERANCE:
        logger.warning("interaction_timestamp_expired", delta=abs(now - ts))
        return False

    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode() + payload)
    except (InvalidSignature, ValueError):
        return False
    return True


def require_command_secret(request: Request) -> None:
    """FastAPI dependency guarding the HTTP command routes.

    The routes act on whatever requester id the body names, so they are only
    open to callers holding the configured shared secret.
    """
    secret = request.app.state.settings.command_secret
    if not secret:
        raise HTTPException(status_code=403, detail="Command endpoints are disabled")

    supplied = request.headers.get(COMMAND_SECRET_HEADER, "")
    if not hmac.compare_digest(supplied.encode(), secret.encode()):
        logger.warning("command_secret_invalid", path=request.url.path)
        raise HTTPException(status_code=401, detail="Invalid command secret")
