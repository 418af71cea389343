"""Health check endpoint logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from walletgate.config.settings import Settings
    from walletgate.verification.workflow import VerificationWorkflow

VERSION = "0.1.0"


def check_health(settings: Settings, workflow: VerificationWorkflow | None) -> dict[str, object]:
    """Return application health status."""
    return {
        "status": "healthy" if workflow is not None else "degraded",
        "version": VERSION,
        "gateway_mode": settings.gateway_mode.value,
    }
