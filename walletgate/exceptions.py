"""Exception hierarchy for walletgate."""

from __future__ import annotations

import math

from walletgate.types import IneligibleReason


class WalletGateError(Exception):
    """Base exception for all walletgate errors."""


class ConfigError(WalletGateError):
    """Raised when configuration is invalid."""


class GatewayError(WalletGateError):
    """Raised when the community platform rejects or fails a call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VerificationError(WalletGateError):
    """A user-facing verification outcome other than success.

    ``user_message`` is safe to show to the requester; infrastructure
    details belong in the server log only.
    """

    code = "verification_failed"
    status_code = 400
    user_message = "Verification failed. Please try again later."

    def __init__(self, user_message: str | None = None) -> None:
        if user_message is not None:
            self.user_message = user_message
        super().__init__(self.user_message)


class CooldownBlocked(VerificationError):
    code = "blocked"
    status_code = 429

    def __init__(self, remaining_seconds: float) -> None:
        self.remaining_seconds = remaining_seconds
        wait = max(1, math.ceil(remaining_seconds))
        super().__init__(f"Please wait {wait}s before starting another verification.")


_INELIGIBLE_MESSAGES = {
    IneligibleReason.NOT_IN_LIST: "Wallet not approved for verification.",
    IneligibleReason.COVENANT_NOT_SIGNED: "This wallet has not signed the covenant.",
    IneligibleReason.HUMANITY_NOT_VERIFIED: "This wallet has not completed humanity verification.",
}


class NotEligible(VerificationError):
    code = "not_eligible"
    status_code = 403

    def __init__(self, reason: IneligibleReason) -> None:
        self.reason = reason
        super().__init__(_INELIGIBLE_MESSAGES[reason])


class AllowlistUnavailable(VerificationError):
    code = "allowlist_unavailable"
    status_code = 503
    user_message = "Could not reach the allow-list right now. Please try again later."


class NoActiveChallenge(VerificationError):
    code = "no_active_challenge"
    status_code = 404
    user_message = "Run /begin-verification first or your challenge expired."


class InvalidSignature(VerificationError):
    code = "invalid_signature"
    status_code = 400
    user_message = "Invalid signature."


class WalletMismatch(VerificationError):
    code = "wallet_mismatch"
    status_code = 400
    user_message = "Signature does not match the submitted wallet."


class TokenNotHeld(VerificationError):
    code = "token_not_held"
    status_code = 403
    user_message = "Wallet does not hold the required identity token."


class ChainUnavailable(VerificationError):
    code = "chain_unavailable"
    status_code = 503
    user_message = "Error checking the identity token on-chain. Please try again."


class RoleNotConfigured(VerificationError):
    code = "role_not_configured"
    status_code = 500
    user_message = "Verification role not found. Please contact a moderator."


class WorkspaceCreateFailed(VerificationError):
    code = "workspace_create_failed"
    status_code = 502
    user_message = "Bot lacks permissions to create a verification channel."
