"""Verification state machine: challenge issuance and signature submission.

A requester moves Idle -> PendingSignature -> Granted. ``begin`` checks the
cooldown and the allow-list, stages a private workspace and issues a
challenge. ``submit`` recovers the signer of that challenge and, on a
match, grants the role and schedules the workspace for deletion.

Only the registries (challenges, cooldowns, workspaces) are shared between
handlers. Their check-and-set calls never suspend, so no lock is held
across the network calls in between.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import structlog

from walletgate.exceptions import (
    CooldownBlocked,
    GatewayError,
    NoActiveChallenge,
    NotEligible,
    VerificationError,
    WalletMismatch,
    WorkspaceCreateFailed,
)
from walletgate.models.domain import (
    AllowlistEntry,
    BeginResult,
    SubmitResult,
    normalize_address,
)
from walletgate.types import IneligibleReason, VerificationState
from walletgate.verification import messages

if TYPE_CHECKING:
    from walletgate.allowlist.client import AllowlistClient
    from walletgate.chain.token_check import TokenBalanceChecker
    from walletgate.crypto.signature import SignatureVerifier
    from walletgate.models.domain import Challenge
    from walletgate.state.challenge_store import InMemoryChallengeStore
    from walletgate.state.cooldown import CooldownTracker
    from walletgate.verification.roles import RoleGrantor
    from walletgate.verification.workspace import WorkspaceManager

logger = structlog.get_logger(__name__)

DEFAULT_CHALLENGE_EXPIRY_SECONDS = 600.0
DEFAULT_SUCCESS_GRACE_SECONDS = 5.0


def select_entry(entries: Sequence[AllowlistEntry], claimed_wallet: str | None) -> AllowlistEntry:
    """Pick the allow-list entry this attempt verifies against.

    With a claimed wallet, the matching entry must exist and be eligible.
    Without one, the first eligible entry is used.
    """
    if claimed_wallet:
        wanted = normalize_address(claimed_wallet)
        entry = next((e for e in entries if e.wallet_address == wanted), None)
        if entry is None:
            raise NotEligible(IneligibleReason.NOT_IN_LIST)
        reason = entry.ineligible_reason()
        if reason is not None:
            raise NotEligible(reason)
        return entry

    entry = next((e for e in entries if e.is_eligible), None)
    if entry is None:
        raise NotEligible(IneligibleReason.NOT_IN_LIST)
    return entry


class VerificationWorkflow:
    """Orchestrates one verification attempt per requester."""

    def __init__(
        self,
        *,
        allowlist: AllowlistClient,
        verifier: SignatureVerifier,
        challenges: InMemoryChallengeStore,
        cooldowns: CooldownTracker,
        workspaces: WorkspaceManager,
        roles: RoleGrantor,
        public_base_url: str,
        cooldown_seconds: float,
        challenge_expiry_seconds: float = DEFAULT_CHALLENGE_EXPIRY_SECONDS,
        success_grace_seconds: float = DEFAULT_SUCCESS_GRACE_SECONDS,
        token_checker: TokenBalanceChecker | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._allowlist = allowlist
        self._verifier = verifier
        self._challenges = challenges
        self._cooldowns = cooldowns
        self._workspaces = workspaces
        self._roles = roles
        self._public_base_url = public_base_url
        self._cooldown_seconds = cooldown_seconds
        self._challenge_expiry_seconds = challenge_expiry_seconds
        self._success_grace_seconds = success_grace_seconds
        self._token_checker = token_checker
        self._clock = clock

    @property
    def workspaces(self) -> WorkspaceManager:
        return self._workspaces

    def state_of(self, requester_id: str) -> VerificationState:
        """Current non-terminal state. Terminal outcomes are not retained."""
        if self._challenges.get(requester_id) is not None:
            return VerificationState.PENDING_SIGNATURE
        return VerificationState.IDLE

    # ------------------------------------------------------------------
    # begin
    # ------------------------------------------------------------------

    async def begin(
        self,
        requester_id: str,
        display_name: str,
        claimed_wallet: str | None = None,
    ) -> BeginResult:
        """Start verification and issue a challenge.

        Raises a VerificationError subclass when the attempt cannot start.
        On failure the requester's previous workspace and challenge, if any,
        are left as they were. The cooldown reservation is kept.
        """
        log = logger.bind(requester_id=requester_id)

        if await self._roles.has_role(requester_id):
            log.info("verification_already_granted")
            return BeginResult(already_verified=True)

        now = self._clock()
        reservation = self._cooldowns.check_and_reserve(requester_id, now, self._cooldown_seconds)
        if not reservation.ok:
            log.info("verification_blocked", remaining_seconds=round(reservation.remaining_seconds, 1))
            raise CooldownBlocked(reservation.remaining_seconds)

        entries = await self._allowlist.fetch()
        try:
            entry = select_entry(entries, claimed_wallet)
        except NotEligible as exc:
            log.info("verification_not_eligible", reason=exc.reason.value, wallet=claimed_wallet)
            raise

        message = messages.challenge_message(entry.wallet_address, int(now * 1000))
        link = messages.signer_url(self._public_base_url, message, requester_id)

        workspace = await self._workspaces.create(requester_id, display_name)
        try:
            await self._workspaces.post(
                workspace, messages.instructions(message, link, self._challenge_expiry_seconds)
            )
        except GatewayError as exc:
            log.error("verification_instructions_failed", channel_id=workspace.channel_id, error=str(exc))
            await self._workspaces.close(workspace)
            raise WorkspaceCreateFailed from exc

        # Replaces any earlier challenge; the earlier workspace goes with it.
        challenge = self._challenges.issue(requester_id, message, entry.wallet_address, issued_at=now)
        self._workspaces.schedule_close(
            workspace, self._challenge_expiry_seconds, expire_challenge=True
        )
        await self._workspaces.activate(workspace)

        log.info(
            "challenge_issued",
            wallet=entry.wallet_address,
            channel_id=workspace.channel_id,
            expires_in=self._challenge_expiry_seconds,
        )
        return BeginResult(
            already_verified=False,
            challenge=challenge,
            workspace=workspace,
            signer_url=link,
        )

    # ------------------------------------------------------------------
    # submit
    # ------------------------------------------------------------------

    async def submit(self, requester_id: str, signature: str) -> SubmitResult:
        """Check a signature against the pending challenge and grant the role.

        InvalidSignature, WalletMismatch and token failures leave the
        challenge in place so the requester may resubmit until it expires.
        """
        log = logger.bind(requester_id=requester_id)

        challenge = self._challenges.get(requester_id)
        if challenge is None:
            log.info("signature_without_challenge")
            raise NoActiveChallenge

        try:
            recovered = self._verifier.recover_address(challenge.message, signature)
        except VerificationError:
            log.info("signature_invalid")
            raise
        if recovered != challenge.expected_wallet:
            log.info("signature_wallet_mismatch", expected=challenge.expected_wallet, recovered=recovered)
            raise WalletMismatch

        if self._token_checker is not None:
            await self._token_checker.require_holder(recovered)

        # Claim the challenge; a concurrent submit or an expiry may have won.
        if not self._challenges.consume(requester_id, challenge.message):
            log.info("signature_challenge_already_consumed")
            raise NoActiveChallenge

        try:
            await self._roles.grant(requester_id)
        except (VerificationError, GatewayError):
            self._restore(challenge)
            raise

        workspace = self._workspaces.get(requester_id)
        if workspace is not None:
            try:
                await self._workspaces.post(workspace, messages.verified(recovered))
            except GatewayError as exc:
                log.warning("verification_notice_failed", channel_id=workspace.channel_id, error=str(exc))
            self._workspaces.schedule_close(workspace, self._success_grace_seconds)

        log.info("verification_granted", wallet=recovered)
        return SubmitResult(requester_id=requester_id, wallet=recovered)

    def _restore(self, challenge: Challenge) -> None:
        """Put a claimed challenge back after the grant failed."""
        if self._challenges.get(challenge.requester_id) is None:
            self._challenges.issue(
                challenge.requester_id,
                challenge.message,
                challenge.expected_wallet,
                issued_at=challenge.issued_at,
            )
