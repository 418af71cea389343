"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from walletgate.config.settings import Settings
from walletgate.crypto.signature import SignatureVerifier
from walletgate.gateway.memory import InMemoryCommunityGateway
from walletgate.models.domain import AllowlistEntry
from walletgate.state.challenge_store import InMemoryChallengeStore
from walletgate.state.cooldown import CooldownTracker
from walletgate.verification.roles import RoleGrantor
from walletgate.verification.workflow import VerificationWorkflow
from walletgate.verification.workspace import WorkspaceManager

ROLE_NAME = "Human ID Verified"
ROLE_ID = "role-verified"
BOT_ID = "app-1"
BASE_URL = "https://verify.example.org"
COMMAND_SECRET = "command-secret-123"

TEST_ENV = {
    "BOT_TOKEN": "bot-token",
    "APPLICATION_ID": BOT_ID,
    "GUILD_ID": "guild-1",
    "ALLOWLIST_API_KEY": "allowlist-key",
    "PUBLIC_BASE_URL": BASE_URL,
    "ROLE_NAME": ROLE_NAME,
    "COOLDOWN_SECONDS": "60",
    "CHALLENGE_EXPIRY_SECONDS": "600",
    "GATEWAY_MODE": "memory",
    "REGISTER_COMMANDS": "false",
    "COMMAND_SECRET": COMMAND_SECRET,
}


class FakeClock:
    """Settable replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticAllowlist:
    """Stands in for AllowlistClient; returns a fixed snapshot."""

    def __init__(self, entries: Iterable[AllowlistEntry] = ()) -> None:
        self.entries = list(entries)
        self.error: Exception | None = None
        self.calls = 0

    async def fetch(self) -> list[AllowlistEntry]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


def make_entry(
    address: str, covenant: str = "SIGNED", humanity: str = "VERIFIED"
) -> AllowlistEntry:
    return AllowlistEntry.model_validate(
        {"walletAddress": address, "covenantStatus": covenant, "humanityStatus": humanity}
    )


def sign(message: str, private_key: bytes) -> str:
    """personal_sign ``message`` and return the hex signature."""
    signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
    return "0x" + signed.signature.hex().removeprefix("0x")


@dataclass
class Harness:
    workflow: VerificationWorkflow
    gateway: InMemoryCommunityGateway
    allowlist: StaticAllowlist
    challenges: InMemoryChallengeStore
    cooldowns: CooldownTracker
    workspaces: WorkspaceManager
    clock: FakeClock


def build_harness(
    entries: Iterable[AllowlistEntry] = (),
    cooldown_seconds: float = 60.0,
    challenge_expiry_seconds: float = 600.0,
    success_grace_seconds: float = 0.0,
    token_checker: object | None = None,
) -> Harness:
    gateway = InMemoryCommunityGateway(bot_id=BOT_ID, roles={ROLE_NAME: ROLE_ID})
    allowlist = StaticAllowlist(entries)
    challenges = InMemoryChallengeStore()
    cooldowns = CooldownTracker()
    workspaces = WorkspaceManager(gateway, challenges)
    clock = FakeClock()
    workflow = VerificationWorkflow(
        allowlist=allowlist,  # type: ignore[arg-type]
        verifier=SignatureVerifier(),
        challenges=challenges,
        cooldowns=cooldowns,
        workspaces=workspaces,
        roles=RoleGrantor(gateway, ROLE_NAME),
        public_base_url=BASE_URL,
        cooldown_seconds=cooldown_seconds,
        challenge_expiry_seconds=challenge_expiry_seconds,
        success_grace_seconds=success_grace_seconds,
        token_checker=token_checker,  # type: ignore[arg-type]
        clock=clock,
    )
    return Harness(
        workflow=workflow,
        gateway=gateway,
        allowlist=allowlist,
        challenges=challenges,
        cooldowns=cooldowns,
        workspaces=workspaces,
        clock=clock,
    )


@pytest.fixture()
def account():
    """A fresh local Ethereum account."""
    return Account.create()


@pytest.fixture()
async def harness(account):
    """Workflow wired to in-memory collaborators with one eligible wallet."""
    h = build_harness([make_entry(account.address)])
    yield h
    await h.workspaces.shutdown()


@pytest.fixture()
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    return Settings(_env_file=None)  # type: ignore[call-arg]
