"""Inter-module data contracts for the verification flow (never persisted)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from walletgate.types import CovenantStatus, HumanityStatus, IneligibleReason

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: str) -> str:
    """Trim and lowercase a hex wallet address."""
    return address.strip().lower()


def is_wallet_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value.strip()))


class AllowlistEntry(BaseModel):
    """One record of the remote allow-list.

    ``walletAddress`` is required and must be a hex address; the two status
    flags are optional and default to empty, which is never eligible.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    wallet_address: str = Field(alias="walletAddress")
    covenant_status: str = Field(default="", alias="covenantStatus")
    humanity_status: str = Field(default="", alias="humanityStatus")

    @field_validator("wallet_address")
    @classmethod
    def _valid_address(cls, value: str) -> str:
        if not is_wallet_address(value):
            msg = "walletAddress is not a 0x-prefixed 20-byte hex address"
            raise ValueError(msg)
        return normalize_address(value)

    @field_validator("covenant_status", "humanity_status", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def covenant_signed(self) -> bool:
        return self.covenant_status.strip().lower() == CovenantStatus.SIGNED

    @property
    def humanity_verified(self) -> bool:
        return self.humanity_status.strip().lower() == HumanityStatus.VERIFIED

    @property
    def is_eligible(self) -> bool:
        return self.covenant_signed and self.humanity_verified

    def ineligible_reason(self) -> IneligibleReason | None:
        """Return why this entry cannot verify, or None when it is eligible."""
        if not self.covenant_signed:
            return IneligibleReason.COVENANT_NOT_SIGNED
        if not self.humanity_verified:
            return IneligibleReason.HUMANITY_NOT_VERIFIED
        return None


@dataclass(frozen=True, slots=True)
class Challenge:
    """A pending proof obligation: the requester must sign ``message``."""

    requester_id: str
    message: str
    expected_wallet: str
    issued_at: float


@dataclass(frozen=True, slots=True)
class WorkspaceHandle:
    """The private channel staged for one verification attempt."""

    requester_id: str
    channel_id: str
    name: str


@dataclass(frozen=True, slots=True)
class BeginResult:
    already_verified: bool
    challenge: Challenge | None = None
    workspace: WorkspaceHandle | None = None
    signer_url: str | None = None


@dataclass(frozen=True, slots=True)
class SubmitResult:
    requester_id: str
    wallet: str
