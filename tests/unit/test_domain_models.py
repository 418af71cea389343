"""Unit tests for AllowlistEntry and address helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from walletgate.models.domain import AllowlistEntry, is_wallet_address, normalize_address
from walletgate.types import IneligibleReason

WALLET = "0x" + "Ab" * 20


def _entry(**fields: object) -> AllowlistEntry:
    return AllowlistEntry.model_validate({"walletAddress": WALLET, **fields})


@pytest.mark.unit
class TestAllowlistEntry:
    def test_address_lowercased(self) -> None:
        assert _entry().wallet_address == WALLET.lower()

    def test_invalid_address_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AllowlistEntry.model_validate({"walletAddress": "0x1234"})

    def test_missing_address_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AllowlistEntry.model_validate({"covenantStatus": "SIGNED"})

    def test_eligible_case_insensitive(self) -> None:
        entry = _entry(covenantStatus="signed", humanityStatus="Verified")
        assert entry.is_eligible is True
        assert entry.ineligible_reason() is None

    def test_covenant_checked_first(self) -> None:
        entry = _entry(covenantStatus="PENDING", humanityStatus="PENDING")
        assert entry.ineligible_reason() is IneligibleReason.COVENANT_NOT_SIGNED

    def test_humanity_not_verified(self) -> None:
        entry = _entry(covenantStatus="SIGNED", humanityStatus="UNVERIFIED")
        assert entry.ineligible_reason() is IneligibleReason.HUMANITY_NOT_VERIFIED

    def test_missing_flags_not_eligible(self) -> None:
        assert _entry().is_eligible is False

    def test_unknown_fields_ignored(self) -> None:
        entry = _entry(covenantStatus="SIGNED", humanityStatus="VERIFIED", extra="x")
        assert entry.is_eligible is True

    def test_entry_is_immutable(self) -> None:
        entry = _entry()
        with pytest.raises(ValidationError):
            entry.covenant_status = "SIGNED"  # type: ignore[misc]


@pytest.mark.unit
class TestAddressHelpers:
    def test_normalize(self) -> None:
        assert normalize_address("  0xABCdef  ") == "0xabcdef"

    def test_is_wallet_address(self) -> None:
        assert is_wallet_address(WALLET) is True
        assert is_wallet_address("0x" + "g" * 40) is False
        assert is_wallet_address("ab" * 20) is False
