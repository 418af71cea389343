"""Unit tests for caller authentication in walletgate/web/auth.py."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from walletgate.models.interactions import Interaction
from walletgate.web.auth import verify_interaction_signature

NOW = 1_700_000_000
BODY = b'{"type":1}'


def _keypair() -> tuple[Ed25519PrivateKey, str]:
    key = Ed25519PrivateKey.generate()
    return key, key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()


@pytest.mark.unit
class TestVerifyInteractionSignature:
    def test_valid(self) -> None:
        key, public = _keypair()
        sig = key.sign(f"{NOW}".encode() + BODY).hex()
        assert verify_interaction_signature(BODY, sig, str(NOW), public, now=NOW)

    def test_other_key(self) -> None:
        _, public = _keypair()
        other, _ = _keypair()
        sig = other.sign(f"{NOW}".encode() + BODY).hex()
        assert not verify_interaction_signature(BODY, sig, str(NOW), public, now=NOW)

    def test_timestamp_is_signed(self) -> None:
        key, public = _keypair()
        sig = key.sign(f"{NOW}".encode() + BODY).hex()
        assert not verify_interaction_signature(BODY, sig, str(NOW + 1), public, now=NOW)

    def test_expired(self) -> None:
        key, public = _keypair()
        sig = key.sign(f"{NOW}".encode() + BODY).hex()
        assert not verify_interaction_signature(BODY, sig, str(NOW), public, now=NOW + 301)

    def test_malformed_inputs(self) -> None:
        key, public = _keypair()
        sig = key.sign(f"{NOW}".encode() + BODY).hex()
        assert not verify_interaction_signature(BODY, "", str(NOW), public, now=NOW)
        assert not verify_interaction_signature(BODY, sig, "soon", public, now=NOW)
        assert not verify_interaction_signature(BODY, "zz", str(NOW), public, now=NOW)
        assert not verify_interaction_signature(BODY, sig, str(NOW), "abcd", now=NOW)


@pytest.mark.unit
class TestInteractionPayload:
    def test_display_name_prefers_nick(self) -> None:
        interaction = Interaction.model_validate(
            {
                "type": 2,
                "member": {"user": {"id": "1", "username": "bob", "global_name": "Bobby"}, "nick": "B"},
            }
        )
        assert interaction.member is not None
        assert interaction.member.display_name == "B"

    def test_display_name_falls_back(self) -> None:
        interaction = Interaction.model_validate(
            {"type": 2, "member": {"user": {"id": "1", "username": "bob"}}}
        )
        assert interaction.member is not None
        assert interaction.member.display_name == "bob"

    def test_option_lookup(self) -> None:
        interaction = Interaction.model_validate(
            {
                "type": 2,
                "data": {"name": "begin-verification", "options": [{"name": "wallet", "value": "0xabc"}]},
            }
        )
        assert interaction.data is not None
        assert interaction.data.option("wallet") == "0xabc"
        assert interaction.data.option("signature") is None
