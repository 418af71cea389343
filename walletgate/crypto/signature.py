"""EIP-191 personal_sign signature recovery."""

from __future__ import annotations

import structlog
from eth_account import Account
from eth_account.messages import encode_defunct

from walletgate.exceptions import InvalidSignature

logger = structlog.get_logger(__name__)

# r (32) + s (32) + v (1), hex encoded
_SIGNATURE_HEX_LEN = 130


class SignatureVerifier:
    """Recovers the signing wallet of a personal_sign message. Stateless."""

    def recover_address(self, message: str, signature: str) -> str:
        """Return the lowercase address that signed ``message``.

        Raises InvalidSignature for any malformed or unrecoverable signature.
        """
        sig = signature.strip()
        if sig.startswith(("0x", "0X")):
            sig = sig[2:]
        if len(sig) != _SIGNATURE_HEX_LEN:
            raise InvalidSignature
        try:
            sig_bytes = bytes.fromhex(sig)
        except ValueError as exc:
            raise InvalidSignature from exc

        try:
            address = Account.recover_message(encode_defunct(text=message), signature=sig_bytes)
        except Exception as exc:  # eth_keys raises several unrelated types
            logger.debug("signature_recovery_failed", error=type(exc).__name__)
            raise InvalidSignature from exc
        return address.lower()
