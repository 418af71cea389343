"""Read-only on-chain check that a wallet holds the identity token."""

from __future__ import annotations

import itertools

import httpx
import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector, to_checksum_address

from walletgate.exceptions import ChainUnavailable, TokenNotHeld

logger = structlog.get_logger(__name__)

BALANCE_OF_SELECTOR = encode_hex(function_signature_to_4byte_selector("balanceOf(address)"))


def encode_balance_of(wallet: str) -> str:
    """ABI-encode a ``balanceOf(address)`` call as hex calldata."""
    return BALANCE_OF_SELECTOR + encode(["address"], [to_checksum_address(wallet)]).hex()


def decode_balance(result: str) -> int:
    """Decode the ``uint256`` returned by ``balanceOf``."""
    (balance,) = decode(["uint256"], decode_hex(result))
    return int(balance)


class TokenBalanceChecker:
    """Queries ``balanceOf`` on a token contract through a JSON-RPC node."""

    def __init__(self, rpc_url: str, contract: str, timeout: float = 10.0) -> None:
        self._rpc_url = rpc_url
        self._contract = contract
        self._timeout = timeout
        self._ids = itertools.count(1)

    async def balance_of(self, wallet: str) -> int:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "eth_call",
            "params": [{"to": self._contract, "data": encode_balance_of(wallet)}, "latest"],
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._rpc_url, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("token_balance_request_failed", error=str(exc))
            raise ChainUnavailable from exc

        if not isinstance(data, dict) or "error" in data or not data.get("result"):
            logger.error("token_balance_rpc_error", response=str(data)[:300])
            raise ChainUnavailable
        try:
            return decode_balance(data["result"])
        except (DecodingError, TypeError, ValueError) as exc:
            logger.error("token_balance_undecodable", result=str(data["result"])[:80])
            raise ChainUnavailable from exc

    async def require_holder(self, wallet: str) -> None:
        """Raise TokenNotHeld unless ``wallet`` holds at least one token."""
        balance = await self.balance_of(wallet)
        if balance == 0:
            logger.info("token_not_held", wallet=wallet, contract=self._contract)
            raise TokenNotHeld
