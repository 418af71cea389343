"""Unit tests for TokenBalanceChecker."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from walletgate.chain.token_check import (
    BALANCE_OF_SELECTOR,
    TokenBalanceChecker,
    decode_balance,
    encode_balance_of,
)
from walletgate.exceptions import ChainUnavailable, TokenNotHeld

WALLET = "0x" + "ab" * 20
CONTRACT = "0x2AA822e264F8cc31A2b9C22f39e5551241e94DfB"


def _patch_rpc(payload: Any = None, error: Exception | None = None) -> tuple[Any, AsyncMock]:
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status.return_value = None
    mock_client = AsyncMock()
    if error is not None:
        mock_client.post = AsyncMock(side_effect=error)
    else:
        mock_client.post = AsyncMock(return_value=mock_resp)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return patch("walletgate.chain.token_check.httpx.AsyncClient", return_value=mock_client), mock_client


def _checker() -> TokenBalanceChecker:
    return TokenBalanceChecker(rpc_url="https://rpc.test", contract=CONTRACT)


@pytest.mark.unit
class TestEncodeBalanceOf:
    def test_pads_address(self) -> None:
        data = encode_balance_of(WALLET.upper().replace("0X", "0x"))
        assert data.startswith(BALANCE_OF_SELECTOR)
        assert len(data) == len(BALANCE_OF_SELECTOR) + 64
        assert data.endswith("ab" * 20)

    def test_selector(self) -> None:
        assert BALANCE_OF_SELECTOR == "0x70a08231"

    def test_decode_balance(self) -> None:
        assert decode_balance("0x" + "0" * 62 + "0a") == 10


@pytest.mark.unit
class TestTokenBalanceChecker:
    async def test_balance_of(self) -> None:
        patcher, client = _patch_rpc({"jsonrpc": "2.0", "id": 1, "result": "0x" + "0" * 63 + "2"})
        with patcher:
            assert await _checker().balance_of(WALLET) == 2
        payload = client.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_call"
        assert payload["params"][0]["to"] == CONTRACT

    async def test_require_holder_passes(self) -> None:
        patcher, _ = _patch_rpc({"result": "0x" + "0" * 63 + "1"})
        with patcher:
            await _checker().require_holder(WALLET)

    async def test_zero_balance_not_held(self) -> None:
        patcher, _ = _patch_rpc({"result": "0x" + "0" * 64})
        with patcher, pytest.raises(TokenNotHeld):
            await _checker().require_holder(WALLET)

    async def test_rpc_error(self) -> None:
        patcher, _ = _patch_rpc({"error": {"code": -32000, "message": "execution reverted"}})
        with patcher, pytest.raises(ChainUnavailable):
            await _checker().balance_of(WALLET)

    async def test_transport_error(self) -> None:
        patcher, _ = _patch_rpc(error=httpx.ReadTimeout("slow"))
        with patcher, pytest.raises(ChainUnavailable):
            await _checker().balance_of(WALLET)

    async def test_short_result_unavailable(self) -> None:
        patcher, _ = _patch_rpc({"result": "0x01"})
        with patcher, pytest.raises(ChainUnavailable):
            await _checker().balance_of(WALLET)
