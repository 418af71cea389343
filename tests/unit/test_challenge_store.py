"""Unit tests for InMemoryChallengeStore."""

from __future__ import annotations

import pytest

from walletgate.state.challenge_store import InMemoryChallengeStore


@pytest.mark.unit
class TestInMemoryChallengeStore:
    def test_issue_and_get(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("user-1", "Verify ownership for 0xabc at 1", "0xABC", issued_at=10.0)
        challenge = store.get("user-1")
        assert challenge is not None
        assert challenge.message == "Verify ownership for 0xabc at 1"
        assert challenge.expected_wallet == "0xabc"
        assert challenge.issued_at == 10.0

    def test_get_missing(self) -> None:
        store = InMemoryChallengeStore()
        assert store.get("nobody") is None

    def test_issue_overwrites_previous(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("user-1", "first", "0xaaa")
        store.issue("user-1", "second", "0xbbb")
        assert len(store) == 1
        challenge = store.get("user-1")
        assert challenge is not None
        assert challenge.message == "second"
        assert challenge.expected_wallet == "0xbbb"

    def test_clear_is_idempotent(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("user-1", "msg", "0xaaa")
        store.clear("user-1")
        store.clear("user-1")
        store.clear("never-issued")
        assert store.get("user-1") is None

    def test_consume_once(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("user-1", "msg", "0xaaa")
        assert store.consume("user-1", "msg") is True
        assert store.consume("user-1", "msg") is False
        assert store.get("user-1") is None

    def test_consume_ignores_replaced_challenge(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("user-1", "old", "0xaaa")
        store.issue("user-1", "new", "0xaaa")
        assert store.consume("user-1", "old") is False
        assert store.get("user-1") is not None

    def test_requesters_are_independent(self) -> None:
        store = InMemoryChallengeStore()
        store.issue("a", "msg-a", "0xaaa")
        store.issue("b", "msg-b", "0xbbb")
        store.clear("a")
        assert store.get("a") is None
        assert store.get("b") is not None
