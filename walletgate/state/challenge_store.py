"""Pending verification challenges, one per requester."""

from __future__ import annotations

from walletgate.models.domain import Challenge


class InMemoryChallengeStore:
    """Holds at most one Challenge per requester.

    ``issue`` overwrites any previous entry. There is no expiry here; the
    workspace teardown clears stale entries. None of the methods suspend,
    so each call is atomic on a single event loop.
    """

    def __init__(self) -> None:
        self._store: dict[str, Challenge] = {}

    def issue(self, requester_id: str, message: str, wallet: str, issued_at: float = 0.0) -> Challenge:
        """Store a new challenge for the requester, replacing any prior one."""
        challenge = Challenge(
            requester_id=requester_id,
            message=message,
            expected_wallet=wallet.lower(),
            issued_at=issued_at,
        )
        self._store[requester_id] = challenge
        return challenge

    def get(self, requester_id: str) -> Challenge | None:
        return self._store.get(requester_id)

    def clear(self, requester_id: str) -> None:
        """Remove the requester's challenge. No-op when absent."""
        self._store.pop(requester_id, None)

    def consume(self, requester_id: str, message: str) -> bool:
        """Remove the challenge only if it is still the one for ``message``.

        Returns True for exactly one caller per issued challenge.
        """
        current = self._store.get(requester_id)
        if current is None or current.message != message:
            return False
        del self._store[requester_id]
        return True

    def __len__(self) -> int:
        return len(self._store)
