"""Per-requester cooldown between verification attempts."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Reservation:
    """Outcome of ``check_and_reserve``: ok, or blocked with the time left."""

    ok: bool
    remaining_seconds: float = 0.0


class CooldownTracker:
    """Remembers when each requester last started an attempt.

    Entries are never evicted; they are overwritten by later reservations.
    A reservation is not rolled back when the attempt later fails.
    """

    def __init__(self) -> None:
        self._last_attempt: dict[str, float] = {}

    def check_and_reserve(self, requester_id: str, now: float, window_seconds: float) -> Reservation:
        """Reserve a new attempt at ``now`` unless the window is still open.

        Contains no await, so two attempts for one requester on the same
        event loop cannot both get ``ok``.
        """
        remaining = self.remaining(requester_id, now, window_seconds)
        if remaining > 0:
            return Reservation(ok=False, remaining_seconds=remaining)
        self._last_attempt[requester_id] = now
        return Reservation(ok=True)

    def remaining(self, requester_id: str, now: float, window_seconds: float) -> float:
        """Seconds until the requester may start another attempt (0 if allowed)."""
        last = self._last_attempt.get(requester_id)
        if last is None:
            return 0.0
        return max(0.0, window_seconds - (now - last))

    def __len__(self) -> int:
        return len(self._last_attempt)
