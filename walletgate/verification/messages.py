"""Texts posted to requesters during verification."""

from __future__ import annotations

from urllib.parse import urlencode

CHALLENGE_PREFIX = "Verify ownership for"


def challenge_message(wallet: str, epoch_millis: int) -> str:
    """The text the requester signs. The timestamp makes it unique per attempt."""
    return f"{CHALLENGE_PREFIX} {wallet} at {epoch_millis}"


def signer_url(base_url: str, message: str, requester_id: str) -> str:
    query = urlencode({"msg": message, "requester": requester_id})
    return f"{base_url.rstrip('/')}/signer?{query}"


def instructions(message: str, link: str, expiry_seconds: float) -> str:
    minutes = max(1, round(expiry_seconds / 60))
    return (
        "**Wallet Verification Started**\n\n"
        f"Sign this message:\n`{message}`\n\n"
        f"Signer page:\n{link}\n\n"
        "Then reply:\n`/submit-signature signature:<your_signature>`\n\n"
        f"This channel closes in {minutes} minute{'s' if minutes != 1 else ''}."
    )


def ticket_created(channel_id: str) -> str:
    return f"Verification ticket created! Check your private channel: <#{channel_id}>"


def already_verified() -> str:
    return "You are already verified."


def verified(wallet: str) -> str:
    return f"Verified! Wallet: `{wallet}`"
