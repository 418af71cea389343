"""Abstract community-platform interface used by the verification flow."""

from abc import ABC, abstractmethod
from typing import Any


class CommunityGateway(ABC):
    """The operations the verification flow needs from the chat platform."""

    @abstractmethod
    async def create_private_channel(self, name: str, member_id: str) -> str:
        """Create a text channel visible only to ``member_id`` and the bot. Returns its id."""

    @abstractmethod
    async def delete_channel(self, channel_id: str) -> None:
        """Delete a channel. Must succeed if the channel is already gone."""

    @abstractmethod
    async def send_message(self, channel_id: str, content: str) -> None:
        """Post a markdown message to a channel."""

    @abstractmethod
    async def find_role_id(self, role_name: str) -> str | None:
        """Look up a role by exact name."""

    @abstractmethod
    async def member_role_ids(self, member_id: str) -> set[str]:
        """Return the role ids currently held by a member."""

    @abstractmethod
    async def add_member_role(self, member_id: str, role_id: str) -> None:
        """Give a role to a member. Adding a held role is a no-op."""

    @abstractmethod
    async def register_commands(self, commands: list[dict[str, Any]]) -> None:
        """Register the slash commands for the community."""

    @abstractmethod
    async def edit_interaction_response(self, interaction_token: str, content: str) -> None:
        """Replace the deferred reply to a command interaction."""


# Slash commands exposed to community members.
VERIFICATION_COMMANDS: list[dict[str, Any]] = [
    {
        "name": "begin-verification",
        "description": "Start wallet verification",
        "type": 1,
        "options": [
            {
                "name": "wallet",
                "description": "Wallet address to verify (0x...)",
                "type": 3,
                "required": False,
            }
        ],
    },
    {
        "name": "submit-signature",
        "description": "Submit the signature of your verification message",
        "type": 1,
        "options": [
            {
                "name": "signature",
                "description": "Signature produced by your wallet",
                "type": 3,
                "required": True,
            }
        ],
    },
]
