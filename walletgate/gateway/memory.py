"""In-process community gateway for local runs and tests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

import structlog

from walletgate.exceptions import GatewayError
from walletgate.gateway.base import CommunityGateway

logger = structlog.get_logger(__name__)


@dataclass
class MemoryChannel:
    channel_id: str
    name: str
    visible_to: frozenset[str]
    messages: list[str] = field(default_factory=list)


class InMemoryCommunityGateway(CommunityGateway):
    """Keeps channels, roles and members in dicts. Not shared across processes."""

    def __init__(self, bot_id: str = "bot", roles: dict[str, str] | None = None) -> None:
        self.bot_id = bot_id
        self.roles: dict[str, str] = dict(roles or {})  # name -> role id
        self.member_roles: dict[str, set[str]] = {}
        self.channels: dict[str, MemoryChannel] = {}
        self.deleted_channels: list[str] = []
        self.registered_commands: list[dict[str, Any]] = []
        self.interaction_responses: dict[str, str] = {}  # token -> reply
        self.fail_channel_creation = False
        self._ids = itertools.count(1)

    async def create_private_channel(self, name: str, member_id: str) -> str:
        if self.fail_channel_creation:
            msg = "Missing Permissions"
            raise GatewayError(msg, status_code=403)
        channel_id = f"channel-{next(self._ids)}"
        self.channels[channel_id] = MemoryChannel(
            channel_id=channel_id,
            name=name,
            visible_to=frozenset({member_id, self.bot_id}),
        )
        return channel_id

    async def delete_channel(self, channel_id: str) -> None:
        if self.channels.pop(channel_id, None) is not None:
            self.deleted_channels.append(channel_id)

    async def send_message(self, channel_id: str, content: str) -> None:
        channel = self.channels.get(channel_id)
        if channel is None:
            msg = f"Unknown channel {channel_id}"
            raise GatewayError(msg, status_code=404)
        channel.messages.append(content)

    async def find_role_id(self, role_name: str) -> str | None:
        return self.roles.get(role_name)

    async def member_role_ids(self, member_id: str) -> set[str]:
        return set(self.member_roles.get(member_id, set()))

    async def add_member_role(self, member_id: str, role_id: str) -> None:
        self.member_roles.setdefault(member_id, set()).add(role_id)

    async def register_commands(self, commands: list[dict[str, Any]]) -> None:
        self.registered_commands = list(commands)
        logger.info("commands_registered", count=len(commands), gateway="memory")

    async def edit_interaction_response(self, interaction_token: str, content: str) -> None:
        self.interaction_responses[interaction_token] = content
