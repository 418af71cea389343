"""Discord REST implementation of the community gateway."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from walletgate.exceptions import GatewayError
from walletgate.gateway.base import CommunityGateway

logger = structlog.get_logger(__name__)

# Permission bits (https://discord.com/developers/docs/topics/permissions)
VIEW_CHANNEL = 1 << 10
SEND_MESSAGES = 1 << 11
MANAGE_MESSAGES = 1 << 13
READ_MESSAGE_HISTORY = 1 << 16

_OVERWRITE_ROLE = 0
_OVERWRITE_MEMBER = 1
_GUILD_TEXT = 0


class DiscordRestGateway(CommunityGateway):
    """Talks to one guild through the Discord HTTP API using a bot token."""

    def __init__(
        self,
        token: str,
        application_id: str,
        guild_id: str,
        api_url: str = "https://discord.com/api/v10",
        timeout: float = 10.0,
    ) -> None:
        self._token = token
        self._application_id = application_id
        self._guild_id = guild_id
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        json: Any | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        headers = {"Authorization": f"Bot {self._token}"}
        try:
            async with httpx.AsyncClient(
                base_url=self._api_url, headers=headers, timeout=self._timeout
            ) as client:
                resp = await client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.error("discord_request_error", method=method, path=path, error=str(exc))
            msg = f"{method} {path} failed: {exc}"
            raise GatewayError(msg) from exc

        if resp.status_code == 404 and allow_not_found:
            return None
        if resp.status_code >= 400:
            logger.error(
                "discord_request_rejected",
                method=method,
                path=path,
                status=resp.status_code,
                body=resp.text[:500],
            )
            msg = f"{method} {path} returned {resp.status_code}"
            raise GatewayError(msg, status_code=resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def create_private_channel(self, name: str, member_id: str) -> str:
        member_allow = VIEW_CHANNEL | SEND_MESSAGES | READ_MESSAGE_HISTORY
        payload = {
            "name": name,
            "type": _GUILD_TEXT,
            "permission_overwrites": [
                # @everyone shares the guild id
                {"id": self._guild_id, "type": _OVERWRITE_ROLE, "deny": str(VIEW_CHANNEL)},
                {"id": member_id, "type": _OVERWRITE_MEMBER, "allow": str(member_allow)},
                {
                    "id": self._application_id,
                    "type": _OVERWRITE_MEMBER,
                    "allow": str(member_allow | MANAGE_MESSAGES),
                },
            ],
        }
        data = await self._request("POST", f"/guilds/{self._guild_id}/channels", json=payload)
        return str(data["id"])

    async def delete_channel(self, channel_id: str) -> None:
        await self._request("DELETE", f"/channels/{channel_id}", allow_not_found=True)

    async def send_message(self, channel_id: str, content: str) -> None:
        await self._request("POST", f"/channels/{channel_id}/messages", json={"content": content})

    async def find_role_id(self, role_name: str) -> str | None:
        roles = await self._request("GET", f"/guilds/{self._guild_id}/roles") or []
        for role in roles:
            if role.get("name") == role_name:
                return str(role["id"])
        return None

    async def member_role_ids(self, member_id: str) -> set[str]:
        member = await self._request(
            "GET", f"/guilds/{self._guild_id}/members/{member_id}", allow_not_found=True
        )
        if not member:
            return set()
        return {str(r) for r in member.get("roles", [])}

    async def add_member_role(self, member_id: str, role_id: str) -> None:
        await self._request(
            "PUT", f"/guilds/{self._guild_id}/members/{member_id}/roles/{role_id}"
        )

    async def register_commands(self, commands: list[dict[str, Any]]) -> None:
        await self._request(
            "PUT",
            f"/applications/{self._application_id}/guilds/{self._guild_id}/commands",
            json=commands,
        )
        logger.info("commands_registered", count=len(commands), guild_id=self._guild_id)

    async def edit_interaction_response(self, interaction_token: str, content: str) -> None:
        await self._request(
            "PATCH",
            f"/webhooks/{self._application_id}/{interaction_token}/messages/@original",
            json={"content": content},
        )
