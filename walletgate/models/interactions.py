"""Inbound interaction payloads sent by the community platform."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class InteractionUser(_Payload):
    id: str
    username: str = ""
    global_name: str | None = None


class InteractionMember(_Payload):
    user: InteractionUser
    nick: str | None = None

    @property
    def display_name(self) -> str:
        return self.nick or self.user.global_name or self.user.username or self.user.id


class CommandOption(_Payload):
    name: str
    value: str | int | float | bool | None = None


class CommandData(_Payload):
    name: str
    options: list[CommandOption] = Field(default_factory=list)

    def option(self, name: str) -> str | None:
        for opt in self.options:
            if opt.name == name and opt.value is not None:
                return str(opt.value)
        return None


class Interaction(_Payload):
    """An interaction request. ``member`` is only present inside a guild."""

    type: int
    token: str = ""
    guild_id: str | None = None
    data: CommandData | None = None
    member: InteractionMember | None = None
