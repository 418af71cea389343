"""Enums and type aliases for walletgate."""

from enum import IntEnum, StrEnum


class CovenantStatus(StrEnum):
    SIGNED = "signed"


class HumanityStatus(StrEnum):
    VERIFIED = "verified"


class IneligibleReason(StrEnum):
    NOT_IN_LIST = "not_in_list"
    COVENANT_NOT_SIGNED = "covenant_not_signed"
    HUMANITY_NOT_VERIFIED = "humanity_not_verified"


class VerificationState(StrEnum):
    IDLE = "idle"
    PENDING_SIGNATURE = "pending_signature"
    GRANTED = "granted"
    FAILED = "failed"


class GatewayMode(StrEnum):
    DISCORD = "discord"
    MEMORY = "memory"


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE = 4
    DEFERRED_CHANNEL_MESSAGE = 5


# Message flag: only the invoking member sees the reply
EPHEMERAL = 1 << 6
