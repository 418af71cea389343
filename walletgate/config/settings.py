"""Application settings via Pydantic BaseSettings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from walletgate.exceptions import ConfigError
from walletgate.types import GatewayMode

DEFAULT_ALLOWLIST_URL = "http://manifest.human.tech/api/covenant/signers-export"


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Community platform credentials
    bot_token: str
    application_id: str
    guild_id: str
    discord_api_url: str = "https://discord.com/api/v10"
    gateway_mode: GatewayMode = GatewayMode.DISCORD
    register_commands: bool = True
    # Ed25519 key (hex) the platform signs interaction requests with
    discord_public_key: str | None = None

    # Shared secret for the HTTP command routes; unset disables them
    command_secret: str | None = None

    # Allow-list provider
    allowlist_api_key: str
    allowlist_url: str = DEFAULT_ALLOWLIST_URL
    allowlist_entries_field: str = "signers"

    # Verification flow
    public_base_url: str
    role_name: str
    cooldown_seconds: float
    challenge_expiry_seconds: float
    success_grace_seconds: float = 5.0

    # Optional on-chain token check (disabled when no contract is set)
    sbt_contract: str | None = None
    rpc_url: str = "https://mainnet.optimism.io"

    # App
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("cooldown_seconds", "challenge_expiry_seconds")
    @classmethod
    def _positive_window(cls, value: float) -> float:
        if value <= 0:
            msg = "must be greater than zero"
            raise ValueError(msg)
        return value

    @field_validator("success_grace_seconds")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            msg = "must not be negative"
            raise ValueError(msg)
        return value

    @field_validator("public_base_url", "discord_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _interactions_need_key(self) -> Settings:
        if (
            self.gateway_mode == GatewayMode.DISCORD
            and self.register_commands
            and not self.discord_public_key
        ):
            msg = "discord_public_key is required to receive registered commands"
            raise ValueError(msg)
        return self


def load_settings() -> Settings:
    """Read settings from the environment, failing fast on missing values."""
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        fields = sorted(
            {".".join(str(p) for p in err["loc"]) or err["msg"] for err in exc.errors()}
        )
        msg = f"Invalid or missing configuration: {', '.join(fields)}"
        raise ConfigError(msg) from exc


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return load_settings()
