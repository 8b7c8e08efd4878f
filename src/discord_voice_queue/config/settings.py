"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import CommandPrefixStr, PositiveInt, TimeoutSeconds, VolumeFloat


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    command_prefix: CommandPrefixStr = Field(
        default=".",
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    volume: VolumeFloat = Field(
        default=0.5,
        validation_alias=AliasChoices("volume", "default_volume"),
    )
    ytdlp_format: str = "bestaudio[protocol^=http]/bestaudio/best"
    ffmpeg_before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    ffmpeg_options: str = "-vn"


class PlaybackSettings(BaseModel):
    """Playback session behaviour."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    connect_timeout_seconds: TimeoutSeconds = Field(
        default=20.0,
        validation_alias=AliasChoices("connect_timeout_seconds", "connect_timeout"),
    )
    # Unset means keep skipping forward until a track plays or the queue is empty.
    max_consecutive_failures: PositiveInt | None = None


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, LOG_LEVEL, DISCORD_TOKEN (top-level)
    - DISCORD__COMMAND_PREFIX (nested with ``__``)
    - AUDIO__VOLUME, AUDIO__YTDLP_FORMAT, AUDIO__FFMPEG_OPTIONS, ...
    - PLAYBACK__CONNECT_TIMEOUT_SECONDS, PLAYBACK__MAX_CONSECUTIVE_FAILURES
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"

    discord_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("discord_token", "bot_token"),
    )

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper

    @property
    def has_token(self) -> bool:
        return bool(self.discord_token.get_secret_value().strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
