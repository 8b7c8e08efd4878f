"""Pydantic models for yt-dlp data transformation and configuration.

These are infrastructure-specific models for parsing external yt-dlp info dicts
and configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_voice_queue.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
UNKNOWN_TITLE: Final[str] = "Unknown Title"


def _coerce_headers(v: Any) -> dict[str, str]:
    if not isinstance(v, dict):
        return {}
    return {str(k): str(val) for k, val in v.items() if val is not None}


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_http_headers(cls, v: Any) -> dict[str, str]:
        return _coerce_headers(v)


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are silently ignored. Before-validators coerce
    garbage from external yt-dlp data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    original_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    http_headers: dict[str, str] = Field(default_factory=dict)
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("webpage_url", "original_url", "url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_http_headers(cls, v: Any) -> dict[str, str]:
        return _coerce_headers(v)

    @field_validator("formats", mode="before")
    @classmethod
    def _coerce_formats(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [f for f in v if isinstance(f, dict)]


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
