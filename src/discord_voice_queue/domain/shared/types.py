"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types are defined once here so models can annotate their fields::

    from discord_voice_queue.domain.shared.types import HttpUrlStr, TrackTitleStr

    class Track(BaseModel):
        url: HttpUrlStr
        title: TrackTitleStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""


PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""

TimeoutSeconds = Annotated[float, Field(gt=0.0, le=300.0)]
"""Bounded wait in seconds: (0, 300]."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

CommandPrefixStr = Annotated[str, Field(min_length=1, max_length=5)]
"""Bot command prefix: 1-5 characters."""
