"""Core domain entities for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from discord_voice_queue.domain.shared.types import HttpUrlStr, TrackTitleStr


class Track(BaseModel):
    """Immutable value object representing a playable track.

    ``url`` is the canonical page URL the resolver returned; a live media URL is
    obtained from it at play time so that expired stream links never reach the
    player.
    """

    model_config = ConfigDict(frozen=True)

    url: HttpUrlStr
    title: TrackTitleStr

    def __str__(self) -> str:
        return self.title
