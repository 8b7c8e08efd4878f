"""Discord UI views and components."""

from __future__ import annotations

from discord_voice_queue.infrastructure.discord.views.playback_controls_view import (
    PlaybackControlsView,
)

__all__ = [
    "PlaybackControlsView",
]
