"""
Music Bounded Context

Tracks, playback lifecycle events and the results returned by session operations.
"""

from discord_voice_queue.domain.music.entities import Track
from discord_voice_queue.domain.music.value_objects import (
    EnqueueResult,
    PlayerEvent,
    PlayerEventKind,
    QueueSnapshot,
    ReplayResult,
    SessionState,
    SkipResult,
    StreamSource,
)

__all__ = [
    # Entities
    "Track",
    # Value Objects
    "SessionState",
    "PlayerEvent",
    "PlayerEventKind",
    "StreamSource",
    "SkipResult",
    "ReplayResult",
    "EnqueueResult",
    "QueueSnapshot",
]
