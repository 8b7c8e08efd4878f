"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from discord_voice_queue.domain.music.entities import Track


class SessionState(Enum):
    """Lifecycle state of a guild's playback session."""

    IDLE = "idle"
    CONNECTED_IDLE = "connected_idle"
    PLAYING = "playing"


class PlayerEventKind(Enum):
    STARTED = "started"
    IDLE = "idle"
    ERROR = "error"


@dataclass(frozen=True)
class PlayerEvent:
    """Lifecycle event emitted by an audio player for one playback.

    ``playback_id`` identifies the ``play()`` call the event belongs to, so a
    listener can drop events for playbacks it has already moved past.
    """

    kind: PlayerEventKind
    playback_id: int
    error: BaseException | None = None


@dataclass(frozen=True)
class StreamSource:
    """A live, directly playable media URL for a track."""

    url: str
    title: str
    http_headers: dict[str, str] = field(default_factory=dict)


class SkipResult(Enum):
    SKIPPED = "skipped"
    NOTHING_TO_SKIP = "nothing_to_skip"


class ReplayResult(Enum):
    REPLAYED = "replayed"
    NOTHING_TO_REPLAY = "nothing_to_replay"
    FAILED = "failed"


@dataclass(frozen=True)
class EnqueueResult:
    """Outcome of adding a track: ``position`` is 1-based within the pending queue."""

    track: Track
    position: int
    started: bool


@dataclass(frozen=True)
class QueueSnapshot:
    """Read-only view of a session's queue for listings."""

    current: Track | None
    pending: tuple[Track, ...]

    @property
    def is_empty(self) -> bool:
        return self.current is None and not self.pending

    def __len__(self) -> int:
        return len(self.pending)
