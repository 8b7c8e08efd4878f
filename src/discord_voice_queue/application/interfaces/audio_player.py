"""Port interface for the per-session audio player."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import PlayerEvent, StreamSource

PlayerListener = Callable[["PlayerEvent"], Awaitable[None]]


class AudioPlayer(ABC):
    """Plays one stream source at a time and reports lifecycle events.

    Every ``play()`` returns a new playback id. Each playback ends with exactly one
    ``IDLE`` or ``ERROR`` event carrying that id, except when it is replaced by
    another ``play()`` or stopped with ``flush=True``, in which case no end event
    is delivered.
    """

    @abstractmethod
    def play(self, source: "StreamSource") -> int:
        """Start playing *source*, replacing any active playback."""
        ...

    @abstractmethod
    def stop(self, *, flush: bool = False) -> None:
        """Stop the active playback.

        With ``flush=False`` the playback ends normally and an ``IDLE`` event follows.
        """
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def release(self) -> None:
        """Drop the listener and any connection the player is attached to."""
        ...

    @abstractmethod
    def set_listener(self, listener: PlayerListener | None) -> None:
        ...
