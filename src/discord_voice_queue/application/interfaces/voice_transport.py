"""Port interfaces for joining voice channels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from discord_voice_queue.application.interfaces.audio_player import AudioPlayer


class VoiceChannelRef(Protocol):
    """Anything with a channel id; ``discord.VoiceChannel`` satisfies it."""

    @property
    def id(self) -> int: ...


class ConnectionHandle(ABC):
    """A live voice connection owned by exactly one session."""

    @property
    @abstractmethod
    def channel_id(self) -> int:
        ...

    @abstractmethod
    def subscribe(self, player: "AudioPlayer") -> None:
        """Route *player*'s audio through this connection."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Leave the channel and release the connection. Safe to call twice."""
        ...


class VoiceTransport(ABC):
    """Interface for establishing voice connections."""

    @abstractmethod
    async def join(self, channel: VoiceChannelRef, *, timeout: float) -> ConnectionHandle:
        """Join *channel* and wait until the connection is ready.

        Raises ``ConnectionTimeout`` if it is not ready within *timeout* seconds.
        """
        ...
