import asyncio
import itertools
from dataclasses import dataclass

import pytest

from discord_voice_queue.application.interfaces.audio_player import AudioPlayer, PlayerListener
from discord_voice_queue.application.interfaces.audio_resolver import AudioResolver
from discord_voice_queue.application.interfaces.notifier import Notifier
from discord_voice_queue.application.interfaces.voice_transport import (
    ConnectionHandle,
    VoiceTransport,
)
from discord_voice_queue.application.services.playback_session import PlaybackSession
from discord_voice_queue.domain.music.entities import Track
from discord_voice_queue.domain.music.value_objects import (
    PlayerEvent,
    PlayerEventKind,
    StreamSource,
)
from discord_voice_queue.domain.shared.exceptions import (
    ConnectionTimeout,
    PlaybackFailure,
    ResolutionFailure,
)

# ============================================================================
# In-memory collaborators
# ============================================================================


@dataclass(frozen=True)
class FakeChannel:
    id: int


class FakeResolver(AudioResolver):
    """Resolves any query to a track; stream opening can be gated or made to fail."""

    def __init__(self) -> None:
        self.not_found: set[str] = set()
        self.broken: set[str] = set()
        self.failing: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.opened: list[str] = []

    def is_url(self, query: str) -> bool:
        return query.startswith(("http://", "https://"))

    async def resolve(self, query: str) -> Track | None:
        await asyncio.sleep(0)
        if query in self.broken:
            raise ResolutionFailure(query)
        if query in self.not_found:
            return None
        return make_track(query)

    async def open_stream(self, track: Track) -> StreamSource:
        self.opened.append(track.title)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if track.title in self.failing:
            raise PlaybackFailure(track.title)
        return StreamSource(url=f"{track.url}&stream=1", title=track.title)


class FakePlayer(AudioPlayer):
    """Player whose end-of-track events are queued and delivered by ``drain()``.

    Mirrors the Discord player's contract: ``stop(flush=False)`` produces an idle
    event for the stopped playback, ``stop(flush=True)`` and replacing a playback
    produce none.
    """

    def __init__(self) -> None:
        self.listener: PlayerListener | None = None
        self.played: list[str] = []
        self.stop_calls: list[bool] = []
        self.active_id: int | None = None
        self.released = False
        self._ids = itertools.count(1)
        self._events: list[PlayerEvent] = []

    def set_listener(self, listener: PlayerListener | None) -> None:
        self.listener = listener

    def play(self, source: StreamSource) -> int:
        playback_id = next(self._ids)
        self.active_id = playback_id
        self.played.append(source.title)
        return playback_id

    def stop(self, *, flush: bool = False) -> None:
        self.stop_calls.append(flush)
        playback_id, self.active_id = self.active_id, None
        if playback_id is not None and not flush:
            self._events.append(PlayerEvent(PlayerEventKind.IDLE, playback_id))

    def is_playing(self) -> bool:
        return self.active_id is not None

    def release(self) -> None:
        self.released = True
        self.listener = None

    def finish(self, error: Exception | None = None) -> PlayerEvent:
        """End the active playback naturally (or with *error*)."""
        assert self.active_id is not None
        kind = PlayerEventKind.ERROR if error is not None else PlayerEventKind.IDLE
        event = PlayerEvent(kind, self.active_id, error)
        self.active_id = None
        self._events.append(event)
        return event

    async def drain(self) -> None:
        while self._events:
            event = self._events.pop(0)
            if self.listener is not None:
                await self.listener(event)


class FakeHandle(ConnectionHandle):
    def __init__(self, channel_id: int) -> None:
        self._channel_id = channel_id
        self.player: AudioPlayer | None = None
        self.destroyed = False

    @property
    def channel_id(self) -> int:
        return self._channel_id

    def subscribe(self, player: AudioPlayer) -> None:
        self.player = player

    async def destroy(self) -> None:
        self.destroyed = True


class FakeTransport(VoiceTransport):
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []
        self.timeouts: list[float] = []
        self.unreachable: set[int] = set()
        self.gate: asyncio.Event | None = None

    async def join(self, channel, *, timeout: float) -> FakeHandle:
        self.timeouts.append(timeout)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if channel.id in self.unreachable:
            raise ConnectionTimeout(channel.id, timeout)
        handle = FakeHandle(channel.id)
        self.handles.append(handle)
        return handle


class FakeNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: list[tuple[str, bool]] = []
        self.fail = False

    async def send(self, message: str, *, controls: bool = False) -> None:
        if self.fail:
            raise RuntimeError("channel gone")
        self.messages.append((message, controls))

    @property
    def texts(self) -> list[str]:
        return [message for message, _ in self.messages]


def make_track(title: str) -> Track:
    slug = "".join(ch for ch in title if ch.isalnum()) or "x"
    return Track(url=f"https://www.youtube.com/watch?v={slug}", title=title)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def track():
    """Build a Track from a title."""
    return make_track


@pytest.fixture
def channel():
    """Build a voice channel reference from an id."""
    return FakeChannel


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_session(resolver, transport, player, notifier):
    """Factory for sessions wired to the in-memory collaborators."""

    def _make(guild_id: int = 1, **kwargs) -> PlaybackSession:
        return PlaybackSession(
            guild_id,
            resolver=resolver,
            transport=transport,
            player=player,
            notifier=notifier,
            **kwargs,
        )

    return _make


@pytest.fixture
def session(make_session):
    return make_session()
