"""Per-guild playback session: the queue, the current track and the state machine."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.value_objects import (
    EnqueueResult,
    PlayerEvent,
    PlayerEventKind,
    QueueSnapshot,
    ReplayResult,
    SessionState,
    SkipResult,
)
from ...domain.shared.exceptions import PlayerRuntimeError, SessionClosedError
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.audio_player import AudioPlayer
    from ..interfaces.audio_resolver import AudioResolver
    from ..interfaces.notifier import Notifier
    from ..interfaces.voice_transport import ConnectionHandle, VoiceChannelRef, VoiceTransport

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT: float = 20.0


class PlaybackSession:
    """Owns one guild's queue, voice connection and audio player.

    All mutating operations are safe to call concurrently from event handlers.
    Starting the next track (``advance``), joining a channel (``connect``) and
    restarting the current track (``replay``) are serialized by a per-session lock;
    an ``advance`` request that arrives while the lock is held is recorded and
    honoured once the holder releases it, if there is still something to play.

    Player events carry the playback id returned by ``play()``. Only events for the
    playback the session started last are acted on, so a skip racing a natural
    end of track advances exactly once.

    ``stop()`` bumps the session generation. Work that suspended before the stop
    compares generations when it resumes and discards its result.
    """

    def __init__(
        self,
        guild_id: DiscordSnowflake,
        *,
        resolver: AudioResolver,
        transport: VoiceTransport,
        player: AudioPlayer,
        notifier: Notifier | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        max_consecutive_failures: int | None = None,
    ) -> None:
        self.guild_id = guild_id
        self.notifier = notifier
        self.on_closed: Callable[[PlaybackSession], None] | None = None

        self._resolver = resolver
        self._transport = transport
        self._player = player
        self._connect_timeout = connect_timeout
        self._max_consecutive_failures = max_consecutive_failures

        self._queue: deque[Track] = deque()
        self._current: Track | None = None
        self._connection: ConnectionHandle | None = None
        self._playback_id: int | None = None

        self._lock = asyncio.Lock()
        self._advance_pending = False
        self._generation = 0
        self._closed = False

        self._player.set_listener(self.handle_player_event)

    # ── Read-only view ──────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        if self._connection is None:
            return SessionState.IDLE
        if self._current is None:
            return SessionState.CONNECTED_IDLE
        return SessionState.PLAYING

    @property
    def current_track(self) -> Track | None:
        return self._current

    @property
    def pending_tracks(self) -> tuple[Track, ...]:
        return tuple(self._queue)

    @property
    def channel_id(self) -> int | None:
        """Voice channel the session is connected to, if any."""
        return self._connection.channel_id if self._connection is not None else None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(current=self._current, pending=tuple(self._queue))

    # ── Commands ────────────────────────────────────────────────────

    async def enqueue(self, track: Track) -> EnqueueResult:
        """Append *track*; start advancing if nothing is playing.

        Valid in every state. Without a voice connection the track waits until
        ``connect`` succeeds.
        """
        self._ensure_open("enqueue")
        self._queue.append(track)
        position = len(self._queue)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, self.guild_id)

        started = False
        if self._current is None:
            started = (await self.advance()) is track
        return EnqueueResult(track=track, position=position, started=started)

    async def connect(self, channel: VoiceChannelRef) -> None:
        """Make sure the session's voice connection is in *channel*.

        Joining a different channel destroys the previous connection first. If
        a track was playing it goes back to the front of the queue and restarts
        in the new channel.

        Raises:
            ConnectionTimeout: the join did not complete in time. The session is
                left without a connection and its queue is kept.
            SessionClosedError: the session was stopped before or during the join.
        """
        self._ensure_open("connect")
        async with self._lock:
            self._ensure_open("connect")
            if self._connection is not None and self._connection.channel_id == channel.id:
                logger.debug(LogTemplates.VOICE_ALREADY_CONNECTED, channel.id, self.guild_id)
            else:
                await self._join(channel)

        if self._needs_track():
            await self.advance()

    async def advance(self) -> Track | None:
        """Start the next queued track, or settle in ``CONNECTED_IDLE`` if none is left.

        Returns the track that started playing, or ``None``.
        """
        if self._closed:
            return None
        if self._lock.locked():
            self._advance_pending = True
            logger.debug(LogTemplates.ADVANCE_COALESCED, self.guild_id)
            return None

        started: Track | None = None
        while True:
            async with self._lock:
                self._advance_pending = False
                started = await self._advance_locked()
            if not (self._advance_pending and self._needs_track()):
                break
        self._advance_pending = False
        return started

    def skip(self) -> SkipResult:
        track = self._current
        if self._closed or track is None:
            return SkipResult.NOTHING_TO_SKIP

        logger.info(LogTemplates.TRACK_SKIPPED, track.title, self.guild_id)
        # The idle event of the stopped playback drives the advance.
        self._player.stop(flush=False)
        return SkipResult.SKIPPED

    async def replay(self) -> ReplayResult:
        """Restart the current track from the beginning with a fresh stream.

        Waits for any advance, join or replay already in progress, then restarts
        whatever track is current at that point.
        """
        if self._closed or self._current is None:
            return ReplayResult.NOTHING_TO_REPLAY

        failed = False
        async with self._lock:
            track = self._current
            if self._closed or track is None:
                return ReplayResult.NOTHING_TO_REPLAY
            generation = self._generation
            try:
                source = await self._resolver.open_stream(track)
                if self._is_stale(generation):
                    logger.debug(LogTemplates.SESSION_STALE_RESULT, "replay", self.guild_id)
                    return ReplayResult.NOTHING_TO_REPLAY
                self._playback_id = self._player.play(source)
                self._current = track
                self._advance_pending = False
                logger.info(LogTemplates.TRACK_REPLAYED, track.title, self.guild_id)
            except Exception:
                logger.exception(LogTemplates.TRACK_REPLAY_FAILED, track.title, self.guild_id)
                failed = True

        if not failed:
            return ReplayResult.REPLAYED

        await self._notify(DiscordUIMessages.NOTIFY_TRACK_FAILED.format(title=track.title))
        if self._current is not None and not self._player.is_playing():
            self._current = None
            self._playback_id = None
        if self._current is None and self._connection is not None:
            await self.advance()
        return ReplayResult.FAILED

    def clear(self) -> int:
        """Drop every pending track; the current track keeps playing."""
        count = len(self._queue)
        self._queue.clear()
        logger.info(LogTemplates.QUEUE_CLEARED, count, self.guild_id)
        return count

    async def stop(self) -> None:
        """Tear the session down. Idempotent; never triggers an advance."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1

        self._queue.clear()
        self._current = None
        self._playback_id = None
        self._advance_pending = False

        if self.on_closed is not None:
            self.on_closed(self)

        self._player.stop(flush=True)
        self._player.release()

        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.destroy()
        logger.info(LogTemplates.SESSION_STOPPED, self.guild_id)

    # ── Player events ───────────────────────────────────────────────

    async def handle_player_event(self, event: PlayerEvent) -> None:
        if self._closed:
            return
        if event.kind is PlayerEventKind.STARTED:
            logger.debug(LogTemplates.PLAYER_STARTED, event.playback_id, self.guild_id)
            return
        if event.playback_id != self._playback_id:
            logger.debug(
                LogTemplates.PLAYER_EVENT_STALE, event.kind.value, event.playback_id, self.guild_id
            )
            return

        self._current = None
        self._playback_id = None

        if event.kind is PlayerEventKind.ERROR:
            error = PlayerRuntimeError(str(event.error))
            logger.error(LogTemplates.PLAYER_ERROR, self.guild_id, error, exc_info=event.error)
            await self._notify(DiscordUIMessages.NOTIFY_PLAYER_ERROR)

        await self.advance()

    # ── Internals ───────────────────────────────────────────────────

    async def _join(self, channel: VoiceChannelRef) -> None:
        generation = self._generation

        previous, self._connection = self._connection, None
        if previous is not None:
            logger.info(
                LogTemplates.VOICE_RECONNECTING, previous.channel_id, channel.id, self.guild_id
            )
            if self._current is not None:
                self._queue.appendleft(self._current)
                self._current = None
                self._playback_id = None
                self._player.stop(flush=True)
            await previous.destroy()

        handle = await self._transport.join(channel, timeout=self._connect_timeout)
        if self._is_stale(generation):
            logger.debug(LogTemplates.SESSION_STALE_RESULT, "connect", self.guild_id)
            await handle.destroy()
            raise SessionClosedError(self.guild_id, "connect")

        handle.subscribe(self._player)
        self._connection = handle
        logger.info(LogTemplates.VOICE_CONNECTED, channel.id, self.guild_id)

    async def _advance_locked(self) -> Track | None:
        generation = self._generation
        failures = 0

        while not self._is_stale(generation):
            if self._connection is None:
                logger.info(LogTemplates.ADVANCE_NO_TRANSPORT, self.guild_id, len(self._queue))
                return None

            if not self._queue:
                self._current = None
                self._playback_id = None
                self._player.stop(flush=True)
                logger.info(LogTemplates.QUEUE_EMPTY, self.guild_id)
                await self._notify(DiscordUIMessages.NOTIFY_QUEUE_EMPTY)
                return None

            track = self._queue.popleft()
            try:
                source = await self._resolver.open_stream(track)
                if self._is_stale(generation):
                    logger.debug(LogTemplates.SESSION_STALE_RESULT, "advance", self.guild_id)
                    return None
                self._playback_id = self._player.play(source)
            except Exception:
                logger.exception(LogTemplates.TRACK_FAILED, track.title, self.guild_id)
                self._current = None
                self._playback_id = None
                await self._notify(DiscordUIMessages.NOTIFY_TRACK_FAILED.format(title=track.title))

                failures += 1
                cap = self._max_consecutive_failures
                if cap is not None and failures >= cap and self._queue:
                    logger.warning(LogTemplates.ADVANCE_FAILURE_CAP, failures, self.guild_id)
                    await self._notify(DiscordUIMessages.NOTIFY_FAILURE_CAP.format(count=failures))
                    return None
                continue

            self._current = track
            logger.info(LogTemplates.TRACK_STARTED, track.title, self.guild_id)
            await self._notify(
                DiscordUIMessages.NOTIFY_NOW_PLAYING.format(title=track.title), controls=True
            )
            return track

        return None

    async def _notify(self, message: str, *, controls: bool = False) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.send(message, controls=controls)
        except Exception:
            logger.exception(LogTemplates.NOTIFY_FAILED, self.guild_id)

    def _needs_track(self) -> bool:
        return (
            not self._closed
            and self._connection is not None
            and self._current is None
            and bool(self._queue)
        )

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise SessionClosedError(self.guild_id, operation)
