"""
FFmpeg Audio Player

Per-session AudioPlayer that streams through discord.py's FFmpegPCMAudio and
turns the voice client's ``after`` callback into tagged lifecycle events.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import shlex
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

import discord

from discord_voice_queue.application.interfaces.audio_player import AudioPlayer, PlayerListener
from discord_voice_queue.config.settings import AudioSettings
from discord_voice_queue.domain.music.value_objects import PlayerEvent, PlayerEventKind
from discord_voice_queue.domain.shared.exceptions import PlayerRuntimeError
from discord_voice_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.value_objects import StreamSource

logger = logging.getLogger(__name__)


class DiscordAudioPlayer(AudioPlayer):
    """AudioPlayer bound to at most one ``discord.VoiceClient`` at a time.

    The voice client calls ``after`` from its audio thread once a source finishes
    or is stopped. That call is marshalled back onto the event loop and delivered
    to the listener only if it belongs to the active playback; replaced and
    flushed playbacks are dropped there.
    """

    def __init__(
        self,
        settings: AudioSettings | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._loop = loop
        self._voice_client: discord.VoiceClient | None = None
        self._listener: PlayerListener | None = None
        self._playback_ids = itertools.count(1)
        self._active_id: int | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ── Connection binding ──────────────────────────────────────────

    def attach(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client

    def detach(self) -> None:
        self.stop(flush=True)
        self._voice_client = None

    # ── AudioPlayer ─────────────────────────────────────────────────

    def set_listener(self, listener: PlayerListener | None) -> None:
        self._listener = listener

    def create_source(self, source: StreamSource) -> discord.PCMVolumeTransformer:
        before_options = self._settings.ffmpeg_before_options
        if source.http_headers:
            headers = "".join(f"{k}: {v}\r\n" for k, v in source.http_headers.items())
            before_options = f"{before_options} -headers {shlex.quote(headers)}"

        audio = discord.FFmpegPCMAudio(
            source.url,
            before_options=before_options,
            options=self._settings.ffmpeg_options,
        )
        return discord.PCMVolumeTransformer(audio, volume=self._settings.volume)

    def play(self, source: StreamSource) -> int:
        vc = self._voice_client
        if vc is None or not vc.is_connected():
            raise PlayerRuntimeError(ErrorMessages.PLAYER_NOT_CONNECTED)

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        playback_id = next(self._playback_ids)
        audio = self.create_source(source)

        # Claim the id before stopping the old source so its ``after`` is dropped.
        self._active_id = playback_id
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        try:
            vc.play(audio, after=lambda error: self._after(playback_id, error))
        except discord.ClientException as exc:
            self._active_id = None
            audio.cleanup()
            raise PlayerRuntimeError(str(exc)) from exc

        logger.info(LogTemplates.PLAYER_STARTED, playback_id, source.title)
        self._spawn(self._emit(PlayerEvent(PlayerEventKind.STARTED, playback_id)))
        return playback_id

    def stop(self, *, flush: bool = False) -> None:
        if flush:
            self._active_id = None

        vc = self._voice_client
        if vc is not None and (vc.is_playing() or vc.is_paused()):
            logger.debug(LogTemplates.PLAYER_STOPPED, self._active_id, flush)
            vc.stop()

    def is_playing(self) -> bool:
        vc = self._voice_client
        return (
            self._active_id is not None
            and vc is not None
            and (vc.is_playing() or vc.is_paused())
        )

    def release(self) -> None:
        self.detach()
        self._listener = None

    @property
    def active_playback_id(self) -> int | None:
        return self._active_id

    # ── Event bridging ──────────────────────────────────────────────

    def _after(self, playback_id: int, error: Exception | None) -> None:
        """Runs in the voice client's audio thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self._dispatch_end(playback_id, error), loop)

    async def _dispatch_end(self, playback_id: int, error: Exception | None) -> None:
        logger.debug(LogTemplates.PLAYER_ENDED, playback_id, error)
        if playback_id != self._active_id:
            logger.debug(LogTemplates.PLAYER_REPLACED, playback_id)
            return

        self._active_id = None
        vc = self._voice_client
        if vc is None or not vc.is_connected():
            # Source ended because the connection went away; the owner tears down.
            logger.debug(LogTemplates.PLAYER_CONNECTION_LOST, playback_id)
            return

        kind = PlayerEventKind.ERROR if error is not None else PlayerEventKind.IDLE
        await self._emit(PlayerEvent(kind, playback_id, error))

    async def _emit(self, event: PlayerEvent) -> None:
        if self._listener is None:
            logger.debug(LogTemplates.PLAYER_NO_LISTENER, event.playback_id)
            return
        try:
            await self._listener(event)
        except Exception:
            logger.exception(LogTemplates.PLAYER_LISTENER_ERROR, event.playback_id)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
