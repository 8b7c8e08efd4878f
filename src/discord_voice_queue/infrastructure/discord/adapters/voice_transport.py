"""Discord voice transport implementing VoiceTransport over discord.py voice clients."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_voice_queue.application.interfaces.voice_transport import (
    ConnectionHandle,
    VoiceTransport,
)
from discord_voice_queue.domain.shared.exceptions import ConnectionTimeout
from discord_voice_queue.domain.shared.messages import LogTemplates
from discord_voice_queue.infrastructure.audio.ffmpeg_player import DiscordAudioPlayer

if TYPE_CHECKING:
    from discord_voice_queue.application.interfaces.audio_player import AudioPlayer

logger = logging.getLogger(__name__)


class DiscordConnectionHandle(ConnectionHandle):
    """Owns one ``discord.VoiceClient`` for the lifetime of a session connection."""

    def __init__(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client
        self._channel_id = voice_client.channel.id
        self._player: DiscordAudioPlayer | None = None
        self._destroyed = False

    @property
    def channel_id(self) -> int:
        # Follows moves made by moderators while connected.
        channel = self._voice_client.channel
        return channel.id if channel is not None else self._channel_id

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._voice_client

    def subscribe(self, player: AudioPlayer) -> None:
        if not isinstance(player, DiscordAudioPlayer):
            raise TypeError(f"Cannot route {type(player).__name__} through a Discord voice client")
        player.attach(self._voice_client)
        self._player = player

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True

        if self._player is not None:
            self._player.detach()
            self._player = None

        guild_id = self._voice_client.guild.id
        try:
            await self._voice_client.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        except (discord.ClientException, discord.HTTPException):
            logger.exception(LogTemplates.VOICE_DESTROY_FAILED, guild_id)


class DiscordVoiceTransport(VoiceTransport):
    async def join(
        self, channel: discord.VoiceChannel | discord.StageChannel, *, timeout: float
    ) -> DiscordConnectionHandle:
        guild = channel.guild

        stale = guild.voice_client
        if stale is not None:
            logger.warning(LogTemplates.VOICE_STALE_CLIENT, guild.id)
            await stale.disconnect(force=True)

        try:
            async with asyncio.timeout(timeout):
                voice_client = await channel.connect(self_deaf=True, timeout=timeout)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id, timeout)
            await self._cleanup_failed_join(guild)
            raise ConnectionTimeout(channel.id, timeout) from exc

        return DiscordConnectionHandle(voice_client)

    @staticmethod
    async def _cleanup_failed_join(guild: discord.Guild) -> None:
        vc = guild.voice_client
        if vc is not None:
            await vc.disconnect(force=True)
