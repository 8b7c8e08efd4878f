"""Replay / Skip / Stop buttons attached to "now playing" messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from discord_voice_queue.domain.music.value_objects import ReplayResult, SkipResult
from discord_voice_queue.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_voice_queue.infrastructure.discord.guards.voice_guards import (
    check_button_user_in_voice,
    send_ephemeral,
)

if TYPE_CHECKING:
    from ....application.services.playback_session import PlaybackSession
    from ....application.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

REPLAY_CUSTOM_ID = "playback:replay"
SKIP_CUSTOM_ID = "playback:skip"
STOP_CUSTOM_ID = "playback:stop"


class PlaybackControlsView(discord.ui.View):
    """Persistent view: one instance is registered with the bot at startup and
    serves the buttons of every "now playing" message, including ones posted
    before a restart.

    Buttons act on the guild's live session only. A click on a guild without a
    session is answered but never creates one.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        super().__init__(timeout=None)
        self._registry = registry

    def _find_session(self, interaction: discord.Interaction) -> PlaybackSession | None:
        if interaction.guild_id is None:
            return None
        return self._registry.find(interaction.guild_id)

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        session = self._find_session(interaction)
        if session is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NO_ACTIVE_QUEUE)
            return False
        return await check_button_user_in_voice(interaction, session)

    async def on_error(
        self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item[Any]
    ) -> None:
        custom_id = getattr(item, "custom_id", None)
        logger.error(
            LogTemplates.BUTTON_ERROR, custom_id, interaction.guild_id, exc_info=error
        )
        try:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_GENERIC)
        except discord.HTTPException:
            logger.debug(LogTemplates.ERROR_MESSAGE_SEND_FAILED)

    @discord.ui.button(
        label=DiscordUIMessages.BUTTON_REPLAY,
        style=discord.ButtonStyle.primary,
        custom_id=REPLAY_CUSTOM_ID,
    )
    async def replay_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlsView]
    ) -> None:
        session = self._find_session(interaction)
        if session is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NO_ACTIVE_QUEUE)
            return
        if session.current_track is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_TO_REPLAY)
            return

        # Opening a fresh stream can take longer than the interaction deadline.
        await interaction.response.defer(ephemeral=True, thinking=True)
        result = await session.replay()
        message = {
            ReplayResult.REPLAYED: DiscordUIMessages.ACTION_REPLAYED,
            ReplayResult.NOTHING_TO_REPLAY: DiscordUIMessages.STATE_NOTHING_TO_REPLAY,
            ReplayResult.FAILED: DiscordUIMessages.ACTION_REPLAY_FAILED,
        }[result]
        await send_ephemeral(interaction, message)

    @discord.ui.button(
        label=DiscordUIMessages.BUTTON_SKIP,
        style=discord.ButtonStyle.secondary,
        custom_id=SKIP_CUSTOM_ID,
    )
    async def skip_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlsView]
    ) -> None:
        session = self._find_session(interaction)
        result = session.skip() if session is not None else SkipResult.NOTHING_TO_SKIP
        if result is SkipResult.SKIPPED:
            await send_ephemeral(interaction, DiscordUIMessages.ACTION_SKIPPED_BUTTON)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_TO_SKIP)

    @discord.ui.button(
        label=DiscordUIMessages.BUTTON_STOP,
        style=discord.ButtonStyle.danger,
        custom_id=STOP_CUSTOM_ID,
    )
    async def stop_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlsView]
    ) -> None:
        session = self._find_session(interaction)
        if session is not None:
            await session.stop()
        await send_ephemeral(interaction, DiscordUIMessages.ACTION_STOPPED_BUTTON)
