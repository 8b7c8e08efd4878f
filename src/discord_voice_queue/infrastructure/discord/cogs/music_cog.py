"""Prefix-command music cog: .play, .queue, .next, .clear and .stop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_voice_queue.domain.music.value_objects import QueueSnapshot, SkipResult
from discord_voice_queue.domain.shared.exceptions import (
    ConnectionTimeout,
    ResolutionFailure,
    SessionClosedError,
)
from discord_voice_queue.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_voice_queue.infrastructure.discord.adapters.channel_notifier import (
    TextChannelNotifier,
)
from discord_voice_queue.infrastructure.discord.guards.voice_guards import (
    ensure_same_channel,
    ensure_user_in_voice,
)
from discord_voice_queue.utils.reply import format_queue

if TYPE_CHECKING:
    from ....application.services.session_registry import SessionRegistry
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def registry(self) -> SessionRegistry:
        return self.container.session_registry

    # ─────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="play")
    @commands.guild_only()
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        """Search YouTube (or take a URL) and add the first result to the queue."""
        assert ctx.guild is not None
        guild_id = ctx.guild.id

        channel = await ensure_user_in_voice(ctx)
        if channel is None:
            return
        if not await ensure_same_channel(ctx, self.registry.find(guild_id)):
            return

        query = query.strip()
        if not query:
            await ctx.reply(DiscordUIMessages.PLAY_MISSING_QUERY)
            return

        searching = await ctx.reply(DiscordUIMessages.PLAY_SEARCHING)

        session = self.registry.get(guild_id)
        session.notifier = TextChannelNotifier(ctx.channel, self.container.controls_view)

        try:
            await session.connect(channel)

            track = await self.container.audio_resolver.resolve(query)
            if track is None:
                await searching.edit(content=DiscordUIMessages.PLAY_NOT_FOUND)
                return

            await searching.edit(content=DiscordUIMessages.PLAY_ADDED.format(title=track.title))
            await session.enqueue(track)
        except ConnectionTimeout:
            await searching.edit(content=DiscordUIMessages.PLAY_CONNECT_TIMEOUT)
        except ResolutionFailure:
            await searching.edit(content=DiscordUIMessages.PLAY_NOT_FOUND)
        except SessionClosedError:
            await searching.edit(content=DiscordUIMessages.PLAY_FAILED)
        except Exception:
            logger.exception(LogTemplates.COMMAND_PLAY_FAILED, guild_id)
            await searching.edit(content=DiscordUIMessages.PLAY_FAILED)

    @commands.command(name="queue", aliases=["kuyruk"])
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        """Show the current track and everything waiting behind it."""
        assert ctx.guild is not None
        session = self.registry.find(ctx.guild.id)
        snapshot = session.snapshot() if session is not None else QueueSnapshot(None, ())

        listing = format_queue(snapshot)
        await ctx.reply(listing if listing is not None else DiscordUIMessages.QUEUE_EMPTY)

    @commands.command(name="next", aliases=["skip"])
    @commands.guild_only()
    async def next_track(self, ctx: commands.Context) -> None:
        """Skip to the next queued track."""
        assert ctx.guild is not None
        session = self.registry.find(ctx.guild.id)
        if not await ensure_same_channel(ctx, session):
            return

        result = session.skip() if session is not None else SkipResult.NOTHING_TO_SKIP
        if result is SkipResult.SKIPPED:
            await ctx.reply(DiscordUIMessages.ACTION_SKIPPED)
        else:
            await ctx.reply(DiscordUIMessages.STATE_NOTHING_PLAYING)

    @commands.command(name="clear")
    @commands.guild_only()
    async def clear(self, ctx: commands.Context) -> None:
        """Empty the queue; the current track keeps playing."""
        assert ctx.guild is not None
        session = self.registry.find(ctx.guild.id)
        if session is not None:
            session.clear()
        await ctx.reply(DiscordUIMessages.ACTION_CLEARED)

    @commands.command(name="stop")
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        """Stop playback, clear the queue and leave the voice channel."""
        assert ctx.guild is not None
        session = self.registry.find(ctx.guild.id)
        if not await ensure_same_channel(ctx, session):
            return

        if session is not None:
            await session.stop()
        await ctx.reply(DiscordUIMessages.ACTION_STOPPED)

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Stop the guild's session when the bot is removed from its voice channel."""
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if after.channel is not None or before.channel is None:
            return

        session = self.registry.find(member.guild.id)
        # Our own reconnects and stops have already dropped or replaced the handle.
        if session is None or session.channel_id != before.channel.id:
            return

        logger.info(LogTemplates.VOICE_EXTERNAL_DISCONNECT, before.channel.id, member.guild.id)
        await session.stop()


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
