"""Reusable voice-channel guard functions for prefix commands and buttons.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog or view.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_voice_queue.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from ....application.services.playback_session import PlaybackSession


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


def get_voice_channel(
    user: discord.abc.User | discord.Member,
) -> discord.VoiceChannel | discord.StageChannel | None:
    """Return the voice channel *user* is in, if they are a guild member in one."""
    if not isinstance(user, discord.Member) or user.voice is None:
        return None
    return user.voice.channel


def shares_bot_channel(
    user: discord.abc.User | discord.Member, session: PlaybackSession | None
) -> bool:
    """True when the bot is not connected or *user* is in the bot's channel."""
    bot_channel_id = session.channel_id if session is not None else None
    if bot_channel_id is None:
        return True

    channel = get_voice_channel(user)
    return channel is not None and channel.id == bot_channel_id


async def ensure_user_in_voice(
    ctx: commands.Context,
) -> discord.VoiceChannel | discord.StageChannel | None:
    """Return the author's voice channel, replying with an error if they are not in one."""
    channel = get_voice_channel(ctx.author)
    if channel is None:
        await ctx.reply(DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
    return channel


async def ensure_same_channel(ctx: commands.Context, session: PlaybackSession | None) -> bool:
    """Reject a text command issued from outside the bot's current voice channel."""
    if shares_bot_channel(ctx.author, session):
        return True
    await ctx.reply(DiscordUIMessages.STATE_MUST_SHARE_VOICE)
    return False


async def check_button_user_in_voice(
    interaction: discord.Interaction, session: PlaybackSession
) -> bool:
    """Return True if the clicking user is in the bot's voice channel.

    Unlike text commands, buttons are refused when the bot is not connected at all.
    Sends an ephemeral rejection and returns False otherwise.
    """
    channel = get_voice_channel(interaction.user)
    bot_channel_id = session.channel_id
    if channel is None or bot_channel_id is None or channel.id != bot_channel_id:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_MUST_SHARE_VOICE_BUTTON)
        return False
    return True
