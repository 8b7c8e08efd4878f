"""Voice channel guard functions for Discord cogs and views."""

from discord_voice_queue.infrastructure.discord.guards.voice_guards import (
    check_button_user_in_voice,
    ensure_same_channel,
    ensure_user_in_voice,
    get_voice_channel,
    send_ephemeral,
    shares_bot_channel,
)

__all__ = [
    "check_button_user_in_voice",
    "ensure_same_channel",
    "ensure_user_in_voice",
    "get_voice_channel",
    "send_ephemeral",
    "shares_bot_channel",
]
