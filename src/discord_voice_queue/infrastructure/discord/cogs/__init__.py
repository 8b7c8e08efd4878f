"""Discord cogs - command handlers."""

from discord_voice_queue.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "MusicCog",
]
