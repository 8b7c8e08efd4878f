"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, adapters, views)
- Audio (yt-dlp, FFmpeg)
"""

from discord_voice_queue.infrastructure.discord.bot import create_bot
from discord_voice_queue.infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
