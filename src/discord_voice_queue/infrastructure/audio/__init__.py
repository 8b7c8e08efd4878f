"""Audio infrastructure - yt-dlp resolver and FFmpeg player."""

from discord_voice_queue.infrastructure.audio.ffmpeg_player import DiscordAudioPlayer
from discord_voice_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_voice_queue.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AudioFormatInfo",
    "DiscordAudioPlayer",
    "YtDlpOpts",
    "YtDlpResolver",
    "YtDlpTrackInfo",
]
