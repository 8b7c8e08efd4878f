"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_voice_queue.application.interfaces.audio_player import AudioPlayer, PlayerListener
from discord_voice_queue.application.interfaces.audio_resolver import AudioResolver
from discord_voice_queue.application.interfaces.notifier import Notifier
from discord_voice_queue.application.interfaces.voice_transport import (
    ConnectionHandle,
    VoiceChannelRef,
    VoiceTransport,
)

__all__ = [
    "AudioPlayer",
    "AudioResolver",
    "ConnectionHandle",
    "Notifier",
    "PlayerListener",
    "VoiceChannelRef",
    "VoiceTransport",
]
