"""Dependency Injection Container

Manages the application's dependency graph. Adapters are created on demand and
cached for reuse; each playback session gets its own audio player.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.playback_session import PlaybackSession
    from ..application.services.session_registry import SessionRegistry
    from ..domain.shared.types import DiscordSnowflake
    from ..infrastructure.discord.views.playback_controls_view import PlaybackControlsView
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _audio_resolver: AudioResolver | None = None
    _voice_transport: VoiceTransport | None = None

    # Application services
    _session_registry: SessionRegistry | None = None

    # Discord interaction helpers
    _controls_view: PlaybackControlsView | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def audio_resolver(self) -> AudioResolver:
        """Get the audio resolver."""
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport()
        return self._voice_transport

    # === Application Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        """Get the guild session registry."""
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(self.create_session)
        return self._session_registry

    def create_session(self, guild_id: DiscordSnowflake) -> PlaybackSession:
        """Build a new session for *guild_id* with its own audio player."""
        from ..application.services.playback_session import PlaybackSession
        from ..infrastructure.audio.ffmpeg_player import DiscordAudioPlayer

        player = DiscordAudioPlayer(self.settings.audio)
        return PlaybackSession(
            guild_id,
            resolver=self.audio_resolver,
            transport=self.voice_transport,
            player=player,
            connect_timeout=self.settings.playback.connect_timeout_seconds,
            max_consecutive_failures=self.settings.playback.max_consecutive_failures,
        )

    # === Discord Helpers ===

    @property
    def controls_view(self) -> PlaybackControlsView:
        """Get the persistent playback controls view."""
        if self._controls_view is None:
            from ..infrastructure.discord.views.playback_controls_view import (
                PlaybackControlsView,
            )

            self._controls_view = PlaybackControlsView(self.session_registry)
        return self._controls_view

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Stop every live session and release their voice connections."""
        if self._session_registry is not None:
            await self._session_registry.stop_all()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
