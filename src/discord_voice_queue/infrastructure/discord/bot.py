"""Prefix-command bot that owns the container and tears sessions down on exit."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_voice_queue.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

MUSIC_EXTENSION = "discord_voice_queue.infrastructure.discord.cogs.music_cog"

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

# Unknown commands and DM attempts are not worth a reply.
_SILENT_ERRORS: tuple[type[commands.CommandError], ...] = (
    commands.CommandNotFound,
    commands.NoPrivateMessage,
)


def voice_intents() -> discord.Intents:
    """Guilds and voice states for channel tracking, message content for prefix commands."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.voice_states = True
    intents.message_content = True
    return intents


class MusicBot(commands.Bot):
    def __init__(self, container: Container, settings: Settings, **kwargs) -> None:
        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=voice_intents(),
            help_command=None,
            **kwargs,
        )
        self.container = container
        self.settings = settings
        self.shutdown_timeout: float = 30.0
        self._shutdown_task: asyncio.Task[None] | None = None
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)
        # Buttons on "now playing" messages keep working across restarts.
        self.add_view(self.container.controls_view)
        await self.load_extension(MUSIC_EXTENSION)
        logger.info(LogTemplates.BOT_COG_LOADED, MUSIC_EXTENSION)
        self._install_signal_handlers()
        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def on_ready(self) -> None:
        assert self.user is not None
        logger.info(LogTemplates.BOT_READY, self.user, self.user.id)
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))
        await self.change_presence(
            activity=discord.Activity(
                type=discord.ActivityType.listening,
                name=f"{self.settings.discord.command_prefix}play",
            )
        )

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        """Log anything a command did not handle itself and tell the user it failed."""
        if isinstance(error, _SILENT_ERRORS):
            return

        cause = error.original if isinstance(error, commands.CommandInvokeError) else error
        command = ctx.command.name if ctx.command is not None else "<unknown>"
        logger.error(LogTemplates.COMMAND_ERROR, command, cause, exc_info=cause)

        try:
            await ctx.reply(DiscordUIMessages.ERROR_GENERIC)
        except discord.HTTPException:
            logger.warning(LogTemplates.ERROR_MESSAGE_SEND_FAILED)

    async def close(self) -> None:
        """Stop every playback session, then disconnect from the gateway."""
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)
        try:
            await self.container.shutdown()
        except Exception as e:
            logger.warning(LogTemplates.BOT_SESSIONS_STOP_ERROR, e)
        await super().close()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    # ── Signals ─────────────────────────────────────────────────────

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig)
            except (NotImplementedError, RuntimeError):
                # Windows loops and non-main threads cannot install handlers.
                logger.debug(LogTemplates.BOT_SIGNAL_UNSUPPORTED, sig.name)

    def request_shutdown(self, sig: signal.Signals | None = None) -> None:
        """Begin a bounded ``close()``. Repeated signals while it runs are ignored."""
        if self._shutdown_task is not None:
            return
        logger.info(LogTemplates.BOT_SIGNAL_RECEIVED, sig.name if sig else "shutdown request")
        self._shutdown_task = asyncio.create_task(self._close_within_timeout())

    async def _close_within_timeout(self) -> None:
        try:
            await asyncio.wait_for(self.close(), timeout=self.shutdown_timeout)
        except TimeoutError:
            logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, self.shutdown_timeout)

    async def _serve(self, token: str) -> None:
        async with self:
            await self.start(token)

    def run_with_graceful_shutdown(self, token: str) -> None:
        """Blocking run; SIGINT and SIGTERM stop all sessions before disconnecting."""
        asyncio.run(self._serve(token))


def create_bot(container: Container, settings: Settings) -> MusicBot:
    return MusicBot(container=container, settings=settings)
