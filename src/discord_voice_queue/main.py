"""Process entry point: configure logging, validate settings and run the bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_voice_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_voice_queue.config.settings import Settings

LOGGING_CONFIG_NAME = "logging_config.json"

# Ships inside the package so installed copies find it without a checkout.
_PACKAGED_LOGGING_CONFIG = Path(__file__).with_name(LOGGING_CONFIG_NAME)

_FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def find_logging_config(cwd: Path | None = None) -> Path:
    """A ``logging_config.json`` in the working directory overrides the packaged one."""
    local = (cwd or Path.cwd()) / LOGGING_CONFIG_NAME
    if local.is_file():
        return local
    return _PACKAGED_LOGGING_CONFIG


def setup_logging(log_level: str = "INFO", config_path: Path | None = None) -> bool:
    """Apply the JSON logging config, or plain ``basicConfig`` if it cannot be loaded.

    ``log_level`` always wins over the root level in the file. Returns whether
    the file was applied.
    """
    path = config_path or find_logging_config()
    level = getattr(logging, log_level.upper(), logging.INFO)

    applied = True
    try:
        logging.config.dictConfig(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValueError):
        applied = False
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger(__name__).warning(LogTemplates.LOGGING_CONFIG_FALLBACK, path)

    logging.getLogger().setLevel(level)
    return applied


def log_startup(logger: logging.Logger, settings: Settings) -> None:
    playback = settings.playback
    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    logger.info(
        LogTemplates.STARTUP_PLAYBACK_SETTINGS,
        settings.discord.command_prefix,
        settings.audio.volume,
        playback.connect_timeout_seconds,
        playback.max_consecutive_failures or "off",
    )


def main() -> int:
    from discord_voice_queue.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    if not settings.has_token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    log_startup(logger, settings)

    from discord_voice_queue.config.container import create_container
    from discord_voice_queue.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)
    token = settings.discord_token.get_secret_value().strip()

    try:
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1

    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """``discord-voice-queue`` console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
