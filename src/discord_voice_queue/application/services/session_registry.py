"""Guild id to playback session mapping."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator

from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .playback_session import PlaybackSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[DiscordSnowflake], PlaybackSession]


class SessionRegistry:
    """Holds the live session of each guild.

    A session is reachable here until it is stopped; stopping a session removes it
    before its voice connection is torn down, so a later ``get`` for the same guild
    always builds a fresh session.
    """

    def __init__(self, factory: SessionFactory) -> None:
        self._factory = factory
        self._sessions: dict[DiscordSnowflake, PlaybackSession] = {}

    def get(self, guild_id: DiscordSnowflake) -> PlaybackSession:
        """Return the guild's session, creating it on first use."""
        session = self._sessions.get(guild_id)
        if session is None:
            session = self._factory(guild_id)
            session.on_closed = self._discard
            self._sessions[guild_id] = session
            logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    def find(self, guild_id: DiscordSnowflake) -> PlaybackSession | None:
        """Return the guild's session without creating one."""
        return self._sessions.get(guild_id)

    def remove(self, guild_id: DiscordSnowflake) -> PlaybackSession | None:
        session = self._sessions.pop(guild_id, None)
        if session is not None:
            logger.debug(LogTemplates.SESSION_REMOVED, guild_id)
        return session

    async def stop_all(self) -> None:
        sessions = list(self._sessions.values())
        if not sessions:
            return

        logger.info(LogTemplates.SESSION_STOP_ALL, len(sessions))
        results = await asyncio.gather(*(s.stop() for s in sessions), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(LogTemplates.BOT_SESSIONS_STOP_ERROR, result)

    def _discard(self, session: PlaybackSession) -> None:
        if self._sessions.get(session.guild_id) is session:
            self.remove(session.guild_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def __iter__(self) -> Iterator[PlaybackSession]:
        return iter(list(self._sessions.values()))
