"""Port interface for resolving audio tracks from queries and URLs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_voice_queue.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import StreamSource


class AudioResolver(ABC):
    """Interface for resolving URLs and search queries to playable tracks."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "Track | None":
        """Resolve a query or URL to a playable track.

        Returns ``None`` when nothing matches. Raises ``ResolutionFailure`` when the
        provider itself could not be queried.
        """
        ...

    @abstractmethod
    async def open_stream(self, track: "Track") -> "StreamSource":
        """Obtain a fresh live stream for *track*.

        Raises ``PlaybackFailure`` when no playable stream can be produced.
        """
        ...

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...
