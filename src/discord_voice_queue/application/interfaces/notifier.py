"""Port interface for posting session notifications to a text destination."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Notifier(ABC):
    @abstractmethod
    async def send(self, message: str, *, controls: bool = False) -> None:
        """Post *message*; with *controls* the message carries the playback buttons."""
        ...
