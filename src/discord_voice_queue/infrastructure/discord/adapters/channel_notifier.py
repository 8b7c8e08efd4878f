"""Notifier implementation that posts to a Discord text channel."""

from __future__ import annotations

from discord.abc import Messageable
from discord.ui import View

from discord_voice_queue.application.interfaces.notifier import Notifier


class TextChannelNotifier(Notifier):
    """Posts session notifications to the channel the last ``.play`` came from.

    *controls_view* is the persistent playback controls view; it is attached to
    messages sent with ``controls=True``.
    """

    def __init__(self, channel: Messageable, controls_view: View | None = None) -> None:
        self._channel = channel
        self._controls_view = controls_view

    @property
    def channel(self) -> Messageable:
        return self._channel

    async def send(self, message: str, *, controls: bool = False) -> None:
        if controls and self._controls_view is not None:
            await self._channel.send(message, view=self._controls_view)
        else:
            await self._channel.send(message)
