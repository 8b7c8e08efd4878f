"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import Final

from discord_voice_queue.domain.music.value_objects import QueueSnapshot
from discord_voice_queue.domain.shared.messages import DiscordUIMessages

DISCORD_MESSAGE_LIMIT: Final[int] = 2000
MORE_TRACKS_SUFFIX: Final[str] = "…and {count} more"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_queue(snapshot: QueueSnapshot, limit: int = DISCORD_MESSAGE_LIMIT) -> str | None:
    """Render the ``.queue`` listing, or ``None`` when there is nothing to list.

    The current track comes first as ``Now: <title>``, followed by the pending
    tracks numbered from 1. Lines that would push the message past *limit* are
    folded into a trailing "…and N more".
    """
    if snapshot.is_empty:
        return None

    lines = [DiscordUIMessages.QUEUE_HEADER]
    if snapshot.current is not None:
        lines.append(DiscordUIMessages.QUEUE_NOW.format(title=truncate(snapshot.current.title)))

    length = sum(len(line) + 1 for line in lines)
    for index, track in enumerate(snapshot.pending, start=1):
        line = DiscordUIMessages.QUEUE_ENTRY.format(index=index, title=truncate(track.title))
        remaining = len(snapshot.pending) - index + 1
        suffix = MORE_TRACKS_SUFFIX.format(count=remaining)
        if length + len(line) + 1 + len(suffix) + 1 > limit:
            lines.append(suffix)
            break
        lines.append(line)
        length += len(line) + 1

    return "\n".join(lines)
