"""
Shared Kernel

Exceptions, constrained types and message templates used across layers.
"""

from discord_voice_queue.domain.shared.exceptions import (
    ConnectionTimeout,
    DomainError,
    PlaybackFailure,
    PlayerRuntimeError,
    ResolutionFailure,
    SessionClosedError,
)

__all__ = [
    "DomainError",
    "ResolutionFailure",
    "ConnectionTimeout",
    "PlaybackFailure",
    "PlayerRuntimeError",
    "SessionClosedError",
]
