"""Exception hierarchy for playback-session and collaborator errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ResolutionFailure(DomainError):
    """Raised when the stream provider cannot be queried."""

    def __init__(self, query: str, message: str | None = None) -> None:
        msg = message or f"Could not resolve '{query}'"
        super().__init__(msg, code="RESOLUTION_FAILURE")
        self.query = query


class ConnectionTimeout(DomainError):
    """Raised when a voice connection does not become ready in time."""

    def __init__(self, channel_id: int, timeout: float, message: str | None = None) -> None:
        msg = message or f"Voice connection to channel {channel_id} timed out after {timeout:g}s"
        super().__init__(msg, code="CONNECTION_TIMEOUT")
        self.channel_id = channel_id
        self.timeout = timeout


class PlaybackFailure(DomainError):
    """Raised when a resolved track cannot be started."""

    def __init__(self, track_title: str, message: str | None = None) -> None:
        msg = message or f"Could not start playback of '{track_title}'"
        super().__init__(msg, code="PLAYBACK_FAILURE")
        self.track_title = track_title


class PlayerRuntimeError(DomainError):
    """Raised (or wrapped) when the active player reports an error mid-track."""

    def __init__(self, detail: str, message: str | None = None) -> None:
        msg = message or f"Player error: {detail}"
        super().__init__(msg, code="PLAYER_RUNTIME_ERROR")
        self.detail = detail


class SessionClosedError(DomainError):
    """Raised when a stopped session is asked to mutate its state."""

    def __init__(self, guild_id: int, operation: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' on a stopped session (guild {guild_id})"
        super().__init__(msg, code="SESSION_CLOSED")
        self.guild_id = guild_id
        self.operation = operation
