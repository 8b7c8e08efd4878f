"""
Domain Layer

Contains pure logic organized by bounded contexts:
- shared/: Exceptions, constrained types and message templates
- music/: Tracks, session states and player lifecycle events
"""

from discord_voice_queue.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
