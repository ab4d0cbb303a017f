"""Authentication state for readinglog (the identity provider itself is external)."""

from .session import Session, SessionContext

__all__ = [
    'Session',
    'SessionContext',
]
