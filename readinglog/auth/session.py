"""Session state for the signed-in user.

The identity provider issues and refreshes sessions; this object only holds
what the rest of the package reads from it (the user id) and refuses writes
once the session is gone.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """An authenticated session as handed over by the identity provider."""
    user_id: str
    access_token: str = ""
    email: str = ""
    expires_at: Optional[datetime] = None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= expires_at


class SessionContext:
    """Holds the current session, if any."""

    def __init__(self, session: Optional[Session] = None):
        self._session = session

    @property
    def session(self) -> Optional[Session]:
        if self._session is not None and self._session.is_expired:
            logger.info(f"Session for {self._session.user_id} expired")
            self._session = None
        return self._session

    @property
    def user_id(self) -> Optional[str]:
        session = self.session
        return session.user_id if session else None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def sign_in(self, user_id: str, access_token: str = "", email: str = "",
                expires_at: Optional[datetime] = None) -> Session:
        """Record a session issued by the identity provider."""
        if not user_id:
            raise AuthenticationRequiredError("Cannot sign in without a user id")
        self._session = Session(user_id=user_id, access_token=access_token, email=email, expires_at=expires_at)
        logger.info(f"Signed in as {user_id}")
        return self._session

    def sign_out(self):
        if self._session is not None:
            logger.info(f"Signed out {self._session.user_id}")
        self._session = None

    def require_user_id(self, action: str = "do that") -> str:
        """Return the current user id or raise AuthenticationRequiredError."""
        user_id = self.user_id
        if not user_id:
            raise AuthenticationRequiredError(
                f"No signed-in user to {action}",
                user_message=f"Please sign in to {action}",
            )
        return user_id
