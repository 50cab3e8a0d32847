"""Authenticated user sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from fernplatform.auth.user import User


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """An authenticated session of a user."""

    session_id: str
    user_id: str
    expires_at: datetime
    user: User | None = None
    access_token: str = ""
    refresh_token: str = ""
    id_token: str = ""
    is_active: bool = True
    ip_address: str = ""
    user_agent: str = ""
    last_activity: datetime = field(default_factory=_now)
    created_at: datetime = field(default_factory=_now)

    def is_expired(self) -> bool:
        """True once the expiry time has passed."""
        return _now() > self.expires_at

    def is_valid(self) -> bool:
        """True if the session is active and not expired."""
        return self.is_active and not self.is_expired()

    def update_activity(self) -> None:
        """Record activity now."""
        self.last_activity = _now()

    def invalidate(self) -> None:
        """Mark the session inactive."""
        self.is_active = False


class SessionRepository(Protocol):
    """Persistence for sessions.

    Lookups raise ``LookupError`` when nothing matches.
    """

    def create(self, session: Session) -> None:
        """Store a new session."""

    def find_by_id(self, session_id: str) -> Session:
        """Return the session with this ID."""

    def find_active_by_id(self, session_id: str) -> Session:
        """Return the session with this ID if it is active and unexpired."""

    def update_activity(self, session_id: str) -> None:
        """Record activity on the session now."""

    def invalidate(self, session_id: str) -> None:
        """Mark the session inactive."""

    def invalidate_all_for_user(self, user_id: str) -> None:
        """Mark every session of the user inactive."""

    def cleanup_expired(self) -> None:
        """Remove sessions whose expiry time has passed."""