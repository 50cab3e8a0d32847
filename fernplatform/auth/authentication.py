"""Signing users in through an OAuth provider and validating their sessions."""

from __future__ import annotations

import base64
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from fernplatform.auth.session import Session, SessionRepository
from fernplatform.auth.user import User, UserRepository, UserRole, UserStatus

logger = logging.getLogger(__name__)

_DEFAULT_SESSION_LIFETIME = timedelta(hours=24)
_ADMIN_GROUPS = frozenset({"admin", "/admin"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AuthenticationError(Exception):
    """Raised when a user cannot be authenticated or a session is not usable."""


@dataclass
class UserInfo:
    """User information reported by an OAuth provider."""

    sub: str
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    picture: str = ""
    groups: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    email_verified: bool = False


@dataclass
class TokenInfo:
    """Tokens issued by an OAuth provider."""

    access_token: str
    refresh_token: str = ""
    id_token: str = ""
    expires_in: int = 0


@dataclass
class AuthenticateResult:
    """Outcome of a successful sign-in."""

    user: User
    session: Session
    is_new_user: bool


def generate_session_id() -> str:
    """Return a random, URL-safe, base64-encoded 32-byte session ID."""
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).decode("ascii")


class AuthenticationService:
    """Signs users in, validates sessions and signs users out."""

    def __init__(self, user_repo: UserRepository, session_repo: SessionRepository) -> None:
        self._users = user_repo
        self._sessions = session_repo

    def authenticate_with_oauth(
        self,
        user_info: UserInfo,
        token_info: TokenInfo,
        ip_address: str,
        user_agent: str,
    ) -> AuthenticateResult:
        """Find or create the user, record its groups and open a new session."""
        try:
            user, is_new = self._find_or_create_user(user_info)
        except Exception as exc:
            raise AuthenticationError(f"failed to find or create user: {exc}") from exc

        try:
            self._users.set_user_groups(user.user_id, user_info.groups)
        except Exception as exc:
            raise AuthenticationError(f"failed to update user groups: {exc}") from exc

        try:
            session = self._create_session(user, token_info, ip_address, user_agent)
        except Exception as exc:
            raise AuthenticationError(f"failed to create session: {exc}") from exc

        try:
            self._users.update_last_login(user.user_id, _now())
        except Exception:
            logger.warning("failed to record last login for %s", user.user_id, exc_info=True)

        return AuthenticateResult(user=user, session=session, is_new_user=is_new)

    def validate_session(self, session_id: str) -> Session:
        """Return the session with its user loaded, if it is usable."""
        try:
            session = self._sessions.find_active_by_id(session_id)
        except Exception as exc:
            raise AuthenticationError(f"session not found: {exc}") from exc

        if not session.is_valid():
            raise AuthenticationError("session is invalid or expired")

        try:
            self._sessions.update_activity(session_id)
        except Exception:
            logger.debug("failed to update activity of session", exc_info=True)

        try:
            user = self._users.find_by_id(session.user_id)
        except Exception as exc:
            raise AuthenticationError(f"user not found: {exc}") from exc

        if not user.is_active():
            raise AuthenticationError("user account is not active")

        session.user = user
        return session

    def logout(self, session_id: str) -> None:
        """Invalidate one session."""
        self._sessions.invalidate(session_id)

    def logout_all_sessions(self, user_id: str) -> None:
        """Invalidate every session of a user."""
        self._sessions.invalidate_all_for_user(user_id)

    def _find_or_create_user(self, info: UserInfo) -> tuple[User, bool]:
        try:
            user = self._users.find_by_id_or_email(info.sub, info.email)
        except LookupError:
            pass
        else:
            user.email = info.email
            user.name = info.name
            user.first_name = info.first_name
            user.last_name = info.last_name
            user.profile_url = info.picture
            user.email_verified = info.email_verified
            self._users.update(user)
            return user, False

        now = _now()
        new_user = User(
            user_id=info.sub,
            email=info.email,
            name=info.name,
            first_name=info.first_name,
            last_name=info.last_name,
            role=self._determine_role(info),
            status=UserStatus.ACTIVE,
            profile_url=info.picture,
            email_verified=info.email_verified,
            created_at=now,
            updated_at=now,
        )
        self._users.create(new_user)
        return new_user, True

    def _create_session(
        self, user: User, tokens: TokenInfo, ip_address: str, user_agent: str
    ) -> Session:
        now = _now()
        lifetime = (
            timedelta(seconds=tokens.expires_in) if tokens.expires_in else _DEFAULT_SESSION_LIFETIME
        )
        session = Session(
            session_id=generate_session_id(),
            user_id=user.user_id,
            user=user,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            id_token=tokens.id_token,
            expires_at=now + lifetime,
            is_active=True,
            ip_address=ip_address,
            user_agent=user_agent,
            last_activity=now,
            created_at=now,
        )
        self._sessions.create(session)
        return session

    @staticmethod
    def _determine_role(info: UserInfo) -> UserRole:
        if any(group in _ADMIN_GROUPS for group in info.groups):
            return UserRole.ADMIN
        return UserRole.USER