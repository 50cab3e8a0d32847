"""Users of the platform, their group memberships and permission scopes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

_MANAGER_SUFFIX = "-managers"
_USER_SUFFIX = "-users"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Role a user holds on the platform."""

    ADMIN = "admin"
    USER = "user"


class UserStatus(str, enum.Enum):
    """State of a user account."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


@dataclass
class UserGroup:
    """Membership of a user in a named group."""

    user_id: str
    group_name: str
    created_at: datetime = field(default_factory=_now)


@dataclass
class UserScope:
    """A permission scope granted to a user, optionally expiring."""

    user_id: str
    scope: str
    expires_at: datetime | None = None
    granted_by: str = ""
    granted_at: datetime = field(default_factory=_now)


def _team_from_group(group_name: str) -> str:
    name = group_name.removeprefix("/")
    for suffix in (_MANAGER_SUFFIX, _USER_SUFFIX):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return ""


def _is_manager_group(group_name: str) -> bool:
    return group_name.removeprefix("/").endswith(_MANAGER_SUFFIX)


@dataclass
class User:
    """A user known to the auth domain."""

    user_id: str
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    profile_url: str = ""
    email_verified: bool = False
    last_login_at: datetime | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    groups: list[UserGroup] = field(default_factory=list)
    scopes: list[UserScope] = field(default_factory=list)

    def is_admin(self) -> bool:
        """True if the user has the admin role."""
        return self.role == UserRole.ADMIN

    def is_active(self) -> bool:
        """True if the account is active."""
        return self.status == UserStatus.ACTIVE

    def has_group(self, group_name: str) -> bool:
        """True if the user belongs to a group with exactly this name."""
        return any(group.group_name == group_name for group in self.groups)

    def teams(self) -> list[str]:
        """Team names derived from ``<team>-managers`` and ``<team>-users`` groups."""
        return [
            team
            for team in (_team_from_group(group.group_name) for group in self.groups)
            if team
        ]

    def is_team_manager(self) -> bool:
        """True if the user is an admin or manages any team."""
        if self.is_admin():
            return True
        return any(_is_manager_group(group.group_name) for group in self.groups)

    def is_manager_for_team(self, team: str) -> bool:
        """True if the user is an admin or belongs to ``<team>-managers``."""
        if self.is_admin():
            return True
        return self.has_group(team + _MANAGER_SUFFIX)


class UserRepository(Protocol):
    """Persistence for users, their groups and scopes.

    Lookups raise ``LookupError`` when nothing matches.
    """

    def create(self, user: User) -> None:
        """Store a new user."""

    def update(self, user: User) -> None:
        """Store changes to an existing user."""

    def find_by_id(self, user_id: str) -> User:
        """Return the user with this ID."""

    def find_by_email(self, email: str) -> User:
        """Return the user with this e-mail address."""

    def find_by_id_or_email(self, user_id: str, email: str) -> User:
        """Return the user matching either the ID or the e-mail address."""

    def update_last_login(self, user_id: str, login_time: datetime) -> None:
        """Record the time of the user's latest login."""

    def set_user_groups(self, user_id: str, groups: list[str]) -> None:
        """Replace the user's group memberships."""

    def get_user_groups(self, user_id: str) -> list[UserGroup]:
        """Return the user's group memberships."""

    def grant_scope(self, scope: UserScope) -> None:
        """Grant a scope to a user."""

    def revoke_scope(self, user_id: str, scope: str) -> None:
        """Remove a scope from a user."""

    def get_user_scopes(self, user_id: str) -> list[UserScope]:
        """Return the scopes granted to the user."""