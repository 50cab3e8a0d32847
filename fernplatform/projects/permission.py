"""Permissions users hold on projects."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Protocol

from fernplatform.projects.project import ProjectError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PermissionType(str, enum.Enum):
    """Level of access to a project."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ADMIN = "admin"


_READERS = frozenset(PermissionType)
_WRITERS = frozenset({PermissionType.WRITE, PermissionType.DELETE, PermissionType.ADMIN})
_DELETERS = frozenset({PermissionType.DELETE, PermissionType.ADMIN})
_ADMINS = frozenset({PermissionType.ADMIN})


class ProjectPermission:
    """A permission granted to a user on a project, optionally expiring."""

    def __init__(
        self,
        project_id: str,
        user_id: str,
        permission: PermissionType | str,
        granted_by: str,
    ) -> None:
        if not project_id:
            raise ProjectError("project ID cannot be empty")
        if not user_id:
            raise ProjectError("user ID cannot be empty")
        if not granted_by:
            raise ProjectError("granted by cannot be empty")
        try:
            kind = PermissionType(permission)
        except ValueError:
            raise ProjectError("invalid permission type") from None
        self._project_id = project_id
        self._user_id = user_id
        self._permission = kind
        self._granted_by = granted_by
        self._granted_at = _now()
        self._expires_at: datetime | None = None

    def __repr__(self) -> str:
        return (
            f"ProjectPermission(project_id={self._project_id!r}, user_id={self._user_id!r}, "
            f"permission={self._permission.value!r})"
        )

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def permission(self) -> PermissionType:
        return self._permission

    @property
    def granted_by(self) -> str:
        return self._granted_by

    @property
    def granted_at(self) -> datetime:
        return self._granted_at

    @property
    def expires_at(self) -> datetime | None:
        return self._expires_at

    def set_expiration(self, expires_at: datetime) -> None:
        """Make the permission expire at a future time."""
        if expires_at < _now():
            raise ProjectError("expiration time must be in the future")
        self._expires_at = expires_at

    def is_expired(self) -> bool:
        """True once the expiry time, if any, has passed."""
        return self._expires_at is not None and _now() > self._expires_at

    def _allows(self, kinds: frozenset[PermissionType]) -> bool:
        return not self.is_expired() and self._permission in kinds

    def can_read(self) -> bool:
        """True if the permission allows reading."""
        return self._allows(_READERS)

    def can_write(self) -> bool:
        """True if the permission allows writing."""
        return self._allows(_WRITERS)

    def can_delete(self) -> bool:
        """True if the permission allows deleting."""
        return self._allows(_DELETERS)

    def can_admin(self) -> bool:
        """True if the permission allows administration."""
        return self._allows(_ADMINS)


class ProjectPermissionRepository(Protocol):
    """Persistence for project permissions."""

    def save(self, permission: ProjectPermission) -> None:
        """Store a permission."""

    def find_by_project_and_user(self, project_id: str, user_id: str) -> list[ProjectPermission]:
        """Return the user's permissions on the project."""

    def find_by_user(self, user_id: str) -> list[ProjectPermission]:
        """Return every permission of the user."""

    def find_by_project(self, project_id: str) -> list[ProjectPermission]:
        """Return every permission on the project."""

    def delete(self, project_id: str, user_id: str, permission: PermissionType) -> None:
        """Remove one permission."""

    def delete_expired(self) -> None:
        """Remove every permission whose expiry time has passed."""