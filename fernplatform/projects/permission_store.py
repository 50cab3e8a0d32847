"""Project permissions stored in an SQLite database."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

from fernplatform.projects.permission import PermissionType, ProjectPermission
from fernplatform.projects.project import ProjectError

_TABLE = "project_permissions"

_CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    permission TEXT NOT NULL,
    granted_by TEXT NOT NULL,
    granted_at TEXT NOT NULL,
    expires_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_CREATE_INDEX = f"""
CREATE UNIQUE INDEX IF NOT EXISTS idx_project_user_permission
ON {_TABLE} (project_id, user_id, permission)
"""

_COLUMNS = "project_id, user_id, permission, granted_by, expires_at"


class PermissionStoreError(Exception):
    """Raised when the permission store cannot be read or written."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_text(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


class SqlProjectPermissionRepository:
    """Keeps project permissions in the ``project_permissions`` table."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._db = connection
        try:
            with self._db:
                self._db.execute(_CREATE_TABLE)
                self._db.execute(_CREATE_INDEX)
        except sqlite3.Error as exc:
            raise PermissionStoreError(f"failed to prepare permission table: {exc}") from exc

    def save(self, permission: ProjectPermission) -> None:
        """Store a permission; a duplicate of an existing one is an error."""
        now = _to_text(_now())
        expires_at = permission.expires_at
        try:
            with self._db:
                self._db.execute(
                    f"INSERT INTO {_TABLE} (project_id, user_id, permission, granted_by, "
                    "granted_at, expires_at, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        permission.project_id,
                        permission.user_id,
                        permission.permission.value,
                        permission.granted_by,
                        _to_text(permission.granted_at),
                        _to_text(expires_at) if expires_at is not None else None,
                        now,
                        now,
                    ),
                )
        except sqlite3.Error as exc:
            raise PermissionStoreError(f"failed to save project permission: {exc}") from exc

    def find_by_project_and_user(self, project_id: str, user_id: str) -> list[ProjectPermission]:
        """Return the user's permissions on the project."""
        return self._find(
            "project_id = ? AND user_id = ?",
            (project_id, user_id),
            "failed to find permissions",
        )

    def find_by_user(self, user_id: str) -> list[ProjectPermission]:
        """Return every permission of the user."""
        return self._find("user_id = ?", (user_id,), "failed to find user permissions")

    def find_by_project(self, project_id: str) -> list[ProjectPermission]:
        """Return every permission on the project."""
        return self._find("project_id = ?", (project_id,), "failed to find project permissions")

    def delete(self, project_id: str, user_id: str, permission: PermissionType | str) -> None:
        """Remove one permission."""
        kind = PermissionType(permission).value
        try:
            with self._db:
                self._db.execute(
                    f"DELETE FROM {_TABLE} WHERE project_id = ? AND user_id = ? AND permission = ?",
                    (project_id, user_id, kind),
                )
        except sqlite3.Error as exc:
            raise PermissionStoreError(f"failed to delete permission: {exc}") from exc

    def delete_expired(self) -> None:
        """Remove every permission whose expiry time has passed."""
        try:
            with self._db:
                self._db.execute(
                    f"DELETE FROM {_TABLE} WHERE expires_at IS NOT NULL AND expires_at < ?",
                    (_to_text(_now()),),
                )
        except sqlite3.Error as exc:
            raise PermissionStoreError(f"failed to delete expired permissions: {exc}") from exc

    def _find(self, where: str, params: tuple[str, ...], message: str) -> list[ProjectPermission]:
        try:
            rows = self._db.execute(
                f"SELECT {_COLUMNS} FROM {_TABLE} WHERE {where} ORDER BY id", params
            ).fetchall()
        except sqlite3.Error as exc:
            raise PermissionStoreError(f"{message}: {exc}") from exc
        return [self._to_permission(row) for row in rows]

    @staticmethod
    def _to_permission(row: tuple) -> ProjectPermission:
        project_id, user_id, kind, granted_by, expires_at = row
        try:
            permission = ProjectPermission(project_id, user_id, kind, granted_by)
        except ProjectError as exc:
            raise PermissionStoreError(f"invalid stored permission: {exc}") from exc
        if expires_at is not None:
            try:
                permission.set_expiration(datetime.fromisoformat(expires_at))
            except ProjectError:
                # A past expiry cannot be set on a permission; it is left without one.
                pass
        return permission