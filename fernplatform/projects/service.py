"""Use cases for managing projects and the permissions users hold on them."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from fernplatform.projects.permission import (
    PermissionType,
    ProjectPermission,
    ProjectPermissionRepository,
)
from fernplatform.projects.project import Project, ProjectRepository

logger = logging.getLogger(__name__)


class ProjectServiceError(Exception):
    """Raised when a project operation cannot be carried out."""


@contextmanager
def _wrapped(message: str) -> Iterator[None]:
    try:
        yield
    except ProjectServiceError:
        raise
    except Exception as exc:
        raise ProjectServiceError(f"{message}: {exc}") from exc


@dataclass
class UpdateProjectRequest:
    """Fields of a project to change; ``None`` leaves a field as it is."""

    name: str | None = None
    description: str | None = None
    repository: str | None = None
    default_branch: str | None = None
    team: str | None = None


class ProjectService:
    """Creates, changes and removes projects and their permissions."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        permission_repo: ProjectPermissionRepository,
    ) -> None:
        self._projects = project_repo
        self._permissions = permission_repo

    def create_project(
        self, project_id: str, name: str, team: str, creator_user_id: str
    ) -> Project:
        """Create and store a project, granting its creator admin permission."""
        with _wrapped("failed to check project existence"):
            exists = self._projects.exists_by_project_id(project_id)
        if exists:
            raise ProjectServiceError(f"project with ID {project_id} already exists")

        with _wrapped("failed to create project"):
            project = Project(project_id, name, team)

        with _wrapped("failed to save project"):
            self._projects.save(project)

        with _wrapped("failed to create permission"):
            permission = ProjectPermission(
                project_id, creator_user_id, PermissionType.ADMIN, creator_user_id
            )

        try:
            self._permissions.save(permission)
        except Exception:
            logger.warning(
                "failed to grant admin permission to creator of %s", project_id, exc_info=True
            )

        return project

    def get_project(self, project_id: str) -> Project:
        """Return the project with this project ID."""
        with _wrapped("failed to get project"):
            return self._projects.find_by_project_id(project_id)

    def update_project(self, project_id: str, updates: UpdateProjectRequest) -> None:
        """Apply the given changes to a project and store it."""
        project = self.get_project(project_id)

        if updates.name is not None:
            with _wrapped("failed to update name"):
                project.update_name(updates.name)
        if updates.description is not None:
            project.update_description(updates.description)
        if updates.repository is not None:
            project.update_repository(updates.repository)
        if updates.default_branch is not None:
            with _wrapped("failed to update default branch"):
                project.update_default_branch(updates.default_branch)
        if updates.team is not None:
            with _wrapped("failed to update team"):
                project.update_team(updates.team)

        with _wrapped("failed to save project updates"):
            self._projects.update(project)

    def deactivate_project(self, project_id: str) -> None:
        """Mark a project inactive."""
        project = self.get_project(project_id)
        project.deactivate()
        with _wrapped("failed to deactivate project"):
            self._projects.update(project)

    def activate_project(self, project_id: str) -> None:
        """Mark a project active."""
        project = self.get_project(project_id)
        project.activate()
        with _wrapped("failed to activate project"):
            self._projects.update(project)

    def delete_project(self, project_id: str) -> None:
        """Remove a project."""
        project = self.get_project(project_id)
        with _wrapped("failed to delete project"):
            self._projects.delete(project.id)

    def list_projects(self, limit: int, offset: int) -> tuple[list[Project], int]:
        """Return one page of projects and the total number of projects."""
        return self._projects.find_all(limit, offset)

    def list_team_projects(self, team: str) -> list[Project]:
        """Return every project of a team."""
        return self._projects.find_by_team(team)

    def grant_permission(
        self,
        project_id: str,
        user_id: str,
        permission_type: PermissionType | str,
        granted_by: str,
    ) -> None:
        """Grant a user a permission on an existing project."""
        with _wrapped("project not found"):
            self._projects.find_by_project_id(project_id)
        with _wrapped("failed to create permission"):
            permission = ProjectPermission(project_id, user_id, permission_type, granted_by)
        with _wrapped("failed to grant permission"):
            self._permissions.save(permission)

    def revoke_permission(
        self, project_id: str, user_id: str, permission_type: PermissionType
    ) -> None:
        """Remove a user's permission on a project."""
        with _wrapped("failed to revoke permission"):
            self._permissions.delete(project_id, user_id, permission_type)

    def get_user_permissions(self, project_id: str, user_id: str) -> list[ProjectPermission]:
        """Return every permission the user holds on the project."""
        return self._permissions.find_by_project_and_user(project_id, user_id)

    def get_or_create_project(
        self, project_id: str, name: str, team: str, creator_user_id: str
    ) -> Project:
        """Return the project with this ID, creating it if there is none."""
        try:
            return self._projects.find_by_project_id(project_id)
        except LookupError:
            return self.create_project(project_id, name, team, creator_user_id)