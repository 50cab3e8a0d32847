"""Command handlers for creating and updating projects."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from fernplatform.projects.permission import (
    PermissionType,
    ProjectPermission,
    ProjectPermissionRepository,
)
from fernplatform.projects.project import Project, ProjectRepository, ProjectSnapshot

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a project command cannot be carried out."""


@contextmanager
def _wrapped(message: str) -> Iterator[None]:
    try:
        yield
    except CommandError:
        raise
    except Exception as exc:
        raise CommandError(f"{message}: {exc}") from exc


@dataclass
class CreateProjectCommand:
    """Request to create a project; an empty ``project_id`` gets a generated one."""

    name: str = ""
    team: str = ""
    project_id: str = ""
    description: str = ""
    repository: str = ""
    default_branch: str = ""
    settings: dict[str, Any] = field(default_factory=dict)
    created_by: str = ""


class CreateProjectHandler:
    """Creates a project and grants its creator admin permission."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        permission_repo: ProjectPermissionRepository,
    ) -> None:
        self._projects = project_repo
        self._permissions = permission_repo

    def handle(self, command: CreateProjectCommand) -> ProjectSnapshot:
        """Carry out the command and return the new project's snapshot."""
        if not command.name:
            raise CommandError("invalid command: project name is required")
        if not command.team:
            raise CommandError("invalid command: team is required")

        project_id = command.project_id or str(uuid.uuid4())

        with _wrapped("failed to check project existence"):
            exists = self._projects.exists_by_project_id(project_id)
        if exists:
            raise CommandError("project already exists")

        with _wrapped("failed to create project"):
            project = Project(project_id, command.name, command.team)

        if command.description:
            project.update_description(command.description)
        if command.repository:
            project.update_repository(command.repository)
        if command.default_branch:
            project.update_default_branch(command.default_branch)
        for key, value in command.settings.items():
            project.set_setting(key, value)

        with _wrapped("failed to save project"):
            self._projects.save(project)

        if command.created_by:
            self._grant_creator(project, command.created_by)

        return project.to_snapshot()

    def _grant_creator(self, project: Project, creator: str) -> None:
        try:
            permission = ProjectPermission(
                project.project_id, creator, PermissionType.ADMIN, creator
            )
            self._permissions.save(permission)
        except Exception:
            logger.warning(
                "failed to grant creator permission on %s", project.project_id, exc_info=True
            )


@dataclass
class UpdateProjectCommand:
    """Request to change a project; ``None`` leaves a field as it is."""

    id: int = 0
    updated_by: str = ""
    name: str | None = None
    description: str | None = None
    repository: str | None = None
    default_branch: str | None = None
    team: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)


class UpdateProjectHandler:
    """Changes a project on behalf of a user with write permission."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        permission_repo: ProjectPermissionRepository,
    ) -> None:
        self._projects = project_repo
        self._permissions = permission_repo

    def handle(self, command: UpdateProjectCommand) -> ProjectSnapshot:
        """Carry out the command and return the changed project's snapshot."""
        if command.id == 0:
            raise CommandError("project ID is required")
        if not command.updated_by:
            raise CommandError("updated by is required")

        with _wrapped("failed to find project"):
            project = self._projects.find_by_id(command.id)
        if project is None:
            raise CommandError("project not found")

        with _wrapped("failed to check permissions"):
            allowed = self._can_write(project.project_id, command.updated_by)
        if not allowed:
            raise CommandError("insufficient permissions to update project")

        if command.name is not None:
            with _wrapped("failed to update name"):
                project.update_name(command.name)
        if command.description is not None:
            project.update_description(command.description)
        if command.repository is not None:
            project.update_repository(command.repository)
        if command.default_branch is not None:
            with _wrapped("failed to update default branch"):
                project.update_default_branch(command.default_branch)
        if command.team is not None:
            with _wrapped("failed to update team"):
                project.update_team(command.team)
        for key, value in command.settings.items():
            project.set_setting(key, value)

        with _wrapped("failed to update project"):
            self._projects.update(project)

        return project.to_snapshot()

    def _can_write(self, project_id: str, user_id: str) -> bool:
        permissions = self._permissions.find_by_project_and_user(project_id, user_id)
        return any(permission.can_write() for permission in permissions)