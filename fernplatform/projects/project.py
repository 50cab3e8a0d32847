"""Projects whose test runs the platform collects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

_DEFAULT_BRANCH = "main"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectError(ValueError):
    """Raised when a project or permission would be left in an invalid state."""


@dataclass(frozen=True)
class ProjectSnapshot:
    """A read-only view of a project."""

    id: int
    project_id: str
    name: str
    description: str
    repository: str
    default_branch: str
    team: str
    is_active: bool
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


class Project:
    """A project owned by a team.

    ``id`` is the storage identifier, zero until the project has been saved.
    """

    def __init__(self, project_id: str, name: str, team: str) -> None:
        if not project_id:
            raise ProjectError("project ID cannot be empty")
        if not name:
            raise ProjectError("project name cannot be empty")
        if not team:
            raise ProjectError("team cannot be empty")
        now = _now()
        self.id = 0
        self._project_id = project_id
        self._name = name
        self._description = ""
        self._repository = ""
        self._default_branch = _DEFAULT_BRANCH
        self._team = team
        self._is_active = True
        self._settings: dict[str, Any] = {}
        self._created_at = now
        self._updated_at = now

    def __repr__(self) -> str:
        return f"Project(project_id={self._project_id!r}, name={self._name!r}, team={self._team!r})"

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def repository(self) -> str:
        return self._repository

    @property
    def default_branch(self) -> str:
        return self._default_branch

    @property
    def team(self) -> str:
        return self._team

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _touch(self) -> None:
        self._updated_at = _now()

    def update_name(self, name: str) -> None:
        """Rename the project."""
        if not name:
            raise ProjectError("project name cannot be empty")
        self._name = name
        self._touch()

    def update_description(self, description: str) -> None:
        """Replace the description."""
        self._description = description
        self._touch()

    def update_repository(self, repository: str) -> None:
        """Replace the repository URL."""
        self._repository = repository
        self._touch()

    def update_default_branch(self, branch: str) -> None:
        """Change the default branch."""
        if not branch:
            raise ProjectError("default branch cannot be empty")
        self._default_branch = branch
        self._touch()

    def update_team(self, team: str) -> None:
        """Hand the project to another team."""
        if not team:
            raise ProjectError("team cannot be empty")
        self._team = team
        self._touch()

    def activate(self) -> None:
        """Mark the project active."""
        self._is_active = True
        self._touch()

    def deactivate(self) -> None:
        """Mark the project inactive."""
        self._is_active = False
        self._touch()

    def set_setting(self, key: str, value: Any) -> None:
        """Store a project setting."""
        self._settings[key] = value
        self._touch()

    def get_setting(self, key: str) -> Any:
        """Return a project setting; raise ``KeyError`` if it is not set."""
        return self._settings[key]

    def to_snapshot(self) -> ProjectSnapshot:
        """Return a read-only copy of the project's state."""
        return ProjectSnapshot(
            id=self.id,
            project_id=self._project_id,
            name=self._name,
            description=self._description,
            repository=self._repository,
            default_branch=self._default_branch,
            team=self._team,
            is_active=self._is_active,
            settings=dict(self._settings),
            created_at=self._created_at,
            updated_at=self._updated_at,
        )


class ProjectRepository(Protocol):
    """Persistence for projects.

    Lookups raise ``LookupError`` when nothing matches.
    """

    def save(self, project: Project) -> None:
        """Store a new project and set its ``id``."""

    def find_by_id(self, id: int) -> Project:
        """Return the project with this storage ID."""

    def find_by_project_id(self, project_id: str) -> Project:
        """Return the project with this project ID."""

    def find_by_team(self, team: str) -> list[Project]:
        """Return every project of the team."""

    def find_all(self, limit: int, offset: int) -> tuple[list[Project], int]:
        """Return one page of projects and the total number of projects."""

    def update(self, project: Project) -> None:
        """Store changes to an existing project."""

    def delete(self, id: int) -> None:
        """Remove the project with this storage ID."""

    def exists_by_project_id(self, project_id: str) -> bool:
        """True if a project with this project ID exists."""