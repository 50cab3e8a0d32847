"""Tags: labels that can be applied to test runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TagError(ValueError):
    """Raised when a tag would be given an unusable name."""


@dataclass(frozen=True)
class TagSnapshot:
    """A point-in-time view of a tag."""

    id: str
    name: str
    created_at: datetime


class Tag:
    """A label with a normalised (trimmed, lower-case) name.

    ``id`` is empty until storage assigns one.
    """

    def __init__(
        self,
        name: str,
        tag_id: str = "",
        created_at: datetime | None = None,
    ) -> None:
        if not name:
            raise TagError("tag name cannot be empty")
        normalized = name.lower().strip()
        if not normalized:
            raise TagError("tag name cannot be empty after normalization")
        self._id = tag_id
        self._name = normalized
        self._created_at = created_at if created_at is not None else _now()

    def __repr__(self) -> str:
        return f"Tag(name={self._name!r}, tag_id={self._id!r})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def to_snapshot(self) -> TagSnapshot:
        """Return a read-only copy of the tag's state."""
        return TagSnapshot(id=self._id, name=self._name, created_at=self._created_at)


class TagRepository(Protocol):
    """Persistence for tags.

    Lookups raise ``LookupError`` when nothing matches.
    """

    def save(self, tag: Tag) -> None:
        """Store a new tag."""

    def find_by_id(self, tag_id: str) -> Tag:
        """Return the tag with this ID."""

    def find_by_name(self, name: str) -> Tag:
        """Return the tag with this name, compared after normalisation."""

    def find_all(self) -> list[Tag]:
        """Return every tag, ordered by name."""

    def delete(self, tag_id: str) -> None:
        """Remove a tag and its test-run assignments."""

    def assign_to_test_run(self, test_run_id: str, tag_ids: list[str]) -> None:
        """Replace the tags assigned to a test run."""