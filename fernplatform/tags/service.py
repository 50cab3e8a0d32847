"""Use cases for managing tags and assigning them to test runs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from fernplatform.tags.tag import Tag, TagRepository


class TagServiceError(Exception):
    """Raised when a tag operation cannot be carried out."""


@contextmanager
def _wrapped(message: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        raise TagServiceError(f"{message}: {exc}") from exc


class TagService:
    """Creates, lists, removes and assigns tags."""

    def __init__(self, tag_repo: TagRepository) -> None:
        self._tags = tag_repo

    def create_tag(self, name: str) -> Tag:
        """Return the tag with this name, creating it if there is none."""
        try:
            existing = self._tags.find_by_name(name)
        except Exception:
            existing = None
        if existing is not None:
            return existing

        with _wrapped("failed to create tag"):
            tag = Tag(name)
        with _wrapped("failed to save tag"):
            self._tags.save(tag)
        return self._tags.find_by_name(name)

    def get_tag(self, tag_id: str) -> Tag:
        """Return the tag with this ID."""
        with _wrapped("failed to get tag"):
            return self._tags.find_by_id(tag_id)

    def get_tag_by_name(self, name: str) -> Tag:
        """Return the tag with this name."""
        with _wrapped("failed to get tag by name"):
            return self._tags.find_by_name(name)

    def list_tags(self) -> list[Tag]:
        """Return every tag."""
        with _wrapped("failed to list tags"):
            return self._tags.find_all()

    def delete_tag(self, tag_id: str) -> None:
        """Remove an existing tag."""
        with _wrapped("tag not found"):
            self._tags.find_by_id(tag_id)
        with _wrapped("failed to delete tag"):
            self._tags.delete(tag_id)

    def assign_tags_to_test_run(self, test_run_id: str, tag_ids: Iterable[str]) -> None:
        """Assign existing tags to a test run, replacing its current ones."""
        ids = list(tag_ids)
        for tag_id in ids:
            with _wrapped(f"tag {tag_id} not found"):
                self._tags.find_by_id(tag_id)
        with _wrapped("failed to assign tags to test run"):
            self._tags.assign_to_test_run(test_run_id, ids)

    def create_multiple_tags(self, tag_names: Iterable[str]) -> list[Tag]:
        """Create or look up a tag for each non-blank name, in order."""
        tags = []
        for raw in tag_names:
            name = raw.strip()
            if not name:
                continue
            with _wrapped(f"failed to create tag '{name}'"):
                tags.append(self.create_tag(name))
        return tags

    def get_or_create_tag(self, name: str) -> Tag:
        """Return the tag with this name, creating it if there is none."""
        try:
            return self._tags.find_by_name(name)
        except Exception:
            return self.create_tag(name)