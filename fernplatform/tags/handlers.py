"""Command handlers for creating tags and assigning them to test runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from fernplatform.tags.tag import Tag, TagRepository, TagSnapshot


def _find(repo: TagRepository, name: str) -> Tag | None:
    try:
        return repo.find_by_name(name)
    except Exception:
        return None


@dataclass
class CreateTagCommand:
    """Request to create a tag."""

    name: str


class CreateTagHandler:
    """Creates a tag, or returns the one that already has the name."""

    def __init__(self, tag_repo: TagRepository) -> None:
        self._tags = tag_repo

    def handle(self, command: CreateTagCommand) -> TagSnapshot:
        """Carry out the command and return the tag's snapshot."""
        existing = _find(self._tags, command.name)
        if existing is not None:
            return existing.to_snapshot()
        tag = Tag(command.name)
        self._tags.save(tag)
        return tag.to_snapshot()


@dataclass
class AssignTagsCommand:
    """Request to tag a test run with the named tags."""

    test_run_id: int
    tag_names: list[str] = field(default_factory=list)


class AssignTagsHandler:
    """Tags a test run by name, creating tags that do not exist yet."""

    def __init__(self, tag_repo: TagRepository) -> None:
        self._tags = tag_repo

    def handle(self, command: AssignTagsCommand) -> None:
        """Carry out the command."""
        tag_ids = []
        for name in command.tag_names:
            tag = _find(self._tags, name)
            if tag is None:
                tag = Tag(name)
                self._tags.save(tag)
            tag_ids.append(tag.id)
        self._tags.assign_to_test_run(str(command.test_run_id), tag_ids)