import pytest

from fernplatform.tags.handlers import (
    AssignTagsCommand,
    AssignTagsHandler,
    CreateTagCommand,
    CreateTagHandler,
)
from fernplatform.tags.tag import Tag, TagError


class FakeTagRepository:
    def __init__(self):
        self.tags = {}
        self.assignments = {}
        self.saved = []
        self._next = 1

    def add(self, name):
        tag_id = str(self._next)
        self._next += 1
        tag = Tag(name, tag_id=tag_id)
        self.tags[tag_id] = tag
        return tag

    def save(self, tag):
        self.saved.append(tag)
        self.add(tag.name)

    def find_by_id(self, tag_id):
        try:
            return self.tags[tag_id]
        except KeyError:
            raise LookupError("tag not found") from None

    def find_by_name(self, name):
        wanted = name.strip().lower()
        for tag in self.tags.values():
            if tag.name == wanted:
                return tag
        raise LookupError("tag not found")

    def find_all(self):
        return sorted(self.tags.values(), key=lambda tag: tag.name)

    def delete(self, tag_id):
        del self.tags[tag_id]

    def assign_to_test_run(self, test_run_id, tag_ids):
        self.assignments[test_run_id] = list(tag_ids)


@pytest.fixture
def repo():
    return FakeTagRepository()


def test_create_tag_handler_creates_new(repo):
    snapshot = CreateTagHandler(repo).handle(CreateTagCommand(name="Nightly"))
    assert snapshot.name == "nightly"
    assert [tag.name for tag in repo.saved] == [snapshot.name]


def test_create_tag_handler_returns_existing(repo):
    existing = repo.add("nightly")
    snapshot = CreateTagHandler(repo).handle(CreateTagCommand(name="NIGHTLY"))
    assert snapshot == existing.to_snapshot()
    assert repo.saved == []


def test_create_tag_handler_rejects_empty_name(repo):
    with pytest.raises(TagError, match="cannot be empty"):
        CreateTagHandler(repo).handle(CreateTagCommand(name=""))


def test_assign_tags_uses_existing_ids(repo):
    a = repo.add("a")
    b = repo.add("b")
    AssignTagsHandler(repo).handle(AssignTagsCommand(test_run_id=12, tag_names=["a", "b"]))
    assert repo.assignments[str(12)] == [a.id, b.id]
    assert repo.saved == []


def test_assign_tags_creates_missing_tags(repo):
    a = repo.add("a")
    AssignTagsHandler(repo).handle(AssignTagsCommand(test_run_id=3, tag_names=["a", "fresh"]))
    assert [tag.name for tag in repo.saved] == ["fresh"]
    assert repo.find_by_name("fresh").name == "fresh"
    assigned = repo.assignments[str(3)]
    assert assigned[0] == a.id
    assert len(assigned) == 2


def test_assign_tags_with_no_names_clears_assignment(repo):
    AssignTagsHandler(repo).handle(AssignTagsCommand(test_run_id=4))
    assert repo.assignments[str(4)] == []


def test_assign_tags_rejects_blank_name(repo):
    with pytest.raises(TagError, match="after normalization"):
        AssignTagsHandler(repo).handle(AssignTagsCommand(test_run_id=1, tag_names=["  "]))
    assert repo.assignments == {}