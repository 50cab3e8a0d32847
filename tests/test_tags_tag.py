from datetime import datetime, timezone

import pytest

from fernplatform.tags.tag import Tag, TagError, TagSnapshot


def test_name_is_normalised():
    tag = Tag("  Smoke ")
    assert tag.name == "smoke"


def test_new_tag_has_empty_id():
    assert Tag("smoke").id == ""


def test_explicit_id_and_created_at_are_kept():
    moment = datetime(2024, 1, 2, tzinfo=timezone.utc)
    tag = Tag("smoke", tag_id="7", created_at=moment)
    assert tag.id == "7"
    assert tag.created_at == moment


def test_default_created_at_is_recent_and_aware():
    before = datetime.now(timezone.utc)
    tag = Tag("smoke")
    after = datetime.now(timezone.utc)
    assert before <= tag.created_at <= after


def test_empty_name_is_rejected():
    with pytest.raises(TagError, match="tag name cannot be empty"):
        Tag("")


def test_blank_name_is_rejected_after_normalisation():
    with pytest.raises(TagError, match="after normalization"):
        Tag("   ")


def test_snapshot_copies_state():
    moment = datetime(2024, 1, 2, tzinfo=timezone.utc)
    tag = Tag("Regression", tag_id="3", created_at=moment)
    snapshot = tag.to_snapshot()
    assert snapshot == TagSnapshot(id=tag.id, name=tag.name, created_at=moment)


def test_snapshot_is_read_only():
    snapshot = Tag("smoke").to_snapshot()
    with pytest.raises(AttributeError):
        snapshot.name = "other"  # type: ignore[misc]
    assert snapshot.name == "smoke"