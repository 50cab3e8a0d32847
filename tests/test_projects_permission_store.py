import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from fernplatform.projects.permission import PermissionType, ProjectPermission
from fernplatform.projects.permission_store import (
    PermissionStoreError,
    SqlProjectPermissionRepository,
)


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def store(connection):
    return SqlProjectPermissionRepository(connection)


def _perm(project_id="proj-1", user_id="bob", kind=PermissionType.READ, granted_by="alice"):
    return ProjectPermission(project_id, user_id, kind, granted_by)


def test_creates_permissions_table(connection):
    repository = SqlProjectPermissionRepository(connection)
    names = {
        row[0]
        for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    assert "project_permissions" in names
    assert repository.find_by_user("bob") == []


def test_save_and_find_round_trip(store):
    store.save(_perm(kind=PermissionType.WRITE))
    found = store.find_by_project_and_user("proj-1", "bob")
    assert len(found) == 1
    permission = found[0]
    assert permission.project_id == "proj-1"
    assert permission.user_id == "bob"
    assert permission.permission == PermissionType.WRITE
    assert permission.granted_by == "alice"
    assert permission.can_write()


def test_future_expiration_survives_round_trip(store):
    expires = datetime.now(timezone.utc) + timedelta(days=2)
    permission = _perm()
    permission.set_expiration(expires)
    store.save(permission)
    (loaded,) = store.find_by_user("bob")
    assert loaded.expires_at == expires
    assert not loaded.is_expired()


def test_find_by_user_and_project(store):
    store.save(_perm("proj-1", "bob"))
    store.save(_perm("proj-2", "bob"))
    store.save(_perm("proj-1", "carol"))
    assert [p.project_id for p in store.find_by_user("bob")] == ["proj-1", "proj-2"]
    assert [p.user_id for p in store.find_by_project("proj-1")] == ["bob", "carol"]
    assert store.find_by_project_and_user("proj-2", "carol") == []


def test_duplicate_permission_is_rejected(store):
    store.save(_perm())
    with pytest.raises(PermissionStoreError, match="failed to save project permission"):
        store.save(_perm())
    assert len(store.find_by_user("bob")) == 1


def test_same_user_may_hold_several_kinds(store):
    store.save(_perm(kind=PermissionType.READ))
    store.save(_perm(kind=PermissionType.ADMIN))
    kinds = {p.permission for p in store.find_by_project_and_user("proj-1", "bob")}
    assert kinds == {PermissionType.READ, PermissionType.ADMIN}


def test_delete_removes_only_matching(store):
    store.save(_perm(kind=PermissionType.READ))
    store.save(_perm(kind=PermissionType.WRITE))
    store.delete("proj-1", "bob", PermissionType.READ)
    remaining = store.find_by_project_and_user("proj-1", "bob")
    assert [p.permission for p in remaining] == [PermissionType.WRITE]


def test_delete_expired(store, connection):
    store.save(_perm(user_id="bob"))
    store.save(_perm(user_id="carol"))
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    with connection:
        connection.execute(
            "UPDATE project_permissions SET expires_at = ? WHERE user_id = ?", (past, "bob")
        )
    store.delete_expired()
    assert store.find_by_user("bob") == []
    assert [p.user_id for p in store.find_by_project("proj-1")] == ["carol"]


def test_delete_expired_keeps_future_expirations(store):
    permission = _perm()
    permission.set_expiration(datetime.now(timezone.utc) + timedelta(hours=1))
    store.save(permission)
    store.delete_expired()
    assert len(store.find_by_user("bob")) == 1


def test_closed_connection_raises_store_error(connection):
    store = SqlProjectPermissionRepository(connection)
    connection.close()
    with pytest.raises(PermissionStoreError, match="failed to find user permissions"):
        store.find_by_user("bob")