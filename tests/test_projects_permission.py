import time
from datetime import datetime, timedelta, timezone

import pytest

from fernplatform.projects.permission import PermissionType, ProjectPermission
from fernplatform.projects.project import ProjectError


def make_permission(kind=PermissionType.READ):
    return ProjectPermission("proj-1", "user-1", kind, "admin-1")


def test_new_permission_fields():
    permission = make_permission(PermissionType.WRITE)
    assert permission.project_id == "proj-1"
    assert permission.user_id == "user-1"
    assert permission.permission is PermissionType.WRITE
    assert permission.granted_by == "admin-1"
    assert permission.expires_at is None
    assert permission.is_expired() is False


def test_permission_accepts_string_value():
    permission = ProjectPermission("proj-1", "user-1", "delete", "admin-1")
    assert permission.permission is PermissionType.DELETE


@pytest.mark.parametrize(
    "args, message",
    [
        (("", "user-1", "read", "admin-1"), "project ID cannot be empty"),
        (("proj-1", "", "read", "admin-1"), "user ID cannot be empty"),
        (("proj-1", "user-1", "read", ""), "granted by cannot be empty"),
        (("proj-1", "user-1", "owner", "admin-1"), "invalid permission type"),
    ],
)
def test_new_permission_validation(args, message):
    with pytest.raises(ProjectError, match=message):
        ProjectPermission(*args)


@pytest.mark.parametrize(
    "kind, read, write, delete, admin",
    [
        (PermissionType.READ, True, False, False, False),
        (PermissionType.WRITE, True, True, False, False),
        (PermissionType.DELETE, True, True, True, False),
        (PermissionType.ADMIN, True, True, True, True),
    ],
)
def test_capabilities(kind, read, write, delete, admin):
    permission = make_permission(kind)
    assert permission.can_read() is read
    assert permission.can_write() is write
    assert permission.can_delete() is delete
    assert permission.can_admin() is admin


def test_set_expiration_in_past_is_rejected():
    permission = make_permission()
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    with pytest.raises(ProjectError, match="expiration time must be in the future"):
        permission.set_expiration(past)
    assert permission.expires_at is None


def test_future_expiration_keeps_permission_usable():
    permission = make_permission(PermissionType.ADMIN)
    future = datetime.now(timezone.utc) + timedelta(days=1)
    permission.set_expiration(future)
    assert permission.expires_at == future
    assert permission.is_expired() is False
    assert permission.can_admin() is True


def test_expired_permission_grants_nothing():
    permission = make_permission(PermissionType.ADMIN)
    permission.set_expiration(datetime.now(timezone.utc) + timedelta(milliseconds=20))
    time.sleep(0.05)
    assert permission.is_expired() is True
    assert [
        permission.can_read(),
        permission.can_write(),
        permission.can_delete(),
        permission.can_admin(),
    ] == [False, False, False, False]