# fernplatform

Domain services for a test-reporting platform. It models users and sessions,
permission checks, projects with per-user permissions, and tags that can be
attached to test runs. It also includes an OAuth client for the
authorization-code flow.

Storage sits behind small repository protocols (`typing.Protocol`), so you
supply the persistence layer. By convention, lookups raise `LookupError` when
nothing matches. The package includes a store only for project permissions,
backed by SQLite.

## Installation

```
pip install fernplatform
```

To run the test suite:

```
pip install "fernplatform[test]"
pytest
```

## Modules

`fernplatform.auth`

- `user`: `User` (`is_admin`, `is_active`, `has_group`, `teams`,
  `is_team_manager`, `is_manager_for_team`), `UserRole`, `UserStatus`,
  `UserGroup`, `UserScope`, and the `UserRepository` protocol.
- `session`: `Session` (`is_expired`, `is_valid`, `update_activity`,
  `invalidate`) and the `SessionRepository` protocol.
- `authentication`: `AuthenticationService`.
  - `authenticate_with_oauth` finds or creates the user and replaces its groups.
    It then opens a session that lasts `expires_in` seconds, or 24 hours when
    `expires_in` is zero.
  - `validate_session` and `logout` act on one session. `logout_all_sessions`
    acts on every session of a user.
  - The module also has `UserInfo`, `TokenInfo`, `AuthenticateResult`,
    `AuthenticationError`, and `generate_session_id` (a URL-safe base64
    encoding of 32 random bytes).
  - New users in the `admin` or `/admin` group get the admin role.
- `authorization`: `AuthorizationService`.
  - `can_access_project` returns true for admins. Otherwise it needs an
    unexpired matching scope.
  - The service also has `can_manage_team`, `grant_scope` and `revoke_scope`.
  - `match_project_scope` checks scopes of the form
    `project:<action>:<project id>`, where either part may be `*`.
- `oauth`: `OAuthClient` with `OAuthSettings`.
  - `generate_state`, `build_auth_url`, `exchange_code_for_token` and
    `get_user_info` run the authorization-code flow. `get_user_info` uses the
    claim names set in the settings.
  - `build_provider_logout_url` returns the provider's logout URL. It uses
    `logout_url`, or `<issuer_url>/protocol/openid-connect/logout`, and falls
    back to `/auth/login`.
  - `apply_admin_overrides` adds the `admin` group for configured admin users
    or groups.
  - Failures raise `OAuthError`. HTTP calls go through `requests`, with a
    10-second timeout.

`fernplatform.projects`

- `project`: `Project`, `ProjectSnapshot`, `ProjectError` (a `ValueError`), and
  the `ProjectRepository` protocol. New projects are active, with default
  branch `main`.
- `permission`: `ProjectPermission` (`set_expiration`, `is_expired`,
  `can_read`, `can_write`, `can_delete`, `can_admin`), `PermissionType` (`read`,
  `write`, `delete`, `admin`), and the `ProjectPermissionRepository` protocol.
- `service`: `ProjectService` and `UpdateProjectRequest`. Failures raise
  `ProjectServiceError`.
  - Creating a project grants its creator the `admin` permission.
  - The other operations are get, update, activate, deactivate, delete, list,
    grant and revoke permissions, and `get_or_create_project`.
- `commands`: `CreateProjectHandler` with `CreateProjectCommand`, and
  `UpdateProjectHandler` with `UpdateProjectCommand`. Failures raise
  `CommandError`.
  - An empty project ID gets a generated UUID.
  - Updates require the updating user to hold a permission that allows writing.
- `permission_store`: `SqlProjectPermissionRepository`.
  - It keeps permissions in a `project_permissions` table of a
    `sqlite3.Connection`, and creates the table if it is missing.
  - A duplicate (project, user, permission) is rejected. Failures raise
    `PermissionStoreError`.

`fernplatform.tags`

- `tag`: `Tag`, `TagSnapshot`, `TagError` (a `ValueError`), and the
  `TagRepository` protocol. Tag names are lower-cased and trimmed.
- `service`: `TagService`. Failures raise `TagServiceError`.
  - `create_tag` returns an existing tag of the same name.
  - The other operations are `get_tag`, `get_tag_by_name`, `list_tags`,
    `delete_tag`, `assign_tags_to_test_run`, `create_multiple_tags` and
    `get_or_create_tag`. `create_multiple_tags` skips blank names.
- `handlers`: `CreateTagHandler` with `CreateTagCommand`, and
  `AssignTagsHandler` with `AssignTagsCommand`. `AssignTagsHandler` creates
  tags that do not exist yet.

## Example

```python
import sqlite3

from fernplatform.auth.authorization import match_project_scope
from fernplatform.projects.permission import PermissionType, ProjectPermission
from fernplatform.projects.permission_store import SqlProjectPermissionRepository
from fernplatform.projects.project import Project
from fernplatform.tags.tag import Tag

assert match_project_scope("project:*:checkout", "checkout", "write")
assert not match_project_scope("project:read:checkout", "checkout", "write")

project = Project("checkout", "Checkout Service", "payments")
project.update_description("End-to-end checkout tests")
print(project.to_snapshot().default_branch)  # main

store = SqlProjectPermissionRepository(sqlite3.connect(":memory:"))
store.save(
    ProjectPermission("checkout", "alice@example.com", PermissionType.WRITE, "bob@example.com")
)
perms = store.find_by_project_and_user("checkout", "alice@example.com")
assert perms[0].can_write() and not perms[0].can_admin()

print(Tag("  Smoke ").name)  # smoke
```

## What this package does not do

- It has no web server, HTTP middleware, GraphQL API or command-line program.
- It has no storage for users, sessions, projects or tags. You implement the
  repository protocols yourself. The only store included is the SQLite store
  for project permissions.
- It does not record or analyse test runs. Test runs appear only as IDs that
  tags are assigned to.