"""Permission checks for users against projects and teams."""

from __future__ import annotations

from datetime import datetime, timezone

from fernplatform.auth.user import User, UserRepository, UserScope

_WILDCARD = "*"


def match_project_scope(user_scope: str, project_id: str, action: str) -> bool:
    """Check a ``project:<action>:<project>`` scope against an action on a project.

    Either part of the scope may be ``*`` to match anything.
    """
    parts = user_scope.split(":")
    if len(parts) != 3 or parts[0] != "project":
        return False
    _, scope_action, scope_project = parts
    action_match = scope_action in (_WILDCARD, action)
    project_match = scope_project in (_WILDCARD, project_id)
    return action_match and project_match


class AuthorizationService:
    """Decides what a user may do."""

    def __init__(self, user_repo: UserRepository) -> None:
        self._users = user_repo

    def can_access_project(self, user: User, project_id: str, required_action: str) -> bool:
        """True if the user is an admin or holds an unexpired matching scope."""
        if user.is_admin():
            return True
        now = datetime.now(timezone.utc)
        return any(
            match_project_scope(scope.scope, project_id, required_action)
            for scope in self._users.get_user_scopes(user.user_id)
            if scope.expires_at is None or scope.expires_at >= now
        )

    def can_manage_team(self, user: User, team: str) -> bool:
        """True if the user may manage the team."""
        return user.is_manager_for_team(team)

    def grant_scope(self, scope: UserScope) -> None:
        """Grant a scope to a user."""
        self._users.grant_scope(scope)

    def revoke_scope(self, user_id: str, scope: str) -> None:
        """Revoke a scope from a user."""
        self._users.revoke_scope(user_id, scope)