from fernplatform.auth.user import User, UserGroup, UserRole, UserStatus


def make_user(*groups, role=UserRole.USER, status=UserStatus.ACTIVE):
    user = User(user_id="u1", email="someone@example.com", role=role, status=status)
    user.groups = [UserGroup(user_id="u1", group_name=name) for name in groups]
    return user


def test_is_admin_follows_role():
    assert make_user(role=UserRole.ADMIN).is_admin() is True
    assert make_user().is_admin() is False


def test_is_active_follows_status():
    assert make_user().is_active() is True
    assert make_user(status=UserStatus.SUSPENDED).is_active() is False
    assert make_user(status=UserStatus.INACTIVE).is_active() is False


def test_has_group_matches_exact_name():
    user = make_user("/fern", "atmos-users")
    assert user.has_group("/fern") is True
    assert user.has_group("atmos-users") is True
    assert user.has_group("fern") is False


def test_teams_extracted_from_manager_and_user_groups():
    user = make_user("/fern-managers", "atmos-users", "/admin", "plain")
    assert user.teams() == ["fern", "atmos"]


def test_teams_skips_groups_with_empty_team():
    user = make_user("-managers", "/-users")
    assert user.teams() == []


def test_is_team_manager_for_manager_group_with_slash():
    assert make_user("/fern-managers").is_team_manager() is True
    assert make_user("/fern-users").is_team_manager() is False


def test_admin_is_always_team_manager():
    admin = make_user(role=UserRole.ADMIN)
    assert admin.is_team_manager() is True
    assert admin.is_manager_for_team("anything") is True


def test_is_manager_for_team_needs_exact_group():
    assert make_user("fern-managers").is_manager_for_team("fern") is True
    assert make_user("fern-managers").is_manager_for_team("atmos") is False
    assert make_user("/fern-managers").is_manager_for_team("fern") is False


def test_role_values_match_wire_strings():
    assert UserRole("admin") is UserRole.ADMIN
    assert UserStatus("suspended") is UserStatus.SUSPENDED