"""Tests for the role matrix and the client permission flags"""
from clubflow.config.permissions_config import (
    ADMIN_ROLES, PERMISSION_MATRIX, get_role_permissions,
)
from clubflow.modules.clubs.service import compute_permission_flags, display_name


class TestRoleMatrix:
    def test_admin_roles_hold_every_permission(self):
        all_names = {p["name"] for p in PERMISSION_MATRIX["permissions"]}
        for role in ADMIN_ROLES:
            assert set(get_role_permissions(role)) == all_names

    def test_member_is_read_only(self):
        permissions = get_role_permissions("member")
        assert "events:join" in permissions
        assert not any(p.endswith((":create", ":update", ":delete")) for p in permissions)

    def test_trainer_cannot_touch_finances(self):
        permissions = get_role_permissions("trainer")
        assert "teams:update" in permissions
        assert not any(p.startswith("finances:") for p in permissions)

    def test_unknown_role(self):
        assert get_role_permissions("janitor") == []

    def test_roles_sorted_for_seeding(self):
        names = [r["name"] for r in sorted(PERMISSION_MATRIX["roles"], key=lambda r: r["sort_order"])]
        assert names == ["obmann", "club-administrator", "trainer", "member"]


class TestPermissionFlags:
    def test_non_member(self):
        flags = compute_permission_flags(["teams:update"], False)
        assert flags.can_view is False
        assert flags.is_read_only is True
        assert flags.permissions == []

    def test_member_flags(self):
        flags = compute_permission_flags(get_role_permissions("member"), True, role="member")
        assert flags.can_view is True
        assert flags.is_read_only is True
        assert flags.can_manage_teams is False
        assert flags.role == "member"

    def test_trainer_flags(self):
        flags = compute_permission_flags(get_role_permissions("trainer"), True, role="trainer")
        assert flags.can_create is True
        assert flags.can_manage_teams is True
        assert flags.can_manage_finances is False
        assert flags.can_delete is False

    def test_display_name(self):
        assert display_name({"first_name": "Anna", "last_name": "Huber"}) == "Anna Huber"
        assert display_name({"email": "a@example.com"}) == "a@example.com"
        assert display_name(None) == "Unbekannt"
