"""API tests for user profiles, membership status and super-admin management"""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from clubflow.config import settings
from tests.conftest import ADMIN_EMAIL, ADMIN_ID, add_membership


@pytest.fixture
def profiles(db):
    return {
        row["id"]: row
        for row in db.seed(
            "user_profiles",
            {"id": ADMIN_ID, "email": ADMIN_EMAIL, "first_name": "Ada"},
            {"id": "user-2", "email": "bert@example.com", "first_name": "Bert"},
            {"id": "root", "email": "root@example.com", "is_super_admin": True},
        )
    }


def stored(db, user_id):
    return next(row for row in db.rows("user_profiles") if row["id"] == user_id)


@pytest.fixture
def super_user(current_user):
    current_user["app_metadata"] = {"type": "super_user"}
    return current_user


@pytest.fixture
def admin_api():
    """Supabase admin client used for app_metadata changes"""
    admin = MagicMock()
    admin.auth.admin.update_user_by_id.side_effect = lambda user_id, attrs: SimpleNamespace(
        user=SimpleNamespace(id=user_id, app_metadata=attrs["app_metadata"])
    )
    with patch.object(settings, "supabase_service_role_key", "service-key"), \
            patch("clubflow.modules.auth.service.create_client", return_value=admin):
        yield admin


class TestProfiles:
    def test_update_own_profile(self, client, profiles):
        response = client.put(f"/api/users/{ADMIN_ID}", json={"last_name": "Lovelace"})
        assert response.status_code == 200
        assert response.json()["last_name"] == "Lovelace"
        assert response.json()["first_name"] == "Ada"

    def test_cannot_update_someone_else(self, client, profiles, db):
        response = client.put("/api/users/user-2", json={"first_name": "Mallory"})
        assert response.status_code == 403
        assert stored(db, "user-2")["first_name"] == "Bert"

    def test_super_user_updates_anyone(self, client, profiles, super_user):
        response = client.put("/api/users/user-2", json={"preferred_language": "en"})
        assert response.status_code == 200
        assert response.json()["preferred_language"] == "en"

    def test_read_requires_shared_club(self, client, profiles, club, db, roles):
        assert client.get("/api/users/user-2").status_code == 403
        add_membership(db, roles, club["id"], "user-2")
        assert client.get("/api/users/user-2").json()["email"] == "bert@example.com"


class TestMembershipStatus:
    def test_active_and_pending(self, client, club, db, roles):
        other = db.seed("clubs", {"name": "TC Nachbarort"})[0]
        add_membership(db, roles, other["id"], ADMIN_ID, status="inactive")

        body = client.get("/api/users/me/memberships/status").json()
        assert body["has_active_membership"] is True
        assert body["has_pending_membership"] is True
        assert {(m["club_name"], m["status"]) for m in body["memberships"]} == {
            ("SV Teststadt", "active"),
            ("TC Nachbarort", "inactive"),
        }

    def test_no_memberships(self, client, current_user):
        current_user["id"] = "newcomer"
        body = client.get("/api/users/me/memberships/status").json()
        assert body == {"has_active_membership": False, "has_pending_membership": False, "memberships": []}


class TestSuperAdmins:
    def test_list_requires_super_user(self, client, profiles):
        assert client.get("/api/users/super-admins").status_code == 403

    def test_list(self, client, profiles, super_user):
        listed = client.get("/api/users/super-admins").json()
        assert [u["id"] for u in listed] == ["root"]

    def test_grant_requires_super_user(self, client, profiles, admin_api):
        assert client.post("/api/users/user-2/super-admin").status_code == 403
        assert admin_api.auth.admin.update_user_by_id.call_count == 0

    def test_grant_and_revoke(self, client, profiles, super_user, admin_api, db):
        response = client.post("/api/users/user-2/super-admin")
        assert response.json() == {"user_id": "user-2", "is_super_admin": True}
        admin_api.auth.admin.update_user_by_id.assert_called_with("user-2", {"app_metadata": {"type": "super_user"}})
        assert stored(db, "user-2")["is_super_admin"] is True

        response = client.delete("/api/users/user-2/super-admin")
        assert response.json() == {"user_id": "user-2", "is_super_admin": False}
        admin_api.auth.admin.update_user_by_id.assert_called_with("user-2", {"app_metadata": {}})
        assert stored(db, "user-2")["is_super_admin"] is False

    def test_cannot_revoke_self(self, client, profiles, super_user, admin_api):
        assert client.delete(f"/api/users/{ADMIN_ID}/super-admin").status_code == 400
