"""API tests for the shared role catalogue"""


class TestRoles:
    def test_list_is_ordered_by_privilege(self, client, roles, db):
        db.seed("roles", {"name": "legacy", "display_name": "Alt", "sort_order": 9, "is_active": False})
        names = [r["name"] for r in client.get("/api/roles").json()]
        assert names == ["obmann", "club-administrator", "trainer", "member"]

    def test_permission_catalogue(self, client):
        names = {p["name"] for p in client.get("/api/roles/permissions").json()}
        assert "bookings:create" in names
        assert "events:join" in names

    def test_unknown_role(self, client, roles):
        assert client.get("/api/roles/999").status_code == 404

    def test_update_needs_super_user(self, client, roles):
        url = f"/api/roles/{roles['trainer']['id']}"
        assert client.put(url, json={"display_name": "Coach"}).status_code == 403

    def test_super_user_updates_permissions(self, client, roles, current_user):
        current_user["app_metadata"] = {"type": "super_user"}
        url = f"/api/roles/{roles['member']['id']}"
        response = client.put(url, json={"permissions": ["clubs:read", "clubs:read", "events:read"]})
        assert response.status_code == 200
        assert response.json()["permissions"] == ["clubs:read", "events:read"]

    def test_unknown_permission_rejected(self, client, roles, current_user):
        current_user["app_metadata"] = {"type": "super_user"}
        url = f"/api/roles/{roles['member']['id']}"
        assert client.put(url, json={"permissions": ["rockets:launch"]}).status_code == 422
