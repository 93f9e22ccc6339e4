"""API tests for clubs, memberships, members and teams"""
from tests.conftest import ADMIN_ID, add_membership, subscribe


class TestClubs:
    def test_create_makes_caller_admin(self, client, roles, db):
        response = client.post("/api/clubs", json={"name": "  FC Beispiel  "})
        assert response.status_code == 201
        club = response.json()
        assert club["name"] == "FC Beispiel"

        membership = db.rows("club_memberships")[0]
        assert membership["user_id"] == ADMIN_ID
        assert membership["role_id"] == roles["club-administrator"]["id"]

        mine = client.get("/api/clubs").json()
        assert [(c["name"], c["role"]) for c in mine] == [("FC Beispiel", "club-administrator")]

    def test_blank_name_rejected(self, client, roles):
        assert client.post("/api/clubs", json={"name": "   "}).status_code == 422

    def test_update_logs_activity(self, client, club, db):
        response = client.patch(f"/api/clubs/{club['id']}", json={"short_name": "SVT", "website": ""})
        assert response.status_code == 200
        assert response.json()["short_name"] == "SVT"
        log = db.rows("activity_logs")[0]
        assert log["action"] == "club_updated"
        assert log["metadata"]["updated_fields"] == ["short_name", "website"]

    def test_non_member_cannot_read(self, client, club, current_user):
        current_user["id"] = "stranger"
        assert client.get(f"/api/clubs/{club['id']}").status_code == 403

    def test_super_user_bypasses_membership(self, client, club, current_user):
        current_user["id"] = "root"
        current_user["app_metadata"] = {"type": "super_user"}
        assert client.get(f"/api/clubs/{club['id']}").status_code == 200
        flags = client.get(f"/api/clubs/{club['id']}/permissions").json()
        assert flags["role"] == "super_user"
        assert flags["can_manage_finances"] is True


class TestJoinFlow:
    def test_request_and_approve(self, client, club, roles, current_user):
        current_user["id"] = "user-2"
        response = client.post(f"/api/clubs/{club['id']}/join")
        assert response.status_code == 201
        membership_id = response.json()["membership_id"]
        assert response.json()["status"] == "inactive"

        assert client.post(f"/api/clubs/{club['id']}/join").status_code == 400
        assert client.get(f"/api/clubs/{club['id']}/user-membership").json()["is_member"] is False

        current_user["id"] = ADMIN_ID
        pending = client.get(f"/api/clubs/{club['id']}/pending-memberships").json()
        assert [p["membership_id"] for p in pending] == [membership_id]

        response = client.put(
            f"/api/clubs/{club['id']}/memberships/{membership_id}/approve",
            json={"action": "approve", "role_id": roles["trainer"]["id"]},
        )
        assert response.status_code == 200
        assert response.json()["action"] == "approved"

        current_user["id"] = "user-2"
        flags = client.get(f"/api/clubs/{club['id']}/permissions").json()
        assert flags["role"] == "trainer"
        assert flags["can_manage_teams"] is True

    def test_approval_timestamps_are_utc_aware(self, client, club, current_user, db):
        current_user["id"] = "user-2"
        membership_id = client.post(f"/api/clubs/{club['id']}/join").json()["membership_id"]
        current_user["id"] = ADMIN_ID
        client.put(f"/api/clubs/{club['id']}/memberships/{membership_id}/approve", json={"action": "approve"})
        approved = [m for m in db.rows("club_memberships") if m["id"] == membership_id][0]
        assert approved["joined_at"].endswith("+00:00")

        client.patch(f"/api/clubs/{club['id']}", json={"short_name": "SVT"})
        assert db.rows("clubs")[0]["updated_at"].endswith("+00:00")

    def test_reject_deletes_request(self, client, club, current_user, db):
        current_user["id"] = "user-2"
        membership_id = client.post(f"/api/clubs/{club['id']}/join").json()["membership_id"]
        current_user["id"] = ADMIN_ID
        response = client.put(
            f"/api/clubs/{club['id']}/memberships/{membership_id}/approve", json={"action": "reject"}
        )
        assert response.json()["action"] == "rejected"
        assert len(db.rows("club_memberships")) == 1

    def test_suspended_member_cannot_rejoin(self, client, club, roles, db, current_user):
        add_membership(db, roles, club["id"], "user-3", status="suspended")
        current_user["id"] = "user-3"
        response = client.post(f"/api/clubs/{club['id']}/join")
        assert response.status_code == 400
        assert "suspended" in response.json()["detail"]

    def test_admin_cannot_demote_self(self, client, club, db):
        membership = db.rows("club_memberships")[0]
        response = client.patch(
            f"/api/clubs/{club['id']}/memberships/{membership['id']}/role", json={"role": "member"}
        )
        assert response.status_code == 400

    def test_sync_versions_move_on_change(self, client, club, current_user):
        before = client.get(f"/api/clubs/{club['id']}/sync").json()["versions"]
        client.post(f"/api/clubs/{club['id']}/members", json={"first_name": "Max", "last_name": "Muster"})
        after = client.get(f"/api/clubs/{club['id']}/sync").json()["versions"]
        assert after["members"] == before.get("members", 0) + 1
        assert after["dashboard"] == before.get("dashboard", 0) + 1


class TestMembers:
    def test_member_limit_on_free_plan(self, client, club, db):
        db.seed("members", *[
            {"club_id": club["id"], "first_name": "M", "last_name": str(i), "status": "active"}
            for i in range(50)
        ])
        response = client.post(f"/api/clubs/{club['id']}/members", json={"first_name": "Max", "last_name": "Muster"})
        assert response.status_code == 403
        assert response.json()["detail"]["member_limit"] == 50

        response = client.post(
            f"/api/clubs/{club['id']}/members",
            json={"first_name": "Max", "last_name": "Muster", "status": "inactive"},
        )
        assert response.status_code == 201

    def test_search(self, client, club):
        url = f"/api/clubs/{club['id']}/members"
        client.post(url, json={"first_name": "Anna", "last_name": "Huber", "email": "anna@example.com"})
        client.post(url, json={"first_name": "Ben", "last_name": "Gruber"})
        found = client.get(url, params={"search": "ANNA"}).json()
        assert [m["last_name"] for m in found] == ["Huber"]


class TestTeams:
    def test_free_plan_blocks_team_creation(self, client, club):
        response = client.post(f"/api/clubs/{club['id']}/teams", json={"name": "U12"})
        assert response.status_code == 403

    def test_team_roster(self, client, club, db, plans):
        subscribe(db, plans, club["id"], "starter")
        club_id = club["id"]
        team = client.post(f"/api/clubs/{club_id}/teams", json={"name": "U12", "max_members": 1}).json()
        assert team["season"]

        first = client.post(f"/api/clubs/{club_id}/members", json={"first_name": "A", "last_name": "A"}).json()
        second = client.post(f"/api/clubs/{club_id}/members", json={"first_name": "B", "last_name": "B"}).json()

        url = f"/api/clubs/{club_id}/teams/{team['id']}/memberships"
        assert client.post(url, json={"member_id": first["id"]}).status_code == 201
        assert client.post(url, json={"member_id": first["id"]}).status_code == 400
        response = client.post(url, json={"member_id": second["id"]})
        assert response.status_code == 400
        assert "full" in response.json()["detail"]

    def test_player_assignment(self, client, club, db):
        club_id = club["id"]
        team = db.seed("teams", {"club_id": club_id, "name": "Kampfmannschaft", "status": "active"})[0]
        player = client.post(f"/api/clubs/{club_id}/players", json={"first_name": "P", "last_name": "One"}).json()
        assert player["team_ids"] == []

        url = f"/api/clubs/{club_id}/players/{player['id']}/teams/{team['id']}"
        response = client.post(url, json={"season": "2026/27"})
        assert response.status_code == 201
        assert response.json()["season"] == "2026/27"
        assert client.post(url).status_code == 400

        listed = client.get(f"/api/clubs/{club_id}/players", params={"team_id": team["id"]}).json()
        assert [p["id"] for p in listed] == [player["id"]]

        assert client.delete(url).status_code == 204
        assert client.get(f"/api/clubs/{club_id}/players/{player['id']}").json()["team_ids"] == []
