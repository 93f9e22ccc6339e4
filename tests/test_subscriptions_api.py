"""API tests for plans, plan changes, cancellation and usage"""
from datetime import timedelta
from unittest.mock import patch

from clubflow.core.timeutils import utcnow
from tests.conftest import add_membership, subscribe


class TestPlans:
    def test_plans_fall_back_to_definitions(self, client):
        plans = client.get("/api/subscriptions/plans").json()
        assert [p["plan_type"] for p in plans] == ["free", "starter", "professional", "enterprise"]
        assert plans[0]["id"] is None

    def test_seeded_plans(self, client, plans):
        listed = client.get("/api/subscriptions/plans").json()
        assert listed[1]["id"] == plans["starter"]["id"]

    def test_comparison(self, client):
        rows = client.get("/api/subscriptions/plans/comparison").json()
        by_feature = {r["feature"]: r for r in rows}
        assert by_feature["whiteLabel"]["professional"] is False
        assert by_feature["whiteLabel"]["enterprise"] is True


class TestClubSubscription:
    def test_free_club(self, client, club, plans):
        body = client.get(f"/api/subscriptions/clubs/{club['id']}").json()
        assert body["current_plan"] == "free"
        assert body["status"] == "inactive"
        assert body["features"] == ["basicManagement"]
        assert body["usage"]["member_limit"] == 50

    def test_upgrade_creates_subscription(self, client, club, plans, db):
        with patch("clubflow.modules.subscriptions.routes.send_plan_change_notification") as notify:
            response = client.post(
                f"/api/subscriptions/clubs/{club['id']}",
                json={"plan_type": "starter", "billing_interval": "yearly", "reason": "Mehr Mitglieder"},
            )
        assert response.status_code == 200
        body = response.json()
        assert (body["old_plan"], body["new_plan"], body["price"]) == ("free", "starter", 190)
        assert body["subscription"]["metadata"] == {"upgrade_reason": "Mehr Mitglieder"}
        notify.assert_called_once_with("SV Teststadt", "free", "starter", "yearly", "admin@example.com")

        stored = db.rows("club_subscriptions")[0]
        assert stored["plan_id"] == plans["starter"]["id"]
        assert db.rows("activity_logs")[0]["action"] == "subscription_changed"

        current = client.get(f"/api/subscriptions/clubs/{club['id']}").json()
        assert current["current_plan"] == "starter"
        assert "facilityBooking" in current["features"]

    def test_same_plan_rejected(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "starter")
        response = client.post(f"/api/subscriptions/clubs/{club['id']}", json={"plan_type": "starter"})
        assert response.status_code == 400

    def test_change_records_usage_of_closed_period(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "starter")
        db.seed("teams", {"club_id": club["id"], "name": "U10", "status": "active"})
        client.post(f"/api/subscriptions/clubs/{club['id']}", json={"plan_type": "professional"})
        usage = db.rows("subscription_usage")
        assert len(usage) == 1
        assert usage[0]["team_count"] == 1
        assert len(db.rows("club_subscriptions")) == 1

    def test_downgrade_blocked_by_members(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "professional")
        db.seed("members", *[
            {"club_id": club["id"], "first_name": "M", "last_name": str(i), "status": "active"}
            for i in range(151)
        ])
        response = client.post(f"/api/subscriptions/clubs/{club['id']}", json={"plan_type": "starter"})
        assert response.status_code == 400
        assert response.json()["detail"]["member_limit"] == 150

    def test_downgrade_reason(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "professional")
        response = client.post(
            f"/api/subscriptions/clubs/{club['id']}", json={"plan_type": "starter", "reason": "Weniger Teams"}
        )
        assert response.status_code == 200
        assert response.json()["subscription"]["metadata"] == {"downgrade_reason": "Weniger Teams"}

    def test_unseeded_plan(self, client, club):
        response = client.post(f"/api/subscriptions/clubs/{club['id']}", json={"plan_type": "starter"})
        assert response.status_code == 400

    def test_expired_subscription_counts_as_free(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "professional", period_end=utcnow() - timedelta(days=1))
        body = client.get(f"/api/subscriptions/clubs/{club['id']}").json()
        assert body["current_plan"] == "free"
        assert body["is_expired"] is True
        assert body["plan"]["plan_type"] == "free"


class TestCancel:
    def test_cancel_keeps_plan_until_period_end(self, client, club, plans, db):
        subscribe(db, plans, club["id"], "starter")
        response = client.put(f"/api/subscriptions/clubs/{club['id']}/cancel", json={"reason": "Zu teuer"})
        assert response.status_code == 200
        body = response.json()
        assert body["subscription"]["status"] == "cancelled"
        assert body["active_until"] is not None

        current = client.get(f"/api/subscriptions/clubs/{club['id']}").json()
        assert current["current_plan"] == "starter"

        assert client.put(f"/api/subscriptions/clubs/{club['id']}/cancel").status_code == 400

    def test_nothing_to_cancel(self, client, club):
        assert client.put(f"/api/subscriptions/clubs/{club['id']}/cancel").status_code == 400


class TestUsage:
    def test_usage_counts(self, client, paid_club, db):
        club_id = paid_club["id"]
        db.seed("facilities", {"club_id": club_id, "name": "Halle"})
        db.seed("members", {"club_id": club_id, "first_name": "A", "last_name": "B", "status": "active"})
        usage = client.get(f"/api/subscriptions/clubs/{club_id}/usage").json()
        assert usage["member_count"] == 1
        assert usage["member_limit"] == 500
        assert usage["remaining_members"] == 499
        assert usage["facility_count"] == 1

    def test_member_cannot_read(self, client, club, db, roles, current_user):
        add_membership(db, roles, club["id"], "user-2")
        current_user["id"] = "user-2"
        assert client.get(f"/api/subscriptions/clubs/{club['id']}/usage").status_code == 403
