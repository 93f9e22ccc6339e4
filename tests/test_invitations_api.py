"""API tests for email invitations"""
from datetime import timedelta
from unittest.mock import patch

import pytest

from clubflow.core.timeutils import utcnow
from clubflow.modules.invitations.service import InvitationService


@pytest.fixture
def sent(client, club, roles, db):
    """Invitation for invitee@example.com as trainer; returns (response body, token)"""
    with patch("clubflow.modules.invitations.routes.send_invitation_email") as send:
        response = client.post(f"/api/clubs/{club['id']}/invitations", json={
            "email": "Invitee@Example.com",
            "role_id": roles["trainer"]["id"],
            "personal_message": "Willkommen!",
        })
    assert response.status_code == 201
    assert send.call_count == 1
    return response.json(), db.rows("email_invitations")[0]["token"]


class TestSendInvitation:
    def test_email_is_queued(self, sent, db):
        body, token = sent
        assert body["email_queued"] is True
        assert body["invitation"]["email"] == "invitee@example.com"
        assert "token" not in body["invitation"]
        assert len(token) == 64
        assert db.rows("activity_logs")[0]["action"] == "user_invited"

    def test_duplicate_pending_rejected(self, client, club, sent):
        response = client.post(f"/api/clubs/{club['id']}/invitations", json={"email": "invitee@example.com"})
        assert response.status_code == 400

    def test_existing_member_rejected(self, client, club, roles, db):
        db.seed("user_profiles", {"id": "user-1", "email": "admin@example.com"})
        response = client.post(f"/api/clubs/{club['id']}/invitations", json={"email": "admin@example.com"})
        assert response.status_code == 400

    def test_unknown_role(self, client, club, roles):
        response = client.post(
            f"/api/clubs/{club['id']}/invitations", json={"email": "x@example.com", "role_id": 999}
        )
        assert response.status_code == 400


class TestAcceptInvitation:
    def test_public_details(self, client, sent):
        _, token = sent
        details = client.get(f"/api/invitations/{token}").json()
        assert details["club_name"] == "SV Teststadt"
        assert details["role_name"] == "Trainer"
        assert details["is_existing_user"] is False

    def test_accept_creates_membership(self, client, sent, current_user, db, roles):
        _, token = sent
        current_user.update({"id": "user-9", "email": "invitee@example.com"})
        response = client.post(f"/api/invitations/{token}/accept")
        assert response.status_code == 200

        membership = [m for m in db.rows("club_memberships") if m["user_id"] == "user-9"][0]
        assert membership["status"] == "active"
        assert membership["role_id"] == roles["trainer"]["id"]
        assert db.rows("email_invitations")[0]["status"] == "accepted"

        assert client.post(f"/api/invitations/{token}/accept").status_code == 400

    def test_wrong_email(self, client, sent, current_user):
        _, token = sent
        current_user.update({"id": "user-9", "email": "someone@example.com"})
        assert client.post(f"/api/invitations/{token}/accept").status_code == 403

    def test_expired(self, client, sent, db):
        _, token = sent
        db.rows("email_invitations")[0]["expires_at"] = (utcnow() - timedelta(hours=1)).isoformat()
        assert client.get(f"/api/invitations/{token}").status_code == 410

    def test_unknown_token(self, client):
        assert client.get("/api/invitations/nope").status_code == 404


class TestExpireInvitations:
    def test_only_past_pending(self, db):
        now = utcnow()
        db.seed(
            "email_invitations",
            {"status": "pending", "expires_at": (now - timedelta(days=1)).isoformat()},
            {"status": "pending", "expires_at": (now + timedelta(days=1)).isoformat()},
            {"status": "accepted", "expires_at": (now - timedelta(days=1)).isoformat()},
        )
        assert InvitationService(db).expire_invitations() == 1
        assert [r["status"] for r in db.rows("email_invitations")] == ["expired", "pending", "accepted"]
