"""Tests for registration, token resolution, the club switcher list and /auth/me"""
import time
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from clubflow.core.timeutils import utcnow
from clubflow.modules.auth.service import AuthService, TokenUserCache, token_cache
from tests.conftest import add_membership


@pytest.fixture(autouse=True)
def fresh_token_cache():
    token_cache.clear()
    yield
    token_cache.clear()


def auth_client(user=None, error=None):
    supabase = MagicMock()
    if error is not None:
        supabase.auth.get_user.side_effect = error
    else:
        supabase.auth.get_user.return_value = SimpleNamespace(user=user)
    return supabase


class TestGetCurrentUser:
    def test_resolves_and_caches(self):
        user = SimpleNamespace(id="user-7", email="a@example.com", user_metadata=None, app_metadata={"type": "super_user"})
        supabase = auth_client(user)
        service = AuthService(supabase)

        first = service.get_current_user("token-a")
        second = service.get_current_user("token-a")
        assert first == second
        assert first["app_metadata"] == {"type": "super_user"}
        assert first["user_metadata"] == {}
        assert supabase.auth.get_user.call_count == 1

    def test_invalid_token(self):
        service = AuthService(auth_client(error=RuntimeError("JWT expired")))
        with pytest.raises(HTTPException) as exc:
            service.get_current_user("bad")
        assert exc.value.status_code == 401

    def test_logout_drops_cached_user(self):
        user = SimpleNamespace(id="user-7", email="a@example.com", user_metadata={}, app_metadata={})
        supabase = auth_client(user)
        service = AuthService(supabase)
        service.get_current_user("token-a")
        assert service.logout("token-a") is True
        service.get_current_user("token-a")
        assert supabase.auth.get_user.call_count == 2


class TestTokenUserCache:
    def test_expired_entries_are_dropped(self):
        cache = TokenUserCache(ttl=-1)
        cache.put("t", {"id": "x"})
        assert cache.get("t") is None

    def test_full_cache_makes_room_from_expired_entries(self):
        cache = TokenUserCache(ttl=60, max_size=2)
        cache.put("a", {"id": "a"})
        cache.put("b", {"id": "b"})
        with patch("clubflow.modules.auth.service.time.monotonic", return_value=time.monotonic() + 120):
            cache.put("c", {"id": "c"})
            assert cache.get("c") == {"id": "c"}
            assert cache.get("a") is None

    def test_full_cache_skips_new_entries(self):
        cache = TokenUserCache(max_size=1)
        cache.put("a", {"id": "a"})
        cache.put("b", {"id": "b"})
        assert cache.get("a") == {"id": "a"}
        assert cache.get("b") is None


class TestClubAccess:
    def test_lists_active_memberships_only(self, db, roles, club):
        second = db.seed("clubs", {"name": "TC Nachbarort"})[0]
        add_membership(db, roles, second["id"], "user-1", role="trainer")
        third = db.seed("clubs", {"name": "Alt"})[0]
        add_membership(db, roles, third["id"], "user-1", status="inactive")

        access = AuthService(db).list_club_access("user-1")
        assert [(a.club_name, a.role) for a in access] == [
            ("SV Teststadt", "club-administrator"),
            ("TC Nachbarort", "trainer"),
        ]

    def test_no_memberships(self, db):
        assert AuthService(db).list_club_access("nobody") == []

    def test_me(self, client, club, db):
        db.seed("user_profiles", {"id": "user-1", "email": "admin@example.com", "first_name": "Ada"})
        body = client.get("/api/auth/me").json()
        assert body["id"] == "user-1"
        assert body["profile"]["first_name"] == "Ada"
        assert body["is_super_user"] is False
        assert body["clubs"][0]["club_id"] == club["id"]


@pytest.fixture
def sign_up(db):
    """Supabase Auth sign-up on the in-memory client, answering for new-user"""
    db.auth = MagicMock()
    db.auth.sign_up.return_value = SimpleNamespace(
        user=SimpleNamespace(id="new-user", email="neu@example.com"), session=None
    )
    return db.auth.sign_up


class TestRegister:
    def payload(self, **overrides):
        body = {"email": "neu@example.com", "password": "geheim123", "first_name": "Nina"}
        body.update(overrides)
        return body

    def test_plain_registration(self, client, db, sign_up):
        response = client.post("/api/auth/register", json=self.payload())
        assert response.status_code == 201
        assert response.json()["requires_confirmation"] is True
        assert db.rows("user_profiles")[0]["id"] == "new-user"

    def test_unknown_invitation_creates_no_account(self, client, db, sign_up):
        response = client.post("/api/auth/register", json=self.payload(invitation_token="bogus"))
        assert response.status_code == 404
        assert sign_up.call_count == 0
        assert db.rows("user_profiles") == []

    def test_invitation_for_other_email_creates_no_account(self, client, db, club, sign_up):
        db.seed("email_invitations", {
            "club_id": club["id"], "email": "jemand@example.com", "token": "t-1", "status": "pending",
            "expires_at": (utcnow() + timedelta(days=1)).isoformat(),
        })
        response = client.post("/api/auth/register", json=self.payload(invitation_token="t-1"))
        assert response.status_code == 403
        assert sign_up.call_count == 0

    def test_invitation_joins_club(self, client, db, club, roles, sign_up):
        db.seed("email_invitations", {
            "club_id": club["id"], "email": "neu@example.com", "token": "t-2", "status": "pending",
            "role_id": roles["trainer"]["id"], "expires_at": (utcnow() + timedelta(days=1)).isoformat(),
        })
        response = client.post("/api/auth/register", json=self.payload(invitation_token="t-2"))
        assert response.status_code == 201
        assert response.json()["club_id"] == club["id"]
        membership = [m for m in db.rows("club_memberships") if m["user_id"] == "new-user"][0]
        assert membership["status"] == "active"
        assert db.rows("email_invitations")[0]["status"] == "accepted"
