"""
Shared fixtures: an in-memory Supabase, an authenticated TestClient and
helpers to seed roles, plans, clubs and memberships.
"""
import pytest
from fastapi.testclient import TestClient

from clubflow.config.permissions_config import PERMISSION_MATRIX
from clubflow.config.plans_config import get_plan_definitions
from clubflow.core.cache import get_cache
from clubflow.core.cache_invalidation import sync_versions
from clubflow.core.dependencies import get_current_user_id
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import get_supabase
from clubflow.main import app
from clubflow.modules.subscriptions.service import period_end_for
from tests.fake_supabase import FakeSupabase

ADMIN_ID = "user-1"
ADMIN_EMAIL = "admin@example.com"


@pytest.fixture(autouse=True)
def clear_caches():
    get_cache().clear()
    sync_versions.clear()
    yield
    get_cache().clear()
    sync_versions.clear()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def current_user():
    """Mutable identity returned by the auth dependency; tests may switch users"""
    return {"id": ADMIN_ID, "email": ADMIN_EMAIL, "app_metadata": {}}


@pytest.fixture
def client(db, current_user):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: dict(current_user)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def roles(db):
    """Seeded club roles keyed by name"""
    rows = {}
    for role in PERMISSION_MATRIX["roles"]:
        rows[role["name"]] = db.seed("roles", dict(role, is_active=True))[0]
    return rows


@pytest.fixture
def plans(db):
    """Seeded subscription plans keyed by plan type"""
    return {p["plan_type"]: db.seed("subscription_plans", p)[0] for p in get_plan_definitions()}


def add_membership(db, roles, club_id, user_id, role="member", status="active"):
    return db.seed("club_memberships", {
        "user_id": user_id,
        "club_id": club_id,
        "role_id": roles[role]["id"],
        "status": status,
    })[0]


def subscribe(db, plans, club_id, plan_type, status="active", period_end=None):
    now = utcnow()
    return db.seed("club_subscriptions", {
        "club_id": club_id,
        "plan_id": plans[plan_type]["id"],
        "plan_type": plan_type,
        "status": status,
        "billing_interval": "monthly",
        "current_period_start": now.isoformat(),
        "current_period_end": (period_end or period_end_for(now, "monthly")).isoformat(),
    })[0]


@pytest.fixture
def club(db, roles):
    """A club where the default user is club-administrator, on no paid plan"""
    club = db.seed("clubs", {"name": "SV Teststadt", "is_public": True})[0]
    add_membership(db, roles, club["id"], ADMIN_ID, role="club-administrator")
    return club


@pytest.fixture
def paid_club(db, club, plans):
    """The same club on the professional plan"""
    subscribe(db, plans, club["id"], "professional")
    return club
