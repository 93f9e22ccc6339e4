"""Tests for plan rules: feature flags, member limits and plan moves"""
from datetime import datetime, timedelta, timezone

from clubflow.config.plans_config import PLAN_FEATURES, get_plan_definitions, required_plan_for
from clubflow.modules.subscriptions.manager import SubscriptionManager, plan_comparison, plan_price
from clubflow.modules.subscriptions.service import period_end_for

NOW = datetime(2026, 5, 1, 12, tzinfo=timezone.utc)


def manager(plan_type=None, status="active", period_end=None, member_count=0):
    subscription = None
    if plan_type:
        subscription = {
            "id": 1,
            "status": status,
            "current_period_end": (period_end or NOW + timedelta(days=20)).isoformat(),
        }
    plan = {"plan_type": plan_type} if plan_type else None
    return SubscriptionManager(subscription, plan, member_count, now=NOW)


class TestCurrentPlan:
    def test_no_subscription_is_free(self):
        m = manager()
        assert m.current_plan() == "free"
        assert m.status() == "inactive"

    def test_active_subscription(self):
        assert manager("starter").current_plan() == "starter"

    def test_expired_status_falls_back_to_free(self):
        m = manager("professional", status="expired")
        assert m.is_expired()
        assert m.current_plan() == "free"

    def test_past_period_end_falls_back_to_free(self):
        m = manager("professional", period_end=NOW - timedelta(minutes=1))
        assert m.current_plan() == "free"

    def test_cancelled_subscription_stays_until_period_end(self):
        assert manager("starter", status="cancelled").current_plan() == "starter"

    def test_trialing(self):
        assert manager("starter", status="trialing").is_trialing()


class TestFeaturesAndLimits:
    def test_free_plan_features(self):
        m = manager()
        assert m.has_feature("basicManagement")
        assert not m.has_feature("facilityBooking")
        assert m.feature_list() == ["basicManagement"]

    def test_enterprise_has_everything(self):
        m = manager("enterprise")
        assert all(m.has_feature(f) for f in PLAN_FEATURES["enterprise"])
        assert m.member_limit() is None
        assert m.can_add_members(10_000)
        assert m.remaining_members() is None

    def test_member_limit(self):
        m = manager(member_count=50)
        assert m.member_limit() == 50
        assert not m.can_add_members()
        assert m.remaining_members() == 0

    def test_downgrade_blocked_by_member_count(self):
        m = manager("professional", member_count=200)
        assert not m.can_downgrade("starter")
        assert manager("professional", member_count=100).can_downgrade("starter")
        assert not m.can_downgrade("enterprise")

    def test_upgrade(self):
        assert manager("starter").can_upgrade("professional")
        assert not manager("starter").can_upgrade("free")

    def test_denied_detail(self):
        detail = manager().feature_denied_detail("financialReports")
        assert detail["current_plan"] == "free"
        assert detail["required_plan"] == "starter"
        assert detail["upgrade_url"] == "/subscription"


class TestPlanConfig:
    def test_required_plan(self):
        assert required_plan_for("basicManagement") == "free"
        assert required_plan_for("apiAccess") == "professional"
        assert required_plan_for("whiteLabel") == "enterprise"

    def test_definitions_in_order(self):
        definitions = get_plan_definitions()
        assert [d["plan_type"] for d in definitions] == ["free", "starter", "professional", "enterprise"]
        assert definitions[0]["member_limit"] == 50

    def test_comparison_rows(self):
        rows = {r["feature"]: r for r in plan_comparison()}
        assert rows["teamManagement"]["free"] is False
        assert rows["teamManagement"]["starter"] is True

    def test_price(self):
        assert plan_price("starter", "monthly") == 19
        assert plan_price("starter", "yearly") == 190

    def test_period_end(self):
        assert period_end_for(datetime(2026, 1, 31), "monthly") == datetime(2026, 2, 28)
        assert period_end_for(datetime(2026, 1, 31), "yearly") == datetime(2027, 1, 31)
