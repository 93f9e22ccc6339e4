"""
Plan rules for a single club: feature flags, member limits and plan moves.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase import Client

from clubflow.config.plans_config import (
    DEFAULT_PLAN, FEATURES, MEMBER_LIMITS, PLAN_FEATURES, PLAN_ORDER, PLAN_PRICING,
    required_plan_for,
)
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row

logger = logging.getLogger(__name__)


class SubscriptionManager:
    def __init__(
        self,
        subscription: Optional[Dict[str, Any]] = None,
        plan: Optional[Dict[str, Any]] = None,
        member_count: int = 0,
        now: Optional[datetime] = None,
    ):
        self.subscription = subscription
        self.plan = plan
        self.member_count = member_count
        self._now = now

    def now(self) -> datetime:
        return self._now or utcnow()

    def current_plan(self) -> str:
        """Plan type in force; an expired subscription falls back to the free plan."""
        if self.is_expired():
            return DEFAULT_PLAN
        if self.plan and self.plan.get("plan_type") in PLAN_FEATURES:
            return self.plan["plan_type"]
        return DEFAULT_PLAN

    def status(self) -> str:
        if not self.subscription:
            return "inactive"
        return self.subscription.get("status") or "inactive"

    def is_trialing(self) -> bool:
        return self.status() == "trialing"

    def is_expired(self) -> bool:
        if self.status() == "expired":
            return True
        period_end = parse_timestamp((self.subscription or {}).get("current_period_end"))
        return period_end is not None and period_end < self.now()

    def has_feature(self, feature: str) -> bool:
        return bool(PLAN_FEATURES[self.current_plan()].get(feature, False))

    def member_limit(self) -> Optional[int]:
        return MEMBER_LIMITS[self.current_plan()]

    def can_add_members(self, count: int = 1) -> bool:
        limit = self.member_limit()
        if limit is None:
            return True
        return self.member_count + count <= limit

    def remaining_members(self) -> Optional[int]:
        limit = self.member_limit()
        if limit is None:
            return None
        return max(0, limit - self.member_count)

    def can_upgrade(self, target_plan: str) -> bool:
        return PLAN_ORDER.index(target_plan) > PLAN_ORDER.index(self.current_plan())

    def can_downgrade(self, target_plan: str) -> bool:
        if PLAN_ORDER.index(target_plan) >= PLAN_ORDER.index(self.current_plan()):
            return False
        limit = MEMBER_LIMITS[target_plan]
        return limit is None or self.member_count <= limit

    def feature_list(self) -> List[str]:
        return [feature for feature, enabled in PLAN_FEATURES[self.current_plan()].items() if enabled]

    def feature_denied_detail(self, feature: str) -> Dict[str, Any]:
        return {
            "error": f"Feature '{feature}' is not available on your current plan",
            "feature": feature,
            "current_plan": self.current_plan(),
            "required_plan": required_plan_for(feature),
            "upgrade_url": "/subscription",
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "current_plan": self.current_plan(),
            "status": self.status(),
            "is_trialing": self.is_trialing(),
            "is_expired": self.is_expired(),
            "member_count": self.member_count,
            "member_limit": self.member_limit(),
            "remaining_members": self.remaining_members(),
            "features": self.feature_list(),
        }


def plan_comparison() -> List[Dict[str, Any]]:
    """One row per feature with its availability on every plan."""
    rows = []
    for feature, label in FEATURES.items():
        row = {"feature": feature, "label": label}
        for plan_type in PLAN_ORDER:
            row[plan_type] = PLAN_FEATURES[plan_type][feature]
        rows.append(row)
    return rows


def plan_price(plan_type: str, billing_interval: str) -> int:
    return PLAN_PRICING[plan_type]["yearly" if billing_interval == "yearly" else "monthly"]


def load_subscription_manager(club_id: int, supabase: Client) -> SubscriptionManager:
    """Build a manager from the club's subscription, plan and active member count."""
    subscription = first_row(
        supabase.table("club_subscriptions")
        .select("*")
        .eq("club_id", club_id)
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    plan = None
    if subscription and subscription.get("plan_id") is not None:
        plan = first_row(
            supabase.table("subscription_plans")
            .select("*")
            .eq("id", subscription["plan_id"])
            .limit(1)
            .execute()
        )
    members = supabase.table("members")\
        .select("id")\
        .eq("club_id", club_id)\
        .eq("status", "active")\
        .execute()
    return SubscriptionManager(subscription, plan, len(members.data or []))


def log_feature_denial(
    supabase: Client,
    club_id: int,
    feature: str,
    manager: SubscriptionManager,
    user_id: Optional[str] = None,
) -> None:
    """Record a blocked feature access in feature_access_log; failures are only logged."""
    try:
        supabase.table("feature_access_log").insert({
            "club_id": club_id,
            "feature_name": feature,
            "user_id": user_id,
            "accessed_at": utcnow().isoformat(),
            "metadata": {
                "result": "denied",
                "reason": f"plan {manager.current_plan()} lacks {feature}",
            },
        }).execute()
    except Exception as e:
        logger.warning(f"Failed to log feature denial for club {club_id}: {e}")
