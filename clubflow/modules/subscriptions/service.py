import logging
from datetime import datetime
from supabase import Client
from fastapi import HTTPException, Request
from typing import Any, Dict, List, Optional, Tuple

from clubflow.config.plans_config import MEMBER_LIMITS, PLAN_DISPLAY_NAMES, PLAN_ORDER, get_plan_definitions
from clubflow.core.activity import log_activity
from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_all_data
from clubflow.core.timeutils import add_months, parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.subscriptions.manager import (
    SubscriptionManager, load_subscription_manager, plan_comparison, plan_price,
)
from clubflow.modules.subscriptions.schemas import (
    PlanResponse, PlanComparisonRow, SubscriptionRecord, UsageResponse,
    ClubSubscriptionResponse, PlanChangeRequest, PlanChangeResponse, CancelResponse,
)

logger = logging.getLogger(__name__)


def period_end_for(start: datetime, billing_interval: str) -> datetime:
    return add_months(start, 12 if billing_interval == "yearly" else 1)


class SubscriptionService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def list_plans(self) -> List[PlanResponse]:
        """Active plans from the database; the built-in definitions when none are seeded"""
        try:
            result = self.supabase.table("subscription_plans")\
                .select("*")\
                .eq("is_active", True)\
                .order("sort_order")\
                .execute()
            rows = result.data or get_plan_definitions()
            return [PlanResponse(**p) for p in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def compare_plans(self) -> List[PlanComparisonRow]:
        return [PlanComparisonRow(**row) for row in plan_comparison()]

    def _plan_row(self, plan_type: str) -> Dict[str, Any]:
        plan = first_row(
            self.supabase.table("subscription_plans")
            .select("*")
            .eq("plan_type", plan_type)
            .limit(1)
            .execute()
        )
        if plan:
            return plan
        return next(p for p in get_plan_definitions() if p["plan_type"] == plan_type)

    def _count(self, table: str, club_id: int, **filters) -> int:
        query = self.supabase.table(table).select("id").eq("club_id", club_id)
        for column, value in filters.items():
            query = query.eq(column, value)
        return len(query.execute().data or [])

    def _usage(self, club_id: int, manager: SubscriptionManager) -> UsageResponse:
        subscription = manager.subscription or {}
        period_start = parse_timestamp(subscription.get("current_period_start"))
        messages = self.supabase.table("messages").select("id, created_at").eq("club_id", club_id)
        if period_start:
            messages = messages.gte("created_at", period_start.isoformat())
        return UsageResponse(
            club_id=club_id,
            member_count=manager.member_count,
            member_limit=manager.member_limit(),
            remaining_members=manager.remaining_members(),
            team_count=self._count("teams", club_id),
            facility_count=self._count("facilities", club_id),
            messages_sent=len(messages.execute().data or []),
            period_start=period_start,
            period_end=parse_timestamp(subscription.get("current_period_end")),
        )

    def get_usage(self, club_id: int) -> UsageResponse:
        try:
            return self._usage(club_id, load_subscription_manager(club_id, self.supabase))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_club_subscription(self, club_id: int) -> ClubSubscriptionResponse:
        try:
            manager = load_subscription_manager(club_id, self.supabase)
            current_plan = manager.current_plan()
            plan = manager.plan if manager.plan and manager.plan.get("plan_type") == current_plan \
                else self._plan_row(current_plan)
            return ClubSubscriptionResponse(
                club_id=club_id,
                subscription=SubscriptionRecord(**manager.subscription) if manager.subscription else None,
                plan=PlanResponse(**plan),
                current_plan=current_plan,
                status=manager.status(),
                is_trialing=manager.is_trialing(),
                is_expired=manager.is_expired(),
                features=manager.feature_list(),
                member_limit=manager.member_limit(),
                remaining_members=manager.remaining_members(),
                usage=self._usage(club_id, manager),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _record_usage(self, club_id: int, manager: SubscriptionManager) -> None:
        """Store usage of the period being closed by a plan change"""
        subscription = manager.subscription
        if not subscription:
            return
        usage = self._usage(club_id, manager)
        self.supabase.table("subscription_usage").insert({
            "club_id": club_id,
            "subscription_id": subscription["id"],
            "member_count": usage.member_count,
            "team_count": usage.team_count,
            "facility_count": usage.facility_count,
            "messages_sent": usage.messages_sent,
            "period_start": subscription.get("current_period_start"),
            "period_end": utcnow().isoformat(),
        }).execute()

    def change_plan(
        self,
        club_id: int,
        data: PlanChangeRequest,
        user_id: str,
        request: Optional[Request] = None,
    ) -> Tuple[PlanChangeResponse, str]:
        """
        Move the club to another plan and start a new billing period.

        Downgrades are refused while the club has more active members than
        the target plan allows. Returns the response and the club name.
        """
        try:
            club = first_row(
                self.supabase.table("clubs").select("id, name").eq("id", club_id).limit(1).execute()
            )
            if not club:
                raise HTTPException(status_code=404, detail="Club not found")

            manager = load_subscription_manager(club_id, self.supabase)
            old_plan = manager.current_plan()
            new_plan = data.plan_type
            current_interval = (manager.subscription or {}).get("billing_interval")
            if new_plan == old_plan and data.billing_interval == current_interval and not manager.is_expired():
                raise HTTPException(status_code=400, detail=f"Club is already on the {new_plan} plan")
            if PLAN_ORDER.index(new_plan) < PLAN_ORDER.index(old_plan) and not manager.can_downgrade(new_plan):
                raise HTTPException(
                    status_code=400,
                    detail={
                        "error": "Too many active members for the selected plan",
                        "member_count": manager.member_count,
                        "member_limit": MEMBER_LIMITS[new_plan],
                    },
                )

            plan = self._plan_row(new_plan)
            if plan.get("id") is None:
                raise HTTPException(status_code=400, detail=f"Plan {new_plan} is not set up")

            metadata = None
            if data.reason:
                is_upgrade = PLAN_ORDER.index(new_plan) >= PLAN_ORDER.index(old_plan)
                metadata = {"upgrade_reason" if is_upgrade else "downgrade_reason": data.reason}

            now = utcnow()
            row = {
                "plan_id": plan["id"],
                "plan_type": new_plan,
                "status": "active",
                "billing_interval": data.billing_interval,
                "current_period_start": now.isoformat(),
                "current_period_end": period_end_for(now, data.billing_interval).isoformat(),
                "canceled_at": None,
                "metadata": metadata,
                "updated_at": now.isoformat(),
            }
            if manager.subscription:
                self._record_usage(club_id, manager)
                result = self.supabase.table("club_subscriptions")\
                    .update(row)\
                    .eq("id", manager.subscription["id"])\
                    .execute()
            else:
                row["club_id"] = club_id
                result = self.supabase.table("club_subscriptions").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update subscription")

            invalidate_all_data(self.cache, club_id)
            log_activity(
                self.supabase, club_id, user_id, "subscription_changed",
                f"Plan changed from {PLAN_DISPLAY_NAMES[old_plan]} to {PLAN_DISPLAY_NAMES[new_plan]}",
                target_resource="subscription",
                target_resource_id=result.data[0]["id"],
                metadata={"old_plan": old_plan, "new_plan": new_plan, "billing_interval": data.billing_interval},
                request=request,
            )
            logger.info(f"Club {club_id} changed plan {old_plan} -> {new_plan} ({data.billing_interval})")
            response = PlanChangeResponse(
                message=f"Plan changed to {PLAN_DISPLAY_NAMES[new_plan]}",
                old_plan=old_plan,
                new_plan=new_plan,
                price=plan_price(new_plan, data.billing_interval),
                subscription=SubscriptionRecord(**result.data[0]),
            )
            return response, club["name"]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cancel_subscription(
        self,
        club_id: int,
        user_id: str,
        reason: Optional[str] = None,
        request: Optional[Request] = None,
    ) -> CancelResponse:
        """Cancel at period end; the plan stays in force until current_period_end"""
        try:
            manager = load_subscription_manager(club_id, self.supabase)
            subscription = manager.subscription
            if not subscription or manager.status() in ("cancelled", "expired"):
                raise HTTPException(status_code=400, detail="No active subscription to cancel")
            now = utcnow().isoformat()
            result = self.supabase.table("club_subscriptions")\
                .update({
                    "status": "cancelled",
                    "canceled_at": now,
                    "metadata": {"cancel_reason": reason} if reason else subscription.get("metadata"),
                    "updated_at": now,
                })\
                .eq("id", subscription["id"])\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to cancel subscription")
            invalidate_all_data(self.cache, club_id)
            log_activity(
                self.supabase, club_id, user_id, "subscription_cancelled",
                "Subscription cancelled",
                target_resource="subscription",
                target_resource_id=subscription["id"],
                request=request,
            )
            record = SubscriptionRecord(**result.data[0])
            return CancelResponse(
                message="Subscription cancelled",
                active_until=record.current_period_end,
                subscription=record,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
