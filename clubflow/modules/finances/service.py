import logging
from datetime import date
from supabase import Client
from fastapi import HTTPException
from typing import Dict, List, Optional, Type

from pydantic import BaseModel

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_entity_data
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.finances.schemas import (
    FinanceCreate, FinanceUpdate, FinanceResponse, FinanceSummary,
    MemberFeeResponse, TrainingFeeResponse,
)

logger = logging.getLogger(__name__)


def summarize_finances(rows: List[dict]) -> FinanceSummary:
    """
    Totals over finance rows.

    income and expenses only count paid entries; pending and overdue are
    the open amounts regardless of type. Cancelled and inactive rows are
    ignored.
    """
    income = expenses = pending = overdue = 0.0
    pending_count = overdue_count = 0
    by_category: Dict[str, float] = {}
    for row in rows:
        if row.get("status") == "cancelled" or row.get("is_active") is False:
            continue
        amount = float(row.get("amount") or 0)
        status = row.get("status")
        if status == "paid":
            if row.get("type") == "income":
                income += amount
            else:
                expenses += amount
            signed = amount if row.get("type") == "income" else -amount
            category = row.get("category") or "other"
            by_category[category] = round(by_category.get(category, 0.0) + signed, 2)
        elif status == "pending":
            pending += amount
            pending_count += 1
        elif status == "overdue":
            overdue += amount
            overdue_count += 1
    return FinanceSummary(
        income=round(income, 2),
        expenses=round(expenses, 2),
        balance=round(income - expenses, 2),
        pending=round(pending, 2),
        pending_count=pending_count,
        overdue=round(overdue, 2),
        overdue_count=overdue_count,
        by_category=by_category,
    )


class FinanceService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def list_finances(
        self,
        club_id: int,
        type: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[FinanceResponse]:
        try:
            query = self.supabase.table("finances").select("*").eq("club_id", club_id)
            if type:
                query = query.eq("type", type)
            if status:
                query = query.eq("status", status)
            if date_from:
                query = query.gte("date", date_from.isoformat())
            if date_to:
                query = query.lte("date", date_to.isoformat())
            result = query.order("date", desc=True).execute()
            return [FinanceResponse(**f) for f in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_finance(self, club_id: int, finance_id: int) -> FinanceResponse:
        try:
            finance = first_row(
                self.supabase.table("finances")
                .select("*")
                .eq("id", finance_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not finance:
                raise HTTPException(status_code=404, detail="Finance entry not found")
            return FinanceResponse(**finance)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_finance(self, club_id: int, finance_data: FinanceCreate) -> FinanceResponse:
        try:
            row = finance_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            result = self.supabase.table("finances").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create finance entry")
            invalidate_entity_data(self.cache, club_id, "finances")
            logger.info(f"Finance entry {result.data[0]['id']} created in club {club_id}")
            return FinanceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_finance(self, club_id: int, finance_id: int, finance_data: FinanceUpdate) -> FinanceResponse:
        try:
            update_data = finance_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("finances")\
                .update(update_data)\
                .eq("id", finance_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Finance entry not found")
            invalidate_entity_data(self.cache, club_id, "finances")
            return FinanceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_finance(self, club_id: int, finance_id: int) -> bool:
        try:
            self.get_finance(club_id, finance_id)
            self.supabase.table("finances").delete().eq("id", finance_id).eq("club_id", club_id).execute()
            invalidate_entity_data(self.cache, club_id, "finances")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_summary(
        self,
        club_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> FinanceSummary:
        try:
            query = self.supabase.table("finances")\
                .select("type, category, amount, status, is_active, date")\
                .eq("club_id", club_id)
            if date_from:
                query = query.gte("date", date_from.isoformat())
            if date_to:
                query = query.lte("date", date_to.isoformat())
            return summarize_finances(query.execute().data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_overdue(self, today: Optional[date] = None) -> int:
        """Flag pending entries whose due date has passed; returns how many changed"""
        today = today or utcnow().date()
        result = self.supabase.table("finances")\
            .update({"status": "overdue", "updated_at": utcnow().isoformat()})\
            .eq("status", "pending")\
            .lt("due_date", today.isoformat())\
            .execute()
        rows = result.data or []
        for club_id in {row["club_id"] for row in rows}:
            invalidate_entity_data(self.cache, club_id, "finances")
        if rows:
            logger.info(f"Marked {len(rows)} finance entries as overdue")
        return len(rows)


class FeeService:
    """CRUD over one of the fee definition tables (member_fees, training_fees)"""

    def __init__(
        self,
        supabase: Client,
        table: str,
        response_model: Type[BaseModel],
        label: str,
        cache: Optional[MemoryCache] = None,
    ):
        self.supabase = supabase
        self.table = table
        self.response_model = response_model
        self.label = label
        self.cache = cache or get_cache()

    def list_fees(self, club_id: int, status: Optional[str] = None) -> List[BaseModel]:
        try:
            query = self.supabase.table(self.table).select("*").eq("club_id", club_id)
            if status:
                query = query.eq("status", status)
            result = query.order("start_date", desc=True).execute()
            return [self.response_model(**f) for f in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_fee(self, club_id: int, fee_id: int) -> BaseModel:
        try:
            fee = first_row(
                self.supabase.table(self.table)
                .select("*")
                .eq("id", fee_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not fee:
                raise HTTPException(status_code=404, detail=f"{self.label} not found")
            return self.response_model(**fee)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_fee(self, club_id: int, fee_data: BaseModel) -> BaseModel:
        try:
            row = fee_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            if self.table == "member_fees":
                member = first_row(
                    self.supabase.table("members")
                    .select("id")
                    .eq("id", row["member_id"])
                    .eq("club_id", club_id)
                    .limit(1)
                    .execute()
                )
                if not member:
                    raise HTTPException(status_code=404, detail="Member not found in this club")
            result = self.supabase.table(self.table).insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail=f"Failed to create {self.label.lower()}")
            invalidate_entity_data(self.cache, club_id, "finances")
            return self.response_model(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_fee(self, club_id: int, fee_id: int, fee_data: BaseModel) -> BaseModel:
        try:
            update_data = fee_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table(self.table)\
                .update(update_data)\
                .eq("id", fee_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail=f"{self.label} not found")
            invalidate_entity_data(self.cache, club_id, "finances")
            return self.response_model(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_fee(self, club_id: int, fee_id: int) -> bool:
        try:
            self.get_fee(club_id, fee_id)
            self.supabase.table(self.table).delete().eq("id", fee_id).eq("club_id", club_id).execute()
            invalidate_entity_data(self.cache, club_id, "finances")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


def member_fee_service(supabase: Client) -> FeeService:
    return FeeService(supabase, "member_fees", MemberFeeResponse, "Member fee")


def training_fee_service(supabase: Client) -> FeeService:
    return FeeService(supabase, "training_fees", TrainingFeeResponse, "Training fee")
