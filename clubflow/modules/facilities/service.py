import logging
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_cross_entity_data
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.facilities.schemas import FacilityCreate, FacilityUpdate, FacilityResponse

logger = logging.getLogger(__name__)


class FacilityService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def list_facilities(self, club_id: int, status: Optional[str] = None) -> List[FacilityResponse]:
        try:
            query = self.supabase.table("facilities").select("*").eq("club_id", club_id)
            if status:
                query = query.eq("status", status)
            result = query.order("name").execute()
            return [FacilityResponse(**f) for f in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_facility(self, club_id: int, facility_id: int) -> FacilityResponse:
        try:
            facility = first_row(
                self.supabase.table("facilities")
                .select("*")
                .eq("id", facility_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not facility:
                raise HTTPException(status_code=404, detail="Facility not found")
            return FacilityResponse(**facility)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_facility(self, club_id: int, facility_data: FacilityCreate) -> FacilityResponse:
        try:
            row = facility_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            result = self.supabase.table("facilities").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create facility")
            invalidate_cross_entity_data(self.cache, club_id, ["facilities", "dashboard"])
            logger.info(f"Facility {result.data[0]['id']} created in club {club_id}")
            return FacilityResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_facility(self, club_id: int, facility_id: int, facility_data: FacilityUpdate) -> FacilityResponse:
        try:
            update_data = facility_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("facilities")\
                .update(update_data)\
                .eq("id", facility_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Facility not found")
            invalidate_cross_entity_data(self.cache, club_id, ["facilities", "dashboard"])
            return FacilityResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_facility(self, club_id: int, facility_id: int) -> bool:
        """Delete a facility; its bookings are cancelled rather than removed"""
        try:
            self.get_facility(club_id, facility_id)
            self.supabase.table("bookings")\
                .update({"status": "cancelled", "updated_at": utcnow().isoformat()})\
                .eq("facility_id", facility_id)\
                .neq("status", "cancelled")\
                .execute()
            self.supabase.table("facilities")\
                .delete()\
                .eq("id", facility_id)\
                .eq("club_id", club_id)\
                .execute()
            invalidate_cross_entity_data(self.cache, club_id, ["facilities", "bookings"])
            logger.info(f"Facility {facility_id} deleted from club {club_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
