from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.facilities.schemas import FacilityCreate, FacilityUpdate, FacilityResponse
from clubflow.modules.facilities.service import FacilityService
from clubflow.core.dependencies import require_club_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/clubs/{club_id}/facilities", tags=["facilities"])


def get_facility_service(supabase: Client = Depends(get_supabase)) -> FacilityService:
    return FacilityService(supabase)


@router.get("", response_model=List[FacilityResponse])
async def list_facilities(
    club_id: int,
    status: Optional[str] = None,
    user_data: Dict = Depends(require_club_permission("facilities:read")),
    service: FacilityService = Depends(get_facility_service)
):
    return service.list_facilities(club_id, status=status)


@router.post("", response_model=FacilityResponse, status_code=201)
async def create_facility(
    club_id: int,
    facility_data: FacilityCreate,
    user_data: Dict = Depends(require_club_permission("facilities:create")),
    service: FacilityService = Depends(get_facility_service)
):
    return service.create_facility(club_id, facility_data)


@router.get("/{facility_id}", response_model=FacilityResponse)
async def get_facility(
    club_id: int,
    facility_id: int,
    user_data: Dict = Depends(require_club_permission("facilities:read")),
    service: FacilityService = Depends(get_facility_service)
):
    return service.get_facility(club_id, facility_id)


@router.put("/{facility_id}", response_model=FacilityResponse)
async def update_facility(
    club_id: int,
    facility_id: int,
    facility_data: FacilityUpdate,
    user_data: Dict = Depends(require_club_permission("facilities:update")),
    service: FacilityService = Depends(get_facility_service)
):
    return service.update_facility(club_id, facility_id, facility_data)


@router.delete("/{facility_id}", status_code=204)
async def delete_facility(
    club_id: int,
    facility_id: int,
    user_data: Dict = Depends(require_club_permission("facilities:delete")),
    service: FacilityService = Depends(get_facility_service)
):
    service.delete_facility(club_id, facility_id)
    return None
