from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime

from clubflow.config.permissions_config import PERMISSION_MATRIX

_KNOWN_PERMISSIONS = {p["name"] for p in PERMISSION_MATRIX["permissions"]}


class RoleUpdate(BaseModel):
    display_name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("permissions")
    @classmethod
    def permissions_must_exist(cls, value):
        if value is None:
            return value
        unknown = sorted(set(value) - _KNOWN_PERMISSIONS)
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}")
        return sorted(set(value))


class RoleResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    permissions: List[str] = []
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PermissionResponse(BaseModel):
    name: str
    resource: str
    action: str
    description: str
