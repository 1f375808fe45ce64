from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime

from gridboard.models.dashboard import GridConfig
from gridboard.schemas.layout import LayoutCreate, LayoutResponse


class DashboardCreate(BaseModel):
    # created_by is not sent by the client; it comes from the authenticated user
    name: str = Field(..., description="Dashboard name")
    description: Optional[str] = None
    grid_config: Optional[GridConfig] = None
    widgets: Optional[List[LayoutCreate]] = Field(
        None, description="Initial placements, ordered by their position in this list"
    )
    model_config = ConfigDict(populate_by_name=True)


class DashboardUpdate(BaseModel):
    # created_by is immutable; unknown keys are dropped
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    grid_config: Optional[GridConfig] = None
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DashboardDuplicate(BaseModel):
    name: Optional[str] = None


class DashboardResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    version: int
    is_active: bool
    grid_config: Dict[str, Any]
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    permission: Optional[str] = Field(None, description='"owner" or the caller\'s share rank')
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class DashboardDetailResponse(DashboardResponse):
    layouts: List[LayoutResponse] = Field(default_factory=list)


class PermissionResponse(BaseModel):
    dashboard_id: str
    user_id: str
    permission: Optional[str] = None
    rank: Optional[int] = None
