"""
Pydantic schemas for dashboard shares
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

PermissionLevel = Literal["view", "edit", "admin"]


class ShareCreate(BaseModel):
    """Grant a user access to a dashboard"""
    user_id: str = Field(..., min_length=1, description="User receiving the grant")
    permission_level: PermissionLevel = Field(..., description="view < edit < admin")
    expires_at: Optional[datetime] = Field(None, description="Null means the grant never expires")
    model_config = ConfigDict(populate_by_name=True)


class ShareUpdate(BaseModel):
    permission_level: Optional[PermissionLevel] = None
    expires_at: Optional[datetime] = None
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ShareResponse(BaseModel):
    id: str
    dashboard_id: str
    user_id: str
    permission_level: PermissionLevel
    shared_by: str
    shared_at: datetime
    expires_at: Optional[datetime] = None
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class RevokeResponse(BaseModel):
    message: str
    dashboard_id: str
    user_id: str
    revoked: int
