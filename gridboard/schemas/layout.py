"""
Pydantic schemas for dashboard layouts (widget placements)
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from gridboard.models.layout import LayoutConfig


class LayoutCreate(BaseModel):
    """Place a widget definition on a dashboard"""
    widget_definition_id: str = Field(..., min_length=1, description="Widget definition to place")
    layout_config: Optional[LayoutConfig] = Field(
        None, description="Geometry, merged over the default placement"
    )
    instance_config: Optional[Dict[str, Any]] = Field(
        None, description="Per-placement override object, stored as-is"
    )
    display_order: int = Field(0, description="Position in the rendered order")
    model_config = ConfigDict(populate_by_name=True)


class LayoutUpdate(BaseModel):
    """Update a placement. Objects sent here replace the stored ones wholesale."""
    layout_config: Optional[LayoutConfig] = None
    instance_config: Optional[Dict[str, Any]] = None
    display_order: Optional[int] = None
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LayoutPositionUpdate(BaseModel):
    """One entry of a bulk reposition batch"""
    id: str = Field(..., description="Layout identifier")
    layout_config: LayoutConfig = Field(..., description="Complete geometry, replaces the stored one")
    instance_config: Optional[Dict[str, Any]] = Field(None, description="Kept unchanged when omitted")
    display_order: Optional[int] = Field(None, description="Kept unchanged when omitted")
    model_config = ConfigDict(populate_by_name=True)


class BulkLayoutUpdate(BaseModel):
    layouts: List[LayoutPositionUpdate]


class LayoutResponse(BaseModel):
    """Placement with the catalog metadata needed to render it"""
    id: str
    dashboard_id: str
    widget_definition_id: str
    layout_config: Dict[str, Any]
    instance_config: Dict[str, Any] = Field(default_factory=dict)
    display_order: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    widget_name: Optional[str] = None
    widget_description: Optional[str] = None
    widget_type_name: Optional[str] = None
    component_name: Optional[str] = None
    data_source_config: Optional[Dict[str, Any]] = None
    widget_default_config: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "507f1f77bcf86cd799439011",
                "dashboard_id": "507f191e810c19729de860ea",
                "widget_definition_id": "507f191e810c19729de860eb",
                "layout_config": {"x": 0, "y": 0, "w": 6, "h": 2, "minW": 2, "minH": 1, "static": False},
                "instance_config": {},
                "display_order": 0,
                "created_at": "2024-01-01T00:00:00",
                "updated_at": "2024-01-01T00:00:00",
                "widget_name": "Open incidents",
                "widget_type_name": "counter",
                "component_name": "CounterWidget",
            }
        }
    )


class BulkLayoutResponse(BaseModel):
    layouts: List[LayoutResponse]
    count: int
    version: int
