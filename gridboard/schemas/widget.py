"""
Pydantic schemas for the widget catalog (types and definitions)
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Any, Dict, Optional


class WidgetTypeCreate(BaseModel):
    """Schema for registering a renderable widget type"""
    name: str = Field(..., min_length=1, max_length=100, description="Unique type name")
    component_name: str = Field(..., min_length=1, description="Frontend component identifier")
    default_config: Dict[str, Any] = Field(default_factory=dict)
    model_config = ConfigDict(populate_by_name=True)


class WidgetTypeUpdate(BaseModel):
    """Admins only. Omitted fields keep their stored value."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    component_name: Optional[str] = Field(None, min_length=1)
    default_config: Optional[Dict[str, Any]] = None
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WidgetTypeResponse(BaseModel):
    id: str
    name: str
    component_name: str
    default_config: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class WidgetDefinitionCreate(BaseModel):
    """Schema for a configured instance of a widget type"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    widget_type_id: str = Field(..., description="Widget type identifier")
    data_source_config: Dict[str, Any] = Field(default_factory=dict)
    model_config = ConfigDict(populate_by_name=True)


class WidgetDefinitionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    widget_type_id: Optional[str] = Field(None, description="Must reference an existing widget type")
    data_source_config: Optional[Dict[str, Any]] = None
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WidgetDefinitionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    widget_type_id: str
    data_source_config: Dict[str, Any] = Field(default_factory=dict)
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    widget_type_name: Optional[str] = None
    component_name: Optional[str] = None
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "507f1f77bcf86cd799439011",
                "name": "Open incidents",
                "widget_type_id": "507f191e810c19729de860ea",
                "data_source_config": {"endpoint": "/api/incidents/count"},
                "created_by": "user123",
                "created_at": "2024-01-01T00:00:00",
            }
        }
    )
