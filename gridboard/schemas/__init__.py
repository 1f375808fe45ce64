from .dashboard import (
    DashboardCreate, DashboardUpdate, DashboardDuplicate,
    DashboardResponse, DashboardDetailResponse, PermissionResponse,
)
from .layout import (
    LayoutCreate, LayoutUpdate, LayoutPositionUpdate,
    BulkLayoutUpdate, LayoutResponse, BulkLayoutResponse,
)
from .share import ShareCreate, ShareUpdate, ShareResponse, RevokeResponse
from .widget import (
    WidgetTypeCreate, WidgetTypeUpdate, WidgetTypeResponse,
    WidgetDefinitionCreate, WidgetDefinitionUpdate, WidgetDefinitionResponse,
)

__all__ = [
    "DashboardCreate", "DashboardUpdate", "DashboardDuplicate",
    "DashboardResponse", "DashboardDetailResponse", "PermissionResponse",
    "LayoutCreate", "LayoutUpdate", "LayoutPositionUpdate",
    "BulkLayoutUpdate", "LayoutResponse", "BulkLayoutResponse",
    "ShareCreate", "ShareUpdate", "ShareResponse", "RevokeResponse",
    "WidgetTypeCreate", "WidgetTypeUpdate", "WidgetTypeResponse",
    "WidgetDefinitionCreate", "WidgetDefinitionUpdate", "WidgetDefinitionResponse",
]
