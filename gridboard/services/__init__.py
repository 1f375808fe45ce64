"""
Services module - Business logic layer
"""
from .dashboard_service import DashboardService
from .layout_service import LayoutService
from .share_service import ShareService
from .catalog_service import WidgetCatalogService
from .permission_service import PermissionResolver, Access
from .dashboard_manager import DashboardManager

__all__ = [
    "DashboardService",
    "LayoutService",
    "ShareService",
    "WidgetCatalogService",
    "PermissionResolver",
    "Access",
    "DashboardManager",
]
