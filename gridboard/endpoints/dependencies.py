"""
Dependencies wiring the services to a request's database handle
"""
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from gridboard.database.config import get_db
from gridboard.services.catalog_service import WidgetCatalogService
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.services.dashboard_service import DashboardService
from gridboard.services.layout_service import LayoutService
from gridboard.services.share_service import ShareService


def get_catalog_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> WidgetCatalogService:
    return WidgetCatalogService(db)


def get_dashboard_manager(db: AsyncIOMotorDatabase = Depends(get_db)) -> DashboardManager:
    """Dependency to get a DashboardManager bound to the request's database"""
    return DashboardManager(
        dashboards=DashboardService(db),
        layouts=LayoutService(db),
        shares=ShareService(db),
        catalog=WidgetCatalogService(db),
    )
