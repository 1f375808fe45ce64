"""
Layout endpoints - widget placements of a dashboard
"""
from typing import List
from fastapi import APIRouter, Depends, Request, Response, status

from gridboard.core.config import settings
from gridboard.schemas.layout import (
    BulkLayoutResponse,
    BulkLayoutUpdate,
    LayoutCreate,
    LayoutResponse,
    LayoutUpdate,
)
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.endpoints.dependencies import get_dashboard_manager
from gridboard.middleware.authentication import get_current_user
from gridboard.middleware.rate_limiter import limiter

router = APIRouter()


@router.get(
    "/dashboards/{dashboard_id}/layouts",
    response_model=List[LayoutResponse],
    summary="Get dashboard layouts",
    description="All placements ordered by display_order, then creation time. Requires view."
)
async def list_layouts(
    dashboard_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.list_layouts(dashboard_id, user)


@router.post(
    "/dashboards/{dashboard_id}/layouts",
    response_model=LayoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add widget to dashboard",
    description="Place a widget definition. layout_config is merged over the default geometry. Requires edit."
)
async def add_layout(
    dashboard_id: str,
    layout: LayoutCreate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.add_layout(dashboard_id, layout, user)


@router.put(
    "/dashboards/{dashboard_id}/layouts/bulk",
    response_model=BulkLayoutResponse,
    summary="Bulk update layouts",
    description=(
        "Reposition several placements in one transaction. Entries whose id is not on "
        "this dashboard are skipped. Requires edit."
    )
)
@limiter.limit(settings.RATE_LIMIT_BULK)
async def bulk_update_layouts(
    request: Request,
    response: Response,
    dashboard_id: str,
    body: BulkLayoutUpdate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.bulk_update_layouts(dashboard_id, body.layouts, user)


@router.get(
    "/dashboards/{dashboard_id}/layouts/{layout_id}",
    response_model=LayoutResponse,
    summary="Get layout by ID",
)
async def get_layout(
    dashboard_id: str,
    layout_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.get_layout(dashboard_id, layout_id, user)


@router.put(
    "/dashboards/{dashboard_id}/layouts/{layout_id}",
    response_model=LayoutResponse,
    summary="Update layout",
    description="layout_config and instance_config replace the stored objects. Requires edit."
)
async def update_layout(
    dashboard_id: str,
    layout_id: str,
    layout: LayoutUpdate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.update_layout(dashboard_id, layout_id, layout, user)


@router.delete(
    "/dashboards/{dashboard_id}/layouts/{layout_id}",
    status_code=status.HTTP_200_OK,
    summary="Remove widget from dashboard",
)
async def remove_layout(
    dashboard_id: str,
    layout_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.remove_layout(dashboard_id, layout_id, user)
