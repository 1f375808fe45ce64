from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Query, status

from gridboard.schemas.dashboard import (
    DashboardCreate,
    DashboardDetailResponse,
    DashboardDuplicate,
    DashboardResponse,
    DashboardUpdate,
    PermissionResponse,
)
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.endpoints.dependencies import get_dashboard_manager
from gridboard.middleware.authentication import get_current_user

router = APIRouter()


@router.get("/dashboards", response_model=List[DashboardResponse])
async def list_dashboards(
    include_shared: bool = Query(True, description="Also return dashboards shared with the caller"),
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """
    List the caller's dashboards

    Each dashboard carries the caller's permission: "owner" or the share rank.
    """
    return await manager.list_dashboards(user, include_shared=include_shared)


@router.get("/dashboards/{dashboard_id}", response_model=DashboardDetailResponse)
async def get_dashboard(
    dashboard_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Dashboard with its layouts in rendering order. Requires view."""
    return await manager.get_dashboard(dashboard_id, user)


@router.post("/dashboards", response_model=DashboardDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_dashboard(
    dashboard: DashboardCreate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """
    Create a new dashboard

    The caller becomes the owner; created_by is never taken from the body.
    """
    return await manager.create_dashboard(dashboard, user)


@router.put("/dashboards/{dashboard_id}", response_model=DashboardResponse)
async def update_dashboard(
    dashboard_id: str,
    dashboard: DashboardUpdate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """
    Update dashboard metadata (name, description, version, is_active, grid_config)

    Requires edit. Other fields in the body are ignored.
    """
    return await manager.update_dashboard(dashboard_id, dashboard, user)


@router.delete("/dashboards/{dashboard_id}", status_code=status.HTTP_200_OK)
async def delete_dashboard(
    dashboard_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Delete a dashboard, its layouts and its shares. Owner or elevated role only."""
    return await manager.delete_dashboard(dashboard_id, user)


@router.post(
    "/dashboards/{dashboard_id}/duplicate",
    response_model=DashboardDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_dashboard(
    dashboard_id: str,
    body: Optional[DashboardDuplicate] = Body(None),
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Copy grid config and every layout into a new dashboard owned by the caller"""
    name = body.name if body else None
    return await manager.duplicate_dashboard(dashboard_id, user, name=name)


@router.get("/dashboards/{dashboard_id}/permission", response_model=PermissionResponse)
async def get_permission(
    dashboard_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Effective permission of the caller on the dashboard"""
    return await manager.check_permission(dashboard_id, user)
