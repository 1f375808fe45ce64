from typing import List
from fastapi import APIRouter, Depends, status

from gridboard.schemas.share import RevokeResponse, ShareCreate, ShareResponse, ShareUpdate
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.endpoints.dependencies import get_dashboard_manager
from gridboard.middleware.authentication import get_current_user

router = APIRouter()


@router.get("/dashboards/{dashboard_id}/shares", response_model=List[ShareResponse])
async def list_shares(
    dashboard_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Active grants on the dashboard. Owner or elevated role only."""
    return await manager.list_shares(dashboard_id, user)


@router.post(
    "/dashboards/{dashboard_id}/shares",
    response_model=ShareResponse,
    status_code=status.HTTP_201_CREATED,
)
async def share_dashboard(
    dashboard_id: str,
    share: ShareCreate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Grant a user view, edit or admin, optionally until expires_at"""
    return await manager.share_dashboard(dashboard_id, share, user)


@router.patch("/dashboards/{dashboard_id}/shares/{share_id}", response_model=ShareResponse)
async def update_share(
    dashboard_id: str,
    share_id: str,
    share: ShareUpdate,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    return await manager.update_share(dashboard_id, share_id, share, user)


@router.delete("/dashboards/{dashboard_id}/shares/users/{user_id}", response_model=RevokeResponse)
async def revoke_share(
    dashboard_id: str,
    user_id: str,
    user: dict = Depends(get_current_user),
    manager: DashboardManager = Depends(get_dashboard_manager)
):
    """Remove every grant the user holds on the dashboard"""
    return await manager.revoke_share(dashboard_id, user_id, user)
