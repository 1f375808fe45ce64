"""
Permission resolver - what a user may do with a dashboard

Combines dashboard ownership with share grants. Read-only: nothing here
writes, and nothing is cached between calls because grants can expire at
any moment.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from gridboard.core.exceptions import ForbiddenException
from gridboard.core.logging import logger
from gridboard.models.share import Rank, OWNER_LABEL, is_share_active
from gridboard.services.dashboard_service import DashboardService
from gridboard.services.share_service import ShareService
from gridboard.utils.mongo import utcnow


@dataclass(frozen=True)
class Access:
    """Outcome of a successful authorization"""

    dashboard: dict
    rank: Rank
    is_owner: bool

    @property
    def label(self) -> str:
        return OWNER_LABEL if self.is_owner else self.rank.label


class PermissionResolver:
    def __init__(
        self,
        dashboards: DashboardService,
        shares: ShareService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.dashboards = dashboards
        self.shares = shares
        self.clock = clock

    async def resolve(self, dashboard_id: str, user_id: str) -> Optional[Rank]:
        """
        Effective rank of ``user_id`` on the dashboard, None for no access

        Raises:
            NotFoundException: If the dashboard does not exist
        """
        access = await self._resolve(dashboard_id, user_id)
        return access.rank if access else None

    async def authorize(self, dashboard_id: str, user_id: str, required: Rank = Rank.VIEW) -> Access:
        """
        Check that ``user_id`` holds at least ``required`` on the dashboard

        Raises:
            NotFoundException: If the dashboard does not exist (checked first)
            ForbiddenException: If the user has no active grant or a lower one
        """
        access = await self._resolve(dashboard_id, user_id)
        if access is None:
            logger.warning(f"User {user_id} has no access to dashboard {dashboard_id}")
            raise ForbiddenException("You do not have access to this dashboard")
        if access.rank < required:
            logger.warning(
                f"User {user_id} holds {access.rank.label} on dashboard {dashboard_id}, "
                f"{required.label} required"
            )
            raise ForbiddenException("Insufficient permissions")
        return access

    async def _resolve(self, dashboard_id: str, user_id: str) -> Optional[Access]:
        dashboard = await self.dashboards.get_by_id(dashboard_id)

        # Owners are never downgraded by a share row, so shares are not read.
        if dashboard.get("created_by") == user_id:
            return Access(dashboard=dashboard, rank=Rank.ADMIN, is_owner=True)

        grants = await self.shares.find_for_pair(dashboard["id"], user_id)
        rank = best_active_rank(grants, self.clock())
        if rank is None:
            return None
        return Access(dashboard=dashboard, rank=rank, is_owner=False)


def best_active_rank(grants, now: datetime) -> Optional[Rank]:
    """
    Highest rank among the grants that have not expired.

    Several active grants for one pair are allowed by the registry; the
    strongest one wins.
    """
    best: Optional[Rank] = None
    for grant in grants:
        if not is_share_active(grant, now):
            continue
        try:
            rank = Rank.from_label(grant.get("permission_level"))
        except ValueError:
            logger.warning(f"Ignoring share {grant.get('id')} with unknown level {grant.get('permission_level')!r}")
            continue
        if best is None or rank > best:
            best = rank
    return best
