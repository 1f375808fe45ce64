"""
Dashboard manager - the operations exposed to the HTTP layer

Every method authorizes the caller through the PermissionResolver before it
touches the dashboard, its layouts or its shares. Layout writes are followed
by a separate version increment on the dashboard; the two are not one
transaction, so a failure in between leaves the version one behind.
"""
from typing import Dict, List, Optional, Sequence

from gridboard.core.config import settings
from gridboard.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from gridboard.core.logging import logger
from gridboard.models.share import Rank, OWNER_LABEL
from gridboard.schemas.dashboard import DashboardCreate, DashboardUpdate
from gridboard.schemas.layout import LayoutCreate, LayoutUpdate, LayoutPositionUpdate
from gridboard.schemas.share import ShareCreate, ShareUpdate
from gridboard.services.catalog_service import WidgetCatalogService
from gridboard.services.dashboard_service import DashboardService
from gridboard.services.layout_service import LayoutService
from gridboard.services.permission_service import PermissionResolver, best_active_rank
from gridboard.services.share_service import ShareService


def is_elevated(user: dict) -> bool:
    """True when one of the user's roles is in ELEVATED_ROLES"""
    roles = user.get("roles") or []
    return any(role in settings.ELEVATED_ROLES for role in roles)


class DashboardManager:
    def __init__(
        self,
        dashboards: DashboardService,
        layouts: LayoutService,
        shares: ShareService,
        catalog: WidgetCatalogService,
        permissions: Optional[PermissionResolver] = None,
    ):
        self.dashboards = dashboards
        self.layouts = layouts
        self.shares = shares
        self.catalog = catalog
        self.permissions = permissions or PermissionResolver(dashboards, shares)

    async def ensure_indexes(self):
        await self.dashboards.ensure_indexes()
        await self.layouts.ensure_indexes()
        await self.shares.ensure_indexes()
        await self.catalog.ensure_indexes()

    # ==================== Dashboards ====================

    async def list_dashboards(self, user: dict, include_shared: bool = True) -> List[dict]:
        """
        Dashboards the user owns and, optionally, the ones shared with them

        Each entry carries ``permission``: "owner" or the strongest active rank.
        """
        user_id = user["userId"]
        result = {d["id"]: {**d, "permission": OWNER_LABEL} for d in await self.dashboards.get_by_owner(user_id)}

        if include_shared:
            grants_by_dashboard: Dict[str, List[dict]] = {}
            for grant in await self.shares.find_by_user(user_id):
                grants_by_dashboard.setdefault(grant["dashboard_id"], []).append(grant)

            shared_ids = [d for d in grants_by_dashboard if d not in result]
            for dashboard in await self.dashboards.find_by_ids(shared_ids):
                rank = best_active_rank(grants_by_dashboard[dashboard["id"]], self.shares.clock())
                if rank is not None:
                    result[dashboard["id"]] = {**dashboard, "permission": rank.label}

        return sorted(result.values(), key=lambda d: d["updated_at"], reverse=True)

    async def get_dashboard(self, dashboard_id: str, user: dict) -> dict:
        access = await self.permissions.authorize(dashboard_id, user["userId"], Rank.VIEW)
        layouts = await self._describe_layouts(await self.layouts.find_by_dashboard(dashboard_id))
        return {**access.dashboard, "layouts": layouts, "permission": access.label}

    async def create_dashboard(self, data: DashboardCreate, user: dict) -> dict:
        """
        Create a dashboard owned by the caller, with optional initial widgets

        Every initial widget definition is checked before anything is written.
        """
        widgets = data.widgets or []
        for widget in widgets:
            await self.catalog.get_definition(widget.widget_definition_id)

        dashboard = await self.dashboards.create(
            name=data.name,
            owner_id=user["userId"],
            description=data.description,
            grid_config=data.grid_config,
        )
        for position, widget in enumerate(widgets):
            await self.layouts.create(
                dashboard_id=dashboard["id"],
                widget_definition_id=widget.widget_definition_id,
                layout_config=widget.layout_config,
                instance_config=widget.instance_config,
                display_order=position,
            )

        layouts = await self._describe_layouts(await self.layouts.find_by_dashboard(dashboard["id"]))
        return {**dashboard, "layouts": layouts, "permission": OWNER_LABEL}

    async def update_dashboard(self, dashboard_id: str, data: DashboardUpdate, user: dict) -> dict:
        access = await self.permissions.authorize(dashboard_id, user["userId"], Rank.EDIT)
        updated = await self.dashboards.update(dashboard_id, data)
        return {**updated, "permission": access.label}

    async def delete_dashboard(self, dashboard_id: str, user: dict) -> dict:
        """
        Delete a dashboard with its layouts and shares

        The dashboard row goes last so an interrupted delete can be retried.

        Raises:
            ForbiddenException: If the caller is neither the owner nor elevated
        """
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        self._require_owner_or_elevated(dashboard, user, "delete this dashboard")

        removed_layouts = await self.layouts.delete_by_dashboard(dashboard_id)
        removed_shares = await self.shares.delete_by_dashboard(dashboard_id)
        await self.dashboards.delete(dashboard_id)

        logger.info(
            "Dashboard deleted",
            extra={"fields": {
                "dashboard_id": dashboard_id,
                "layouts": removed_layouts,
                "shares": removed_shares,
                "deleted_by": user["userId"],
            }},
        )
        return {"message": "Dashboard deleted successfully", "id": dashboard_id}

    async def duplicate_dashboard(self, dashboard_id: str, user: dict, name: Optional[str] = None) -> dict:
        """Copy a dashboard the caller can view; the caller owns the copy"""
        access = await self.permissions.authorize(dashboard_id, user["userId"], Rank.VIEW)
        original = access.dashboard

        copy = await self.dashboards.create(
            name=name or f"{original['name']}{settings.DASHBOARD_COPY_SUFFIX}",
            owner_id=user["userId"],
            description=original.get("description"),
            grid_config=original.get("grid_config"),
        )
        for layout in await self.layouts.find_by_dashboard(dashboard_id):
            await self.layouts.create(
                dashboard_id=copy["id"],
                widget_definition_id=layout["widget_definition_id"],
                layout_config=layout.get("layout_config"),
                instance_config=layout.get("instance_config"),
                display_order=layout.get("display_order", 0),
            )

        layouts = await self._describe_layouts(await self.layouts.find_by_dashboard(copy["id"]))
        return {**copy, "layouts": layouts, "permission": OWNER_LABEL}

    async def check_permission(self, dashboard_id: str, user: dict) -> dict:
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        rank = await self.permissions.resolve(dashboard_id, user["userId"])
        if dashboard.get("created_by") == user["userId"]:
            label = OWNER_LABEL
        else:
            label = rank.label if rank else None
        return {
            "dashboard_id": dashboard_id,
            "user_id": user["userId"],
            "permission": label,
            "rank": int(rank) if rank else None,
        }

    # ==================== Layouts ====================

    async def list_layouts(self, dashboard_id: str, user: dict) -> List[dict]:
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.VIEW)
        return await self._describe_layouts(await self.layouts.find_by_dashboard(dashboard_id))

    async def get_layout(self, dashboard_id: str, layout_id: str, user: dict) -> dict:
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.VIEW)
        layout = await self._layout_on_dashboard(dashboard_id, layout_id)
        return (await self._describe_layouts([layout]))[0]

    async def add_layout(self, dashboard_id: str, data: LayoutCreate, user: dict) -> dict:
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.EDIT)
        await self.catalog.get_definition(data.widget_definition_id)

        layout = await self.layouts.create(
            dashboard_id=dashboard_id,
            widget_definition_id=data.widget_definition_id,
            layout_config=data.layout_config,
            instance_config=data.instance_config,
            display_order=data.display_order,
        )
        await self.dashboards.increment_version(dashboard_id)
        return (await self._describe_layouts([layout]))[0]

    async def update_layout(self, dashboard_id: str, layout_id: str, data: LayoutUpdate, user: dict) -> dict:
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.EDIT)
        await self._layout_on_dashboard(dashboard_id, layout_id)

        layout = await self.layouts.update(layout_id, data)
        await self.dashboards.increment_version(dashboard_id)
        return (await self._describe_layouts([layout]))[0]

    async def remove_layout(self, dashboard_id: str, layout_id: str, user: dict) -> dict:
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.EDIT)
        await self._layout_on_dashboard(dashboard_id, layout_id)

        await self.layouts.delete(layout_id)
        await self.dashboards.increment_version(dashboard_id)
        return {"message": "Widget removed from dashboard successfully", "id": layout_id}

    async def bulk_update_layouts(
        self, dashboard_id: str, entries: Sequence[LayoutPositionUpdate], user: dict
    ) -> dict:
        """
        Reposition several placements atomically, then bump the version once

        Raises:
            ValidationException: If the batch is larger than MAX_BULK_LAYOUTS
            TransactionException: If the batch failed and was rolled back
        """
        await self.permissions.authorize(dashboard_id, user["userId"], Rank.EDIT)
        if len(entries) > settings.MAX_BULK_LAYOUTS:
            raise ValidationException(f"At most {settings.MAX_BULK_LAYOUTS} layouts can be updated at once")

        updated = await self.layouts.bulk_update(dashboard_id, entries)
        dashboard = await self.dashboards.increment_version(dashboard_id)

        layouts = await self._describe_layouts(updated)
        return {"layouts": layouts, "count": len(layouts), "version": dashboard["version"]}

    # ==================== Shares ====================

    async def list_shares(self, dashboard_id: str, user: dict) -> List[dict]:
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        self._require_owner_or_elevated(dashboard, user, "view sharing settings")
        return await self.shares.find_by_dashboard(dashboard_id)

    async def share_dashboard(self, dashboard_id: str, data: ShareCreate, user: dict) -> dict:
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        self._require_owner_or_elevated(dashboard, user, "share this dashboard")
        return await self.shares.create(
            dashboard_id=dashboard_id,
            user_id=data.user_id,
            permission_level=data.permission_level,
            shared_by=user["userId"],
            expires_at=data.expires_at,
        )

    async def update_share(self, dashboard_id: str, share_id: str, data: ShareUpdate, user: dict) -> dict:
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        self._require_owner_or_elevated(dashboard, user, "change sharing settings")

        share = await self.shares.get_by_id(share_id)
        if share["dashboard_id"] != dashboard_id:
            raise NotFoundException(resource="Share", resource_id=share_id)
        return await self.shares.update(share_id, data)

    async def revoke_share(self, dashboard_id: str, target_user_id: str, user: dict) -> dict:
        dashboard = await self.dashboards.get_by_id(dashboard_id)
        self._require_owner_or_elevated(dashboard, user, "revoke access")

        revoked = await self.shares.revoke(dashboard_id, target_user_id)
        return {
            "message": "Dashboard access revoked successfully",
            "dashboard_id": dashboard_id,
            "user_id": target_user_id,
            "revoked": revoked,
        }

    # ==================== Helpers ====================

    async def _layout_on_dashboard(self, dashboard_id: str, layout_id: str) -> dict:
        layout = await self.layouts.get_by_id(layout_id)
        if layout["dashboard_id"] != dashboard_id:
            raise NotFoundException(resource="Layout", resource_id=layout_id)
        return layout

    async def _describe_layouts(self, layouts: List[dict]) -> List[dict]:
        described = await self.catalog.describe(layout["widget_definition_id"] for layout in layouts)
        return [{**layout, **described.get(layout["widget_definition_id"], {})} for layout in layouts]

    @staticmethod
    def _require_owner_or_elevated(dashboard: dict, user: dict, action: str) -> None:
        if dashboard.get("created_by") == user["userId"] or is_elevated(user):
            return
        logger.warning(f"User {user['userId']} tried to {action} on dashboard {dashboard['id']}")
        raise ForbiddenException(f"Only the dashboard owner can {action}")
