"""
Layout service - ordered widget placements of a dashboard
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from gridboard.core.exceptions import (
    NotFoundException,
    ValidationException,
    InternalException,
    TransactionException,
)
from gridboard.core.logging import logger
from gridboard.database.transaction import transaction
from gridboard.models.layout import LayoutConfig
from gridboard.schemas.layout import LayoutPositionUpdate
from gridboard.utils.mongo import validate_object_id, serialize, utcnow


# Rendering order. _id breaks ties between rows created in the same instant.
LAYOUT_SORT = [("display_order", 1), ("created_at", 1), ("_id", 1)]


class LayoutService:
    """Service class for the placements that make up a dashboard's rendered layout"""

    UPDATABLE_FIELDS = ("layout_config", "instance_config", "display_order")

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.dashboard_layouts

    async def ensure_indexes(self):
        """Create necessary indexes for the layouts collection"""
        try:
            await self.collection.create_index([("dashboard_id", 1)] + LAYOUT_SORT)
            await self.collection.create_index("widget_definition_id")
        except PyMongoError as e:
            logger.error(f"Failed to create layout indexes: {e}")
            raise InternalException()

    async def create(
        self,
        dashboard_id: str,
        widget_definition_id: str,
        layout_config: Union[LayoutConfig, Mapping[str, Any], None] = None,
        instance_config: Optional[Dict[str, Any]] = None,
        display_order: int = 0,
    ) -> dict:
        """
        Place a widget definition on a dashboard

        layout_config is merged key by key over DEFAULT_LAYOUT_CONFIG.
        instance_config is stored untouched ({} when omitted).
        """
        now = utcnow()
        doc = {
            "dashboard_id": dashboard_id,
            "widget_definition_id": widget_definition_id,
            "layout_config": self._layout_config(layout_config).merge_over_defaults(),
            "instance_config": instance_config if instance_config is not None else {},
            "display_order": display_order or 0,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
            created = await self.collection.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.error(f"Failed to create layout on dashboard {dashboard_id}: {e}")
            raise InternalException()
        return serialize(created)

    async def get_by_id(self, layout_id: str) -> dict:
        """
        Raises:
            NotFoundException: If layout not found
        """
        oid = validate_object_id(layout_id, "layout")
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to retrieve layout {layout_id}: {e}")
            raise InternalException()
        if not doc:
            raise NotFoundException(resource="Layout", resource_id=layout_id)
        return serialize(doc)

    async def find_by_dashboard(self, dashboard_id: str) -> List[dict]:
        """
        All placements of a dashboard in rendering order: display_order, then
        creation time. Repeated calls without writes in between return the
        same sequence.
        """
        try:
            cursor = self.collection.find({"dashboard_id": dashboard_id}).sort(LAYOUT_SORT)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve layouts of dashboard {dashboard_id}: {e}")
            raise InternalException()
        return [serialize(d) for d in docs]

    async def update(self, layout_id: str, data: Union[BaseModel, Mapping[str, Any]]) -> dict:
        """
        Update a placement

        Unlike create, layout_config and instance_config replace the stored
        objects as a whole.

        Raises:
            ValidationException: If no updatable field is supplied
            NotFoundException: If layout not found
        """
        oid = validate_object_id(layout_id, "layout")
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True, by_alias=True)

        update_data: Dict[str, Any] = {
            k: v for k, v in data.items() if k in self.UPDATABLE_FIELDS and v is not None
        }
        if not update_data:
            raise ValidationException("No valid fields to update")
        if "layout_config" in update_data:
            update_data["layout_config"] = self._layout_config(update_data["layout_config"]).as_stored()
        update_data["updated_at"] = utcnow()

        try:
            updated = await self.collection.find_one_and_update(
                {"_id": oid}, {"$set": update_data}, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            logger.error(f"Failed to update layout {layout_id}: {e}")
            raise InternalException()
        if not updated:
            raise NotFoundException(resource="Layout", resource_id=layout_id)
        return serialize(updated)

    async def delete(self, layout_id: str) -> bool:
        oid = validate_object_id(layout_id, "layout")
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to delete layout {layout_id}: {e}")
            raise InternalException()
        return result.deleted_count > 0

    async def delete_by_dashboard(self, dashboard_id: str) -> int:
        try:
            result = await self.collection.delete_many({"dashboard_id": dashboard_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete layouts of dashboard {dashboard_id}: {e}")
            raise InternalException()
        return result.deleted_count

    async def bulk_update(
        self, dashboard_id: str, entries: Sequence[Union[LayoutPositionUpdate, Mapping[str, Any]]]
    ) -> List[dict]:
        """
        Reposition several placements in one all-or-nothing unit of work

        Each entry only matches a row that has both its id and ``dashboard_id``;
        entries matching nothing are skipped, so the result can be shorter than
        the batch. layout_config always replaces the stored one, while
        instance_config and display_order keep their stored value when absent.

        Raises:
            BadRequestException: If an entry id is malformed (nothing is written)
            TransactionException: If any update fails; every row is rolled back
        """
        batch = [self._position_update(entry) for entry in entries]
        statements = [(validate_object_id(entry.id, "layout"), self._bulk_set(entry)) for entry in batch]

        updated: List[dict] = []
        try:
            async with transaction(self.db) as session:
                for oid, set_fields in statements:
                    doc = await self.collection.find_one_and_update(
                        {"_id": oid, "dashboard_id": dashboard_id},
                        {"$set": set_fields},
                        return_document=ReturnDocument.AFTER,
                        session=session,
                    )
                    if doc is None:
                        logger.debug(f"Layout {oid} is not on dashboard {dashboard_id}, skipped")
                        continue
                    updated.append(serialize(doc))
        except Exception as e:
            logger.error(
                f"Bulk layout update rolled back: {e}",
                extra={"fields": {"dashboard_id": dashboard_id, "batch_size": len(statements)}},
            )
            raise TransactionException("Layout update failed; no layout was changed") from e

        logger.info(
            "Bulk layout update committed",
            extra={"fields": {
                "dashboard_id": dashboard_id,
                "batch_size": len(statements),
                "updated": len(updated),
            }},
        )
        return updated

    @staticmethod
    def _bulk_set(entry: LayoutPositionUpdate) -> Dict[str, Any]:
        set_fields: Dict[str, Any] = {
            "layout_config": entry.layout_config.as_stored(),
            "updated_at": utcnow(),
        }
        if entry.instance_config is not None:
            set_fields["instance_config"] = entry.instance_config
        if entry.display_order is not None:
            set_fields["display_order"] = entry.display_order
        return set_fields

    @staticmethod
    def _position_update(entry: Union[LayoutPositionUpdate, Mapping[str, Any]]) -> LayoutPositionUpdate:
        if isinstance(entry, LayoutPositionUpdate):
            return entry
        try:
            return LayoutPositionUpdate.model_validate(entry)
        except ValueError as e:
            raise ValidationException(f"Invalid layout entry: {e}")

    @staticmethod
    def _layout_config(layout_config: Union[LayoutConfig, Mapping[str, Any], None]) -> LayoutConfig:
        if layout_config is None:
            return LayoutConfig()
        if isinstance(layout_config, LayoutConfig):
            return layout_config
        try:
            return LayoutConfig.model_validate(layout_config)
        except ValueError as e:
            raise ValidationException(f"Invalid layout_config: {e}")
