import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from gridboard.core.exceptions import NotFoundException, ValidationException, InternalException
from gridboard.core.logging import logger
from gridboard.models.dashboard import GridConfig, DEFAULT_GRID_CONFIG
from gridboard.utils.mongo import validate_object_id, serialize, utcnow


class DashboardService:
    """Dashboard aggregate: identity, grid config, active flag and version counter"""

    UPDATABLE_FIELDS = ("name", "description", "version", "is_active", "grid_config")

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.dashboards

    async def ensure_indexes(self):
        try:
            await self.collection.create_index("created_by")
            await self.collection.create_index("updated_at")
        except PyMongoError as e:
            logger.error(f"Failed to create dashboard indexes: {e}")
            raise InternalException()

    async def create(
        self,
        name: str,
        owner_id: str,
        description: Optional[str] = None,
        grid_config: Union[GridConfig, Mapping[str, Any], None] = None,
    ) -> dict:
        """
        Create a new dashboard owned by ``owner_id``

        Without a grid config the dashboard gets DEFAULT_GRID_CONFIG; a supplied
        one is stored as given.

        Raises:
            ValidationException: If the name is empty
        """
        if not name or not name.strip():
            raise ValidationException("Dashboard name is required")

        now = utcnow()
        doc = {
            "name": name,
            "description": description,
            "version": 1,
            "is_active": True,
            "grid_config": self._grid_config_document(grid_config),
            "created_by": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
            created = await self.collection.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.error(f"Failed to create dashboard: {e}")
            raise InternalException()

        logger.info(
            "Dashboard created",
            extra={"fields": {"dashboard_id": str(result.inserted_id), "owner_id": owner_id}},
        )
        return serialize(created)

    async def find_by_id(self, dashboard_id: str) -> Optional[dict]:
        oid = validate_object_id(dashboard_id, "dashboard")
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to retrieve dashboard {dashboard_id}: {e}")
            raise InternalException()
        return serialize(doc)

    async def get_by_id(self, dashboard_id: str) -> dict:
        doc = await self.find_by_id(dashboard_id)
        if not doc:
            raise NotFoundException(resource="Dashboard", resource_id=dashboard_id)
        return doc

    async def find_by_ids(self, dashboard_ids: Iterable[str]) -> List[dict]:
        oids = [validate_object_id(d, "dashboard") for d in dashboard_ids]
        if not oids:
            return []
        try:
            cursor = self.collection.find({"_id": {"$in": oids}})
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve dashboards: {e}")
            raise InternalException()
        return [serialize(d) for d in docs]

    async def get_by_owner(self, owner_id: str) -> List[dict]:
        """Dashboards created by ``owner_id``, most recently updated first"""
        try:
            cursor = self.collection.find({"created_by": owner_id}).sort("updated_at", -1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve dashboards of {owner_id}: {e}")
            raise InternalException()
        return [serialize(d) for d in docs]

    async def update(self, dashboard_id: str, data: Union[BaseModel, Mapping[str, Any]]) -> dict:
        """
        Update dashboard metadata

        Only UPDATABLE_FIELDS are written; anything else is ignored. This never
        bumps the version: only layout changes do, through increment_version.
        An explicit version is accepted only when it is not below the stored one.

        Raises:
            ValidationException: If none of the supplied fields may be updated,
                or the supplied version is lower than the stored one
            NotFoundException: If dashboard not found
        """
        oid = validate_object_id(dashboard_id, "dashboard")
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)

        update_data: Dict[str, Any] = {
            k: v for k, v in data.items()
            if k in self.UPDATABLE_FIELDS and (v is not None or k == "description")
        }
        if not update_data:
            raise ValidationException("No valid fields to update")
        if "name" in update_data and not str(update_data["name"]).strip():
            raise ValidationException("Dashboard name cannot be empty")

        if "grid_config" in update_data:
            update_data["grid_config"] = self._grid_config_document(update_data["grid_config"])
        update_data["updated_at"] = utcnow()

        query: Dict[str, Any] = {"_id": oid}
        if "version" in update_data:
            # The counter only moves forward
            query["version"] = {"$lte": update_data["version"]}

        try:
            updated = await self.collection.find_one_and_update(
                query,
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to update dashboard {dashboard_id}: {e}")
            raise InternalException()

        if not updated:
            if "version" in query and await self.find_by_id(dashboard_id):
                raise ValidationException("version cannot be lower than the current version")
            raise NotFoundException(resource="Dashboard", resource_id=dashboard_id)
        return serialize(updated)

    async def increment_version(self, dashboard_id: str) -> dict:
        """
        Add exactly one to the version and stamp updated_at, in one statement.

        Called once per successful layout mutation by the caller; the layout
        store does not call it.
        """
        oid = validate_object_id(dashboard_id, "dashboard")
        try:
            updated = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$inc": {"version": 1}, "$set": {"updated_at": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to increment version of dashboard {dashboard_id}: {e}")
            raise InternalException()

        if not updated:
            raise NotFoundException(resource="Dashboard", resource_id=dashboard_id)
        return serialize(updated)

    async def delete(self, dashboard_id: str) -> bool:
        """Remove the dashboard row only; layouts and shares are the caller's job"""
        oid = validate_object_id(dashboard_id, "dashboard")
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to delete dashboard {dashboard_id}: {e}")
            raise InternalException()
        return result.deleted_count > 0

    @staticmethod
    def _grid_config_document(grid_config: Union[GridConfig, Mapping[str, Any], None]) -> Dict[str, Any]:
        if grid_config is None:
            return copy.deepcopy(DEFAULT_GRID_CONFIG)
        if isinstance(grid_config, GridConfig):
            return grid_config.as_stored()
        try:
            return GridConfig.model_validate(grid_config).as_stored()
        except PydanticValidationError as e:
            raise ValidationException(f"Invalid grid_config: {e.errors()[0]['msg']}")
