"""
Widget catalog service - widget types and widget definitions

The dashboard core only reads from the catalog. Removal is refused while
something still points at the entry being removed.
"""
from typing import Dict, Iterable, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from gridboard.core.exceptions import (
    BadRequestException,
    NotFoundException,
    ForbiddenException,
    ConflictException,
    InternalException,
    ValidationException,
)
from gridboard.core.logging import logger
from gridboard.database.transaction import transaction
from gridboard.schemas.widget import (
    WidgetTypeCreate,
    WidgetTypeUpdate,
    WidgetDefinitionCreate,
    WidgetDefinitionUpdate,
)
from gridboard.utils.mongo import validate_object_id, serialize, utcnow

TYPE_UPDATABLE_FIELDS = {"name", "component_name", "default_config"}
DEFINITION_UPDATABLE_FIELDS = {"name", "description", "widget_type_id", "data_source_config"}


class WidgetCatalogService:
    """Service class for the widget type/definition catalog"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.types = db.widget_types
        self.definitions = db.widget_definitions
        self.layouts = db.dashboard_layouts

    async def ensure_indexes(self):
        try:
            await self.types.create_index("name", unique=True)
            await self.definitions.create_index("widget_type_id")
            await self.definitions.create_index("created_by")
        except PyMongoError as e:
            logger.error(f"Failed to create catalog indexes: {e}")
            raise InternalException()

    # ==================== Widget types ====================

    async def list_types(self) -> List[dict]:
        try:
            docs = await self.types.find().sort("name", 1).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve widget types: {e}")
            raise InternalException()
        return [serialize(d) for d in docs]

    async def find_type(self, widget_type_id: str) -> Optional[dict]:
        oid = validate_object_id(widget_type_id, "widget type")
        try:
            return serialize(await self.types.find_one({"_id": oid}))
        except PyMongoError as e:
            logger.error(f"Failed to retrieve widget type {widget_type_id}: {e}")
            raise InternalException()

    async def get_type(self, widget_type_id: str) -> dict:
        doc = await self.find_type(widget_type_id)
        if not doc:
            raise NotFoundException(resource="Widget type", resource_id=widget_type_id)
        return doc

    async def create_type(self, data: WidgetTypeCreate, is_elevated: bool = False) -> dict:
        """
        Register a widget type

        Raises:
            ForbiddenException: If the caller is not elevated
            ConflictException: If a type with the same name exists
        """
        if not is_elevated:
            raise ForbiddenException("Only admins can create widget types")

        try:
            if await self.types.find_one({"name": data.name}):
                raise ConflictException("Widget type with this name already exists")
            doc = {**data.model_dump(), "created_at": utcnow()}
            result = await self.types.insert_one(doc)
            created = await self.types.find_one({"_id": result.inserted_id})
        except DuplicateKeyError:
            raise ConflictException("Widget type with this name already exists")
        except PyMongoError as e:
            logger.error(f"Failed to create widget type: {e}")
            raise InternalException()

        logger.info(f"Widget type created: {data.name}")
        return serialize(created)

    async def update_type(self, widget_type_id: str, data: WidgetTypeUpdate, is_elevated: bool = False) -> dict:
        """
        Rename or reconfigure a widget type

        Only name, component_name and default_config can change.

        Raises:
            ForbiddenException: If the caller is not elevated
            NotFoundException: If the type does not exist
            ConflictException: If another type already has the new name
            ValidationException: If nothing updatable was supplied
        """
        if not is_elevated:
            raise ForbiddenException("Only admins can update widget types")
        oid = validate_object_id(widget_type_id, "widget type")

        update_data = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if k in TYPE_UPDATABLE_FIELDS and v is not None
        }
        if not update_data:
            raise ValidationException("No valid fields to update")

        try:
            if "name" in update_data and await self.types.find_one(
                {"name": update_data["name"], "_id": {"$ne": oid}}
            ):
                raise ConflictException("Widget type with this name already exists")
            updated = await self.types.find_one_and_update(
                {"_id": oid}, {"$set": update_data}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise ConflictException("Widget type with this name already exists")
        except PyMongoError as e:
            logger.error(f"Failed to update widget type {widget_type_id}: {e}")
            raise InternalException()

        if not updated:
            raise NotFoundException(resource="Widget type", resource_id=widget_type_id)
        logger.info(f"Widget type updated: {widget_type_id}")
        return serialize(updated)

    async def delete_type(self, widget_type_id: str, is_elevated: bool = False) -> dict:
        """
        Raises:
            ForbiddenException: If the caller is not elevated
            ConflictException: If widget definitions still use the type
        """
        if not is_elevated:
            raise ForbiddenException("Only admins can delete widget types")
        existing = await self.get_type(widget_type_id)

        try:
            in_use = await self.definitions.count_documents({"widget_type_id": existing["id"]})
            if in_use:
                raise ConflictException(
                    f"Widget type is used by {in_use} widget definition(s) and cannot be deleted"
                )
            await self.types.delete_one({"_id": validate_object_id(widget_type_id, "widget type")})
        except PyMongoError as e:
            logger.error(f"Failed to delete widget type {widget_type_id}: {e}")
            raise InternalException()
        return {"message": "Widget type deleted successfully", "id": widget_type_id}

    # ==================== Widget definitions ====================

    async def list_definitions(
        self, created_by: Optional[str] = None, widget_type_id: Optional[str] = None
    ) -> List[dict]:
        query = {}
        if created_by:
            query["created_by"] = created_by
        if widget_type_id:
            query["widget_type_id"] = widget_type_id
        try:
            docs = await self.definitions.find(query).sort("created_at", -1).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve widget definitions: {e}")
            raise InternalException()
        return await self._with_type_names([serialize(d) for d in docs])

    async def find_definition(self, definition_id: str) -> Optional[dict]:
        oid = validate_object_id(definition_id, "widget definition")
        try:
            return serialize(await self.definitions.find_one({"_id": oid}))
        except PyMongoError as e:
            logger.error(f"Failed to retrieve widget definition {definition_id}: {e}")
            raise InternalException()

    async def get_definition(self, definition_id: str) -> dict:
        doc = await self.find_definition(definition_id)
        if not doc:
            raise NotFoundException(resource="Widget definition", resource_id=definition_id)
        return (await self._with_type_names([doc]))[0]

    async def create_definition(self, data: WidgetDefinitionCreate, created_by: str) -> dict:
        """
        Raises:
            NotFoundException: If the widget type does not exist
        """
        await self.get_type(data.widget_type_id)

        now = utcnow()
        doc = {**data.model_dump(), "created_by": created_by, "created_at": now, "updated_at": now}
        try:
            result = await self.definitions.insert_one(doc)
            created = await self.definitions.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.error(f"Failed to create widget definition: {e}")
            raise InternalException()
        return (await self._with_type_names([serialize(created)]))[0]

    async def update_definition(
        self, definition_id: str, data: WidgetDefinitionUpdate, user_id: str, is_elevated: bool = False
    ) -> dict:
        """
        Update a widget definition

        Raises:
            NotFoundException: If the definition, or the new widget type, does not exist
            ForbiddenException: If the caller neither created it nor is elevated
            ValidationException: If nothing updatable was supplied
        """
        existing = await self.get_definition(definition_id)
        if not is_elevated and existing.get("created_by") != user_id:
            raise ForbiddenException("You do not have permission to update this widget")

        update_data = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if k in DEFINITION_UPDATABLE_FIELDS and (v is not None or k == "description")
        }
        if not update_data:
            raise ValidationException("No valid fields to update")
        if "widget_type_id" in update_data:
            await self.get_type(update_data["widget_type_id"])
        update_data["updated_at"] = utcnow()

        try:
            updated = await self.definitions.find_one_and_update(
                {"_id": validate_object_id(definition_id, "widget definition")},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to update widget definition {definition_id}: {e}")
            raise InternalException()

        if not updated:
            raise NotFoundException(resource="Widget definition", resource_id=definition_id)
        return (await self._with_type_names([serialize(updated)]))[0]

    async def delete_definition(self, definition_id: str, user_id: str, is_elevated: bool = False) -> dict:
        """
        Delete a definition nobody has placed on a dashboard

        The placement count and the delete share one transaction.

        Raises:
            NotFoundException: If definition not found
            ForbiddenException: If the caller neither created it nor is elevated
            ConflictException: If layouts still reference it
        """
        existing = await self.get_definition(definition_id)
        if not is_elevated and existing.get("created_by") != user_id:
            raise ForbiddenException("You do not have permission to delete this widget")
        oid = validate_object_id(definition_id, "widget definition")

        try:
            async with transaction(self.db) as session:
                in_use = await self.layouts.count_documents(
                    {"widget_definition_id": existing["id"]}, session=session
                )
                if in_use:
                    raise ConflictException(
                        f"Widget definition is placed on {in_use} dashboard layout(s) and cannot be deleted"
                    )
                await self.definitions.delete_one({"_id": oid}, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to delete widget definition {definition_id}: {e}")
            raise InternalException()
        return {"message": "Widget definition deleted successfully", "id": definition_id}

    async def describe(self, definition_ids: Iterable[str]) -> Dict[str, dict]:
        """
        Catalog metadata for placements, keyed by definition id

        Definitions or types that no longer exist are left out.
        """
        oids = []
        for definition_id in set(definition_ids):
            try:
                oids.append(validate_object_id(definition_id, "widget definition"))
            except BadRequestException:
                logger.warning(f"Layout references malformed widget definition id {definition_id}")
        if not oids:
            return {}

        try:
            definitions = await self.definitions.find({"_id": {"$in": oids}}).to_list(length=None)
            type_oids = [validate_object_id(d["widget_type_id"], "widget type") for d in definitions]
            types = await self.types.find({"_id": {"$in": type_oids}}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to describe widget definitions: {e}")
            raise InternalException()

        types_by_id = {str(t["_id"]): t for t in types}
        described = {}
        for definition in definitions:
            widget_type = types_by_id.get(definition["widget_type_id"], {})
            described[str(definition["_id"])] = {
                "widget_name": definition.get("name"),
                "widget_description": definition.get("description"),
                "data_source_config": definition.get("data_source_config", {}),
                "widget_type_name": widget_type.get("name"),
                "component_name": widget_type.get("component_name"),
                "widget_default_config": widget_type.get("default_config"),
            }
        return described

    async def _with_type_names(self, definitions: List[dict]) -> List[dict]:
        type_ids = {d["widget_type_id"] for d in definitions if d.get("widget_type_id")}
        if not type_ids:
            return definitions
        try:
            oids = [validate_object_id(t, "widget type") for t in type_ids]
            types = await self.types.find({"_id": {"$in": oids}}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve widget types: {e}")
            raise InternalException()
        types_by_id = {str(t["_id"]): t for t in types}
        for definition in definitions:
            widget_type = types_by_id.get(definition.get("widget_type_id"), {})
            definition["widget_type_name"] = widget_type.get("name")
            definition["component_name"] = widget_type.get("component_name")
        return definitions
