"""
Share service - time-bounded permission grants on dashboards
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from gridboard.core.exceptions import NotFoundException, ValidationException, InternalException
from gridboard.core.logging import logger
from gridboard.models.share import Rank, is_share_active
from gridboard.utils.mongo import validate_object_id, serialize, utcnow, as_naive_utc


class ShareService:
    """
    Registry of share grants from dashboard owners to other users.

    Expired grants are kept in the collection and only filtered out on read.
    Nothing stops several grants from existing for the same dashboard/user
    pair; readers decide how to combine them.
    """

    UPDATABLE_FIELDS = ("permission_level", "expires_at")

    def __init__(self, db: AsyncIOMotorDatabase, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.collection = db.dashboard_shares
        self.clock = clock

    async def ensure_indexes(self):
        try:
            await self.collection.create_index([("dashboard_id", 1), ("user_id", 1)])
            await self.collection.create_index("user_id")
        except PyMongoError as e:
            logger.error(f"Failed to create share indexes: {e}")
            raise InternalException()

    async def create(
        self,
        dashboard_id: str,
        user_id: str,
        permission_level: Union[Rank, str],
        shared_by: str,
        expires_at: Optional[datetime] = None,
    ) -> dict:
        """
        Record a grant

        Raises:
            ValidationException: If user or permission level is missing or unknown
        """
        if not user_id:
            raise ValidationException("user_id is required")
        rank = self._to_rank(permission_level)

        doc = {
            "dashboard_id": dashboard_id,
            "user_id": user_id,
            "permission_level": rank.label,
            "shared_by": shared_by,
            "shared_at": utcnow(),
            "expires_at": as_naive_utc(expires_at),
        }
        try:
            result = await self.collection.insert_one(doc)
            created = await self.collection.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.error(f"Failed to share dashboard {dashboard_id}: {e}")
            raise InternalException()

        logger.info(
            "Dashboard shared",
            extra={"fields": {
                "dashboard_id": dashboard_id,
                "user_id": user_id,
                "permission_level": rank.label,
                "shared_by": shared_by,
            }},
        )
        return serialize(created)

    async def get_by_id(self, share_id: str) -> dict:
        oid = validate_object_id(share_id, "share")
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to retrieve share {share_id}: {e}")
            raise InternalException()
        if not doc:
            raise NotFoundException(resource="Share", resource_id=share_id)
        return serialize(doc)

    async def find_for_pair(self, dashboard_id: str, user_id: str) -> List[dict]:
        """Every grant row for the pair, expired ones included"""
        return await self._find({"dashboard_id": dashboard_id, "user_id": user_id}, active_only=False)

    async def find_by_dashboard(self, dashboard_id: str, active_only: bool = True) -> List[dict]:
        return await self._find({"dashboard_id": dashboard_id}, active_only=active_only)

    async def find_by_user(self, user_id: str, active_only: bool = True) -> List[dict]:
        return await self._find({"user_id": user_id}, active_only=active_only)

    async def update(self, share_id: str, data: Union[BaseModel, Mapping[str, Any]]) -> dict:
        """
        Change the level or the expiry of a grant

        Raises:
            ValidationException: If neither permission_level nor expires_at is supplied
            NotFoundException: If share not found
        """
        oid = validate_object_id(share_id, "share")
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)

        update_data: Dict[str, Any] = {k: v for k, v in data.items() if k in self.UPDATABLE_FIELDS}
        if not update_data:
            raise ValidationException("No valid fields to update")
        if "permission_level" in update_data:
            update_data["permission_level"] = self._to_rank(update_data["permission_level"]).label
        if "expires_at" in update_data:
            update_data["expires_at"] = as_naive_utc(update_data["expires_at"])

        try:
            updated = await self.collection.find_one_and_update(
                {"_id": oid}, {"$set": update_data}, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            logger.error(f"Failed to update share {share_id}: {e}")
            raise InternalException()
        if not updated:
            raise NotFoundException(resource="Share", resource_id=share_id)
        return serialize(updated)

    async def delete(self, share_id: str) -> bool:
        oid = validate_object_id(share_id, "share")
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Failed to delete share {share_id}: {e}")
            raise InternalException()
        return result.deleted_count > 0

    async def revoke(self, dashboard_id: str, user_id: str) -> int:
        """Remove every grant of ``user_id`` on the dashboard. Returns how many rows went."""
        try:
            result = await self.collection.delete_many({"dashboard_id": dashboard_id, "user_id": user_id})
        except PyMongoError as e:
            logger.error(f"Failed to revoke access of {user_id} on {dashboard_id}: {e}")
            raise InternalException()
        logger.info(
            "Dashboard access revoked",
            extra={"fields": {"dashboard_id": dashboard_id, "user_id": user_id, "revoked": result.deleted_count}},
        )
        return result.deleted_count

    async def delete_by_dashboard(self, dashboard_id: str) -> int:
        try:
            result = await self.collection.delete_many({"dashboard_id": dashboard_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete shares of dashboard {dashboard_id}: {e}")
            raise InternalException()
        return result.deleted_count

    async def _find(self, query: dict, active_only: bool) -> List[dict]:
        try:
            cursor = self.collection.find(query).sort([("shared_at", -1), ("_id", -1)])
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve shares: {e}")
            raise InternalException()
        if active_only:
            now = self.clock()
            docs = [d for d in docs if is_share_active(d, now)]
        return [serialize(d) for d in docs]

    @staticmethod
    def _to_rank(permission_level: Union[Rank, str, None]) -> Rank:
        if isinstance(permission_level, Rank):
            return permission_level
        if not permission_level:
            raise ValidationException("permission_level is required")
        try:
            return Rank.from_label(permission_level)
        except ValueError as e:
            raise ValidationException(str(e))
