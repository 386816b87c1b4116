"""
SettlementRepository - Stores payments members report having made.

Records are never removed; undo flips is_deleted so history stays auditable.
"""

from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId

from quicksplit.models.settlement import SettlementRecord


class SettlementRepository:
    """Repository for recorded settlements."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.settlements

    async def create(self, record: SettlementRecord) -> SettlementRecord:
        """Insert a record and return it with its database id."""
        result = await self.collection.insert_one(record.model_dump(by_alias=True))
        record.id = result.inserted_id
        return record

    async def get(self, record_id: str) -> Optional[SettlementRecord]:
        """Get a single non-deleted record, None for unknown or malformed ids."""
        if not ObjectId.is_valid(record_id):
            return None

        doc = await self.collection.find_one({"_id": ObjectId(record_id), "is_deleted": False})
        if not doc:
            return None
        return SettlementRecord(**doc)

    async def list_for_group(self, group_id: str) -> List[SettlementRecord]:
        """All live records for a group, newest first."""
        cursor = self.collection.find({
            "group_id": group_id,
            "is_deleted": False
        }).sort("created_at", -1)
        return [SettlementRecord(**doc) async for doc in cursor]

    async def soft_delete(self, record_id: str) -> bool:
        if not ObjectId.is_valid(record_id):
            return False

        result = await self.collection.update_one(
            {"_id": ObjectId(record_id), "is_deleted": False},
            {
                "$set": {
                    "is_deleted": True,
                    "updated_at": datetime.now(timezone.utc)
                }
            }
        )
        return result.modified_count == 1
