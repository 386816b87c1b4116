import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from quicksplit.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""
    
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]
    
    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Group history, newest first
    await mongodb.db["settlements"].create_index([("group_id", 1), ("created_at", -1)])
    await mongodb.db["settlements"].create_index("from_user_id")
    await mongodb.db["settlements"].create_index("to_user_id")
