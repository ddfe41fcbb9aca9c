"""
MongoDB connection management.
"""
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from pickup_manager.core.config import settings

logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "counters"
INVENTORY_COLLECTION = "inventory"
PICKUP_REQUESTS_COLLECTION = "pickupRequests"
ATTACHMENTS_BUCKET = "attachments"


class MongoDB:
    """
    MongoDB connection manager.
    Provides access to database and collections with connection management.
    The client is only created when the remote store is configured and first used.
    """

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @classmethod
    def connect_to_mongodb(cls):
        """
        Create the client if not already connected.
        Motor connects lazily, so this never blocks on the network.
        """
        if cls.client is None:
            if not settings.remote_configured:
                raise RuntimeError("Remote document store is not configured")

            logger.info(f"Connecting to MongoDB (database: {settings.MONGODB_DB})")

            cls.client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                tz_aware=True,
                serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
            )
            cls.db = cls.client[settings.MONGODB_DB]

    @classmethod
    async def close_mongodb_connection(cls):
        """
        Close MongoDB connection if open.
        """
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Closed MongoDB connection")

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        if cls.db is None:
            cls.connect_to_mongodb()
        return cls.db

    @classmethod
    def get_collection(cls, collection_name: str):
        """
        Get collection by name.

        Args:
            collection_name: Name of collection

        Returns:
            AsyncIOMotorCollection instance
        """
        return cls.get_database()[collection_name]

    @classmethod
    def get_gridfs_bucket(cls) -> AsyncIOMotorGridFSBucket:
        return AsyncIOMotorGridFSBucket(cls.get_database(), bucket_name=ATTACHMENTS_BUCKET)


mongodb = MongoDB()


# Helper functions to get collections
def get_collection(name: str):
    return mongodb.get_collection(name)


def get_counters_collection():
    return get_collection(COUNTERS_COLLECTION)


def get_inventory_collection():
    return get_collection(INVENTORY_COLLECTION)


def get_pickup_requests_collection():
    return get_collection(PICKUP_REQUESTS_COLLECTION)


def get_attachments_bucket():
    return mongodb.get_gridfs_bucket()
