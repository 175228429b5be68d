"""
MongoDB client management
"""

import logging
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from config.settings import (
    MONGO_URI,
    DATABASE_NAME,
    USERS_COLLECTION,
    MONGO_SERVER_SELECTION_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

# Global client, created once at startup
mongo_client = None


class DatabaseConnectionError(RuntimeError):
    """Raised when the database cannot be reached at startup"""


async def init_database():
    """Create the client and verify the server answers a ping"""
    global mongo_client
    mongo_client = AsyncMongoClient(
        MONGO_URI,
        serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
    )

    try:
        await mongo_client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"MongoDB connection error: {e}")
        await mongo_client.close()
        mongo_client = None
        raise DatabaseConnectionError("Could not connect to MongoDB") from e

    logger.info("MongoDB connected successfully")


async def close_database():
    """Close the client"""
    global mongo_client
    if mongo_client is not None:
        await mongo_client.close()
        mongo_client = None
    logger.info("MongoDB connection closed")


def get_database():
    """Get the configured database handle"""
    if mongo_client is None:
        raise DatabaseConnectionError("Database has not been initialized")
    if DATABASE_NAME:
        return mongo_client[DATABASE_NAME]
    return mongo_client.get_default_database(default="test")


def get_users_collection() -> AsyncCollection:
    """FastAPI dependency returning the users collection"""
    return get_database()[USERS_COLLECTION]
