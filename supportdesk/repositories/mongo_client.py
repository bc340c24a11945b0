"""MongoDB Client - Connection, collection setup and health"""
from typing import Any, Dict
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import CollectionInvalid, OperationFailure

from ..config.settings import Settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

TICKETS = "tickets"
MESSAGES = "messages"
PROFILES = "profiles"


def create_mongo_client(settings: Settings) -> AsyncIOMotorClient:
    """
    Create an async MongoDB client.

    The client is owned by the application container; nothing in the
    process holds it globally.
    """
    logger.info(f"Creating async MongoDB client for: {settings.mongo_uri}")
    return AsyncIOMotorClient(
        settings.mongo_uri,
        tz_aware=True,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
        socketTimeoutMS=30000,
    )


async def prepare_database(db: AsyncIOMotorDatabase) -> None:
    """Create collections and indexes, and enable change-stream pre-images on tickets"""
    logger.info("Preparing MongoDB collections...")

    try:
        await db.create_collection(TICKETS)
    except CollectionInvalid:
        pass

    # Pre-images give change events a well-formed previous state
    try:
        await db.command("collMod", TICKETS, changeStreamPreAndPostImages={"enabled": True})
    except OperationFailure as e:
        logger.warning(f"Could not enable change stream pre-images on {TICKETS}: {e}")

    tickets = db[TICKETS]
    await tickets.create_index("ticket_id", unique=True)
    await tickets.create_index([("customer_id", ASCENDING), ("created_at", DESCENDING)])
    await tickets.create_index("status")
    await tickets.create_index("assigned_to")

    messages = db[MESSAGES]
    await messages.create_index("message_id", unique=True)
    await messages.create_index([("ticket_id", ASCENDING), ("created_at", ASCENDING)])

    profiles = db[PROFILES]
    await profiles.create_index("user_id", unique=True)
    await profiles.create_index("email", unique=True)
    await profiles.create_index("role")

    logger.info("MongoDB collections prepared")


async def health_check(client: AsyncIOMotorClient, db_name: str) -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        await client.admin.command("ping")
        return {
            "status": "healthy",
            "database": db_name,
            "connection": "ok"
        }
    except Exception as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": db_name,
            "error": str(e)
        }
