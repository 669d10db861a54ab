from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from app.config.settings import Settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def connect_to_mongo(settings: Settings) -> AsyncIOMotorClient:
    """Open a client and ping the server; the caller owns the returned client."""
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
    )
    try:
        # Ping the server to check connection
        await client.admin.command("ping")
    except ServerSelectionTimeoutError as err:
        client.close()
        raise ConnectionError(f"Could not connect to MongoDB: {err}") from err
    logger.info(f"Connected to MongoDB database '{settings.DATABASE_NAME}'")
    return client


async def ensure_indexes(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Create the indexes the API relies on (unique emails, geo lookups)."""
    await db[settings.USERS_COLLECTION].create_index("email", unique=True)
    await db[settings.THEATERS_COLLECTION].create_index([("location.geo", "2dsphere")])
    await db[settings.COMMENTS_COLLECTION].create_index("movie_id")
    logger.info("MongoDB indexes verified")


def close_mongo_connection(client: AsyncIOMotorClient | None) -> None:
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")


async def ping(db: AsyncIOMotorDatabase) -> bool:
    try:
        await db.command("ping")
    except PyMongoError as exc:
        logger.warning(f"MongoDB ping failed: {exc}")
        return False
    return True


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the database bound to the app's client."""
    client = getattr(request.app.state, "mongo_client", None)
    if client is None:
        raise RuntimeError("MongoDB client is not initialized, the application has not started.")
    return client[request.app.state.settings.DATABASE_NAME]
