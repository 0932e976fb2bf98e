"""
MongoDB connection using Motor (async driver).
Includes detailed logging and comprehensive error handling.

The manager is created and owned by the application; stores receive the
collections they work on instead of reaching for a process-wide connection.
"""

from typing import Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConnectionFailure, PyMongoError

from core.config import Settings, get_settings
from core.errors import PersistenceError
from core.logger import logger


def mask_url(url: str) -> str:
    """
    Hide the password of a MongoDB URL for logging.

    Args:
        url: Connection URL, possibly with ``user:password@`` credentials

    Returns:
        URL with the password replaced by ``****``
    """
    if "@" not in url or "://" not in url:
        return url

    credentials, host = url.rsplit("@", 1)
    protocol, user_info = credentials.split("://", 1)
    if ":" not in user_info:
        return url

    user = user_info.split(":", 1)[0]
    return f"{protocol}://{user}:****@{host}"


class MongoDB:
    """MongoDB connection manager with async support."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize MongoDB connection manager.

        Args:
            settings: Application settings, defaults to the cached settings
        """
        self.settings = settings or get_settings()
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None
        logger.debug("MongoDB connection manager initialized")

    async def connect(self) -> None:
        """
        Establish connection to MongoDB.

        Raises:
            PersistenceError: If the server cannot be reached
        """
        settings = self.settings
        url = settings.mongodb_connection_url

        try:
            logger.info(f"📝 Connecting to MongoDB: {mask_url(url)}")
            logger.debug(f"Database name: {settings.mongodb_database}")

            self.client = AsyncIOMotorClient(
                url,
                maxPoolSize=settings.mongodb_max_pool_size,
                minPoolSize=settings.mongodb_min_pool_size,
                serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
                connectTimeoutMS=settings.mongodb_connect_timeout_ms,
            )

            # Test connection with ping
            await self.client.admin.command("ping")

            self.db = self.client[settings.mongodb_database]

            logger.info(f"✅ Connected to MongoDB database: {settings.mongodb_database}")
            logger.debug(
                f"Connection pool: min={settings.mongodb_min_pool_size}, "
                f"max={settings.mongodb_max_pool_size}"
            )

        except PyMongoError as e:
            logger.error(f"❌ Failed to connect to MongoDB: {e}")
            if self.client is not None:
                self.client.close()
            self.client = None
            self.db = None
            raise PersistenceError(f"Could not connect to MongoDB: {e}", backend_error=e) from e

    async def disconnect(self) -> None:
        """
        Close MongoDB connection.

        Safe to call even if not connected.
        """
        if self.client is None:
            logger.debug("MongoDB client not initialized, nothing to disconnect")
            return

        logger.info("📝 Disconnecting from MongoDB...")
        self.client.close()
        self.client = None
        self.db = None
        logger.info("✅ Disconnected from MongoDB")

    @property
    def is_connected(self) -> bool:
        return self.db is not None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        Get the connected database.

        Raises:
            RuntimeError: If database is not connected
        """
        if self.db is None:
            error_msg = "Database not connected. Call connect() first."
            logger.error(f"❌ {error_msg}")
            raise RuntimeError(error_msg)
        return self.db

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Get a MongoDB collection.

        Args:
            collection_name: Name of the collection to access

        Returns:
            Motor collection handle

        Raises:
            RuntimeError: If database is not connected
        """
        collection = self.database[collection_name]
        logger.debug(f"🔍 Accessed collection: {collection_name}")
        return collection

    async def health_check(self) -> bool:
        """
        Check if MongoDB connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        if self.client is None:
            logger.warning("⚠️ MongoDB client not initialized")
            return False

        try:
            await self.client.admin.command("ping")
            logger.debug("✅ MongoDB health check passed")
            return True

        except ConnectionFailure as e:
            logger.error(f"❌ MongoDB health check failed - connection error: {e}")
            return False

        except PyMongoError as e:
            logger.error(f"❌ MongoDB health check failed: {e}")
            return False

    async def __aenter__(self) -> "MongoDB":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
