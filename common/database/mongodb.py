"""
Generic MongoDB connection manager using Motor.

This module provides async MongoDB connectivity that works with any database.
The connection is owned by the application entry point and handed to the
services that need it, so nothing in the domain code looks up a global
database handle.

Example:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(
        uri="mongodb://localhost:27017",
        database_name="edumate",
    )

    groups = db.db["studygroups"]
    await db.disconnect()
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MongoDB:
    """Generic MongoDB connection manager - works with any database."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None

    async def connect(
        self,
        uri: str,
        database_name: str,
        max_pool_size: int = 50,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """
        Connect to MongoDB and verify the server is reachable.

        Args:
            uri: MongoDB connection string
            database_name: Name of the database to use
            max_pool_size: Maximum connections kept by the driver
            server_selection_timeout_ms: How long to wait for a usable server
        """
        # Mask the URI for logging (hide credentials)
        masked_uri = uri.split("@")[-1] if "@" in uri else uri
        logger.info(f"Connecting to MongoDB: {masked_uri}")
        logger.debug(f"Database name: {database_name}")

        try:
            self._client = AsyncIOMotorClient(
                uri,
                maxPoolSize=max_pool_size,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                tz_aware=True,
            )
            self._database_name = database_name

            await self._client.admin.command("ping")
            logger.info(f"Successfully connected to MongoDB database: {database_name}")
        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
            self._client.close()
            self._client = None
            self._database_name = None
            logger.debug("MongoDB connection closed")

    async def ping(self) -> bool:
        """Return True if the server answers a ping."""
        if not self._client:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get the underlying Motor database instance."""
        if not self._client or not self._database_name:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]
