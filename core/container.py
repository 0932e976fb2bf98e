"""
Store container.

Holds the stores built on one MongoDB connection. The application creates it
at startup and passes the stores to whoever needs them.
"""

from dataclasses import dataclass

from core.database import MongoDB
from core.logger import logger
from repositories.task_store import TaskStore
from repositories.user_store import UserStore


@dataclass(frozen=True)
class StoreContainer:
    """Stores sharing a single connection."""

    tasks: TaskStore
    users: UserStore

    @classmethod
    def from_mongodb(cls, mongodb: MongoDB) -> "StoreContainer":
        """
        Build the stores on a connected manager.

        Collection names come from the manager's settings.

        Raises:
            RuntimeError: If the manager is not connected
        """
        settings = mongodb.settings
        container = cls(
            tasks=TaskStore(mongodb.get_collection(settings.tasks_collection)),
            users=UserStore(mongodb.get_collection(settings.users_collection)),
        )
        logger.debug(
            f"Stores ready: tasks={settings.tasks_collection}, users={settings.users_collection}"
        )
        return container

    async def ensure_indexes(self) -> None:
        logger.info("📝 Creating MongoDB indexes...")
        await self.tasks.ensure_indexes()
        await self.users.ensure_indexes()
        logger.info("✅ MongoDB indexes created successfully")
