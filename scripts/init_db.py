#!/usr/bin/env python3
"""
Prepare the MongoDB database for the stores.
Connects with the configured settings and creates the indexes both stores
rely on (including the unique email index on users).

Usage:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import get_settings
from core.container import StoreContainer
from core.database import MongoDB, mask_url
from core.errors import StoreError
from core.logger import logger


async def init_db() -> None:
    settings = get_settings()

    async with MongoDB(settings) as mongodb:
        stores = StoreContainer.from_mongodb(mongodb)
        await stores.ensure_indexes()

        tasks = await stores.tasks.get_many().count()
        users = await stores.users.get_many().count()
        logger.info(f"Collections: {settings.tasks_collection}={tasks} documents, {settings.users_collection}={users} documents")


def main():
    """Main entry point."""
    settings = get_settings()
    try:
        logger.info("=" * 70)
        logger.info(f"Database setup: {mask_url(settings.mongodb_connection_url)}")
        logger.info("=" * 70)

        asyncio.run(init_db())

        logger.info("✅ Database setup complete!")

    except KeyboardInterrupt:
        logger.warning("\nSetup interrupted by user")
        sys.exit(1)
    except StoreError as e:
        logger.error(f"\nSetup failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
