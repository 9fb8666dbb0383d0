"""Copy the built-in service list into the services collection.

Existing entries with the same id are updated; others are left alone.
"""
from config.database import Database
from config.settings import Settings
from schemas.service import ServiceUpsert
from crud.service_crud import upsert_service
from services.catalog_service import BUILTIN_SERVICES
import asyncio
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def seed_catalog():
    settings = Settings()
    db = Database(settings.mongodb_url, settings.database_name)
    try:
        await db.connect()
        for service in BUILTIN_SERVICES:
            await upsert_service(db, ServiceUpsert(**service.model_dump()))
            logger.info(f"Seeded service: {service.id}")
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(seed_catalog())
