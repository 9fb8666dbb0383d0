from typing import List
from pydantic import ValidationError
from schemas.service import Service, ServiceUpsert
from config.database import Database
from crud.errors import store_operation
from pymongo import ASCENDING
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


async def get_all_services(db: Database) -> List[Service]:
    """Stored catalog, oldest entry first. Incomplete records are skipped."""
    async with store_operation("list services"):
        services = await db.services.find({}, {"_id": 0}).sort("created_at", ASCENDING).to_list(length=None)

    validated_services = []
    for service in services:
        try:
            validated_services.append(Service(**service))
        except ValidationError as e:
            logger.warning(f"Skipping invalid service {service.get('id')}: {e.error_count()} field error(s)")
    return validated_services


async def upsert_service(db: Database, service: ServiceUpsert) -> Service:
    """Insert or update a service keyed by its id; only given fields are written.

    The stored record merged with the payload is validated first. When it
    would be incomplete (a partial payload for a new id, or an explicit null
    for a required field) ValidationError is raised and nothing is written.
    """
    fields = service.model_dump(exclude_unset=True, exclude={"id"})

    async with store_operation("get service"):
        existing = await db.services.find_one({"id": service.id}, {"_id": 0})
    Service(**{**(existing or {}), **fields, "id": service.id})

    now = datetime.now(timezone.utc)
    fields["updated_at"] = now

    async with store_operation("upsert service"):
        await db.services.update_one(
            {"id": service.id},
            {"$set": fields, "$setOnInsert": {"created_at": now}},
            upsert=True
        )
        stored = await db.services.find_one({"id": service.id}, {"_id": 0})

    return Service(**stored)
