from typing import List, Optional
from schemas.client import Client, ClientCreate, generate_client_id
from config.database import Database
from crud.errors import store_operation
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


async def create_client(db: Database, client: ClientCreate) -> Client:
    """Insert a client and return it with its generated id."""
    client_dict = client.model_dump()
    client_dict["id"] = generate_client_id(client.full_name)
    client_dict["created_at"] = datetime.now(timezone.utc)

    async with store_operation("insert client"):
        await db.clients.insert_one(client_dict)

    client_dict.pop("_id", None)
    return Client(**client_dict)


async def get_client(db: Database, client_id: str) -> Optional[Client]:
    async with store_operation("get client"):
        client = await db.clients.find_one({"id": client_id}, {"_id": 0})
    return Client(**client) if client else None


async def get_clients_by_ids(db: Database, client_ids: List[str]) -> List[Client]:
    if not client_ids:
        return []
    async with store_operation("list clients"):
        clients = await db.clients.find({"id": {"$in": client_ids}}, {"_id": 0}).to_list(length=None)
    return [Client(**client) for client in clients]
