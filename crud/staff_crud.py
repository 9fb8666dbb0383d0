from typing import Optional
from schemas.auth import Session
from config.database import Database
from crud.errors import store_operation
from datetime import datetime


async def get_staff_user(db: Database, email: str) -> Optional[dict]:
    async with store_operation("get staff user"):
        return await db.staff_users.find_one({"email": email.lower()}, {"_id": 0})


async def save_staff_user(db: Database, email: str, password_hash: str) -> None:
    async with store_operation("save staff user"):
        await db.staff_users.update_one(
            {"email": email.lower()},
            {"$set": {"email": email.lower(), "password": password_hash}},
            upsert=True
        )


async def create_session(db: Database, session: Session) -> Session:
    async with store_operation("create session"):
        await db.sessions.insert_one(session.model_dump())
    return session


async def get_session(db: Database, token: str) -> Optional[Session]:
    async with store_operation("get session"):
        session = await db.sessions.find_one({"token": token}, {"_id": 0})
    return Session(**session) if session else None


async def extend_session(db: Database, token: str, expires_at: datetime) -> bool:
    async with store_operation("refresh session"):
        result = await db.sessions.update_one({"token": token}, {"$set": {"expires_at": expires_at}})
    return result.matched_count > 0


async def delete_session(db: Database, token: str) -> bool:
    async with store_operation("delete session"):
        result = await db.sessions.delete_one({"token": token})
    return result.deleted_count > 0
