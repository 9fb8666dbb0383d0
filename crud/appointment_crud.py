from typing import List, Optional
from schemas.appointment import Appointment, AppointmentCreate, AppointmentStatus, generate_appointment_id
from config.database import Database
from crud.client_crud import get_clients_by_ids
from crud.errors import store_operation
from pymongo import ASCENDING, DESCENDING
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


async def create_appointment(db: Database, appointment: AppointmentCreate) -> Appointment:
    """Insert an appointment; the status always starts as pending."""
    appointment_dict = appointment.model_dump()
    appointment_dict["id"] = generate_appointment_id(appointment.client_id)
    appointment_dict["status"] = AppointmentStatus.PENDING.value
    appointment_dict["created_at"] = datetime.now(timezone.utc)

    async with store_operation("insert appointment"):
        await db.appointments.insert_one(appointment_dict)

    appointment_dict.pop("_id", None)
    return Appointment(**appointment_dict)


async def get_appointment(db: Database, appointment_id: str) -> Optional[Appointment]:
    async with store_operation("get appointment"):
        appointment = await db.appointments.find_one({"id": appointment_id}, {"_id": 0})
    return Appointment(**appointment) if appointment else None


async def get_appointments_with_clients(db: Database, newest_first: bool = True) -> List[Appointment]:
    """All appointments ordered by creation time, each joined with its client."""
    order = DESCENDING if newest_first else ASCENDING
    async with store_operation("list appointments"):
        appointments = await db.appointments.find({}, {"_id": 0}).sort("created_at", order).to_list(length=None)

    client_ids = list({a["client_id"] for a in appointments if a.get("client_id")})
    clients = {c.id: c for c in await get_clients_by_ids(db, client_ids)}

    return [
        Appointment(**appointment, clients=clients.get(appointment.get("client_id")))
        for appointment in appointments
    ]


async def update_appointment_status(db: Database, appointment_id: str, status: AppointmentStatus) -> bool:
    """Set the status of one appointment. Returns False when no such id exists."""
    async with store_operation("update appointment"):
        result = await db.appointments.update_one(
            {"id": appointment_id},
            {"$set": {"status": AppointmentStatus(status).value}}
        )
    return result.matched_count > 0


async def delete_appointment(db: Database, appointment_id: str) -> bool:
    async with store_operation("delete appointment"):
        result = await db.appointments.delete_one({"id": appointment_id})
    return result.deleted_count > 0
