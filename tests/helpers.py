"""Direct document writes for arranging store state in tests."""

from datetime import datetime, timezone


async def insert_appointment(db, appointment_id, client_id, service_type, appointment_date,
                             status="pending", notes=None, created_at=None):
    """Write an appointment document directly, bypassing id generation."""
    await db.appointments.insert_one({
        "id": appointment_id,
        "client_id": client_id,
        "service_type": service_type,
        "appointment_date": appointment_date,
        "appointment_time": "10:00",
        "status": status,
        "notes": notes,
        "created_at": created_at or datetime.now(timezone.utc),
    })


async def insert_client(db, client_id, full_name):
    await db.clients.insert_one({
        "id": client_id,
        "full_name": full_name,
        "whatsapp_number": "+15550000000",
        "email": f"{client_id.lower()}@example.com",
        "created_at": datetime.now(timezone.utc),
    })
