from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum
from typing import Optional
import random
import string

from schemas.client import Client


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AppointmentCreate(BaseModel):
    client_id: str
    service_type: str
    appointment_date: str = Field(..., description="ISO date, YYYY-MM-DD")
    appointment_time: str = Field(..., description="Format: HH:MM in 24-hour format")
    notes: Optional[str] = None


class Appointment(AppointmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime
    clients: Optional[Client] = Field(None, description="Owning client, present on joined reads")


class StatusUpdate(BaseModel):
    status: AppointmentStatus


def generate_appointment_id(client_id: str) -> str:
    # Client ids look like CLABC..., keep the name fragment
    client_part = client_id[2:5] if client_id.startswith("CL") else client_id[:3]

    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=8))

    return f"AP{client_part.upper()}{random_part}"
