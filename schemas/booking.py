from pydantic import BaseModel, ConfigDict, Field, field_validator
import datetime as dt
from typing import Optional

from schemas.appointment import Appointment
from schemas.client import Client


class BookingRequest(BaseModel):
    """Intake form payload.

    Accepts both snake_case and the camelCase keys posted to
    ``/create-appointment`` (``fullName``, ``serviceType``).
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(..., alias="fullName", min_length=1)
    email: str = Field(..., min_length=1)
    whatsapp: str = Field(..., min_length=1)
    service_type: str = Field(..., alias="serviceType", min_length=1)
    date: dt.date
    time: dt.time
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def blank_notes_are_empty(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def appointment_date(self) -> str:
        return self.date.isoformat()

    @property
    def appointment_time(self) -> str:
        return self.time.strftime("%H:%M")


class BookingResult(BaseModel):
    client: Client
    appointment: Appointment
