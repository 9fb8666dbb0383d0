from schemas.appointment import AppointmentCreate
from schemas.booking import BookingRequest, BookingResult
from schemas.client import ClientCreate
from crud.appointment_crud import create_appointment
from crud.client_crud import create_client
from crud.errors import StoreError, StoreUnreachable
from config.database import Database
import logging

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = (
    "Network connection failed. This usually means the clinical server is "
    "unreachable or the project is paused."
)


class BookingError(Exception):
    """A booking could not be committed to the store."""

    def __init__(self, cause: StoreError):
        super().__init__(cause.message)
        self.cause = cause

    @property
    def unreachable(self) -> bool:
        return isinstance(self.cause, StoreUnreachable)

    @property
    def user_message(self) -> str:
        if self.unreachable:
            return UNREACHABLE_MESSAGE
        return self.cause.message


class ClientInsertFailed(BookingError):
    pass


class AppointmentInsertFailed(BookingError):
    def __init__(self, cause: StoreError, client_id: str):
        super().__init__(cause)
        self.client_id = client_id


async def submit_booking(db: Database, request: BookingRequest) -> BookingResult:
    """Write the client, then the appointment that references it.

    The two inserts are not transactional: when the appointment insert fails
    the client record stays behind.
    """
    try:
        client = await create_client(db, ClientCreate(
            full_name=request.full_name,
            email=request.email,
            whatsapp_number=request.whatsapp
        ))
    except StoreError as e:
        logger.error(f"Client insert failed: {e.message}")
        raise ClientInsertFailed(e) from e

    try:
        appointment = await create_appointment(db, AppointmentCreate(
            client_id=client.id,
            service_type=request.service_type,
            appointment_date=request.appointment_date,
            appointment_time=request.appointment_time,
            notes=request.notes
        ))
    except StoreError as e:
        logger.error(f"Appointment insert failed, client {client.id} left without appointment: {e.message}")
        raise AppointmentInsertFailed(e, client.id) from e

    logger.info(f"Booking committed: appointment {appointment.id} for client {client.id}")
    return BookingResult(client=client, appointment=appointment)
