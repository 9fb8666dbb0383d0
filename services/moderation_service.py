from schemas.appointment import AppointmentStatus
from schemas.service import Service, ServiceUpsert
from config.database import Database
from crud import appointment_crud, service_crud
from crud.errors import StoreError
from pydantic import ValidationError
from services.catalog_service import CatalogProvider
from services.dashboard_service import DashboardAggregator
import logging

logger = logging.getLogger(__name__)

SERVICE_UPSERT_HINT = "Service management error. Table may not exist."


class ModerationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AppointmentNotFound(ModerationError):
    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id


class ConfirmationRequired(ModerationError):
    def __init__(self):
        super().__init__("Deleting an appointment must be confirmed")


async def set_status(
    db: Database,
    aggregator: DashboardAggregator,
    appointment_id: str,
    status: AppointmentStatus
) -> None:
    """Set any status on an appointment, then rebuild the dashboard.

    No transition rules apply: every status is reachable from every other.
    """
    try:
        found = await appointment_crud.update_appointment_status(db, appointment_id, status)
    except StoreError as e:
        logger.error(f"Status update for {appointment_id} failed: {e.message}")
        raise ModerationError(f"Status update failed: {e.message}") from e

    if not found:
        raise AppointmentNotFound(appointment_id)

    logger.info(f"Appointment {appointment_id} set to {AppointmentStatus(status).value}")
    await aggregator.refresh()


async def delete_appointment(
    db: Database,
    aggregator: DashboardAggregator,
    appointment_id: str,
    confirmed: bool = False
) -> None:
    """Delete one appointment after explicit confirmation. The client stays."""
    if not confirmed:
        raise ConfirmationRequired()

    try:
        deleted = await appointment_crud.delete_appointment(db, appointment_id)
    except StoreError as e:
        logger.error(f"Delete of {appointment_id} failed: {e.message}")
        raise ModerationError(f"Delete failed: {e.message}") from e

    if not deleted:
        raise AppointmentNotFound(appointment_id)

    logger.info(f"Appointment {appointment_id} deleted")
    await aggregator.refresh()


async def upsert_service(db: Database, catalog: CatalogProvider, payload: ServiceUpsert) -> Service:
    try:
        service = await service_crud.upsert_service(db, payload)
    except StoreError as e:
        logger.error(f"Service upsert for {payload.id} failed: {e.message}")
        raise ModerationError(SERVICE_UPSERT_HINT) from e
    except ValidationError as e:
        raise ModerationError(f"Service {payload.id} is missing required fields") from e

    await catalog.refresh()
    return service
