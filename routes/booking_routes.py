from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Optional
from schemas.booking import BookingRequest
from config.container import AppContainer, get_container
from services.booking_service import BookingError, submit_booking
from services.catalog_service import DEFAULT_SERVICE_ID

router = APIRouter(tags=["booking"])


@router.get("/")
async def booking_form(service: Optional[str] = None, container: AppContainer = Depends(get_container)):
    """Context for the intake form; ``?service=`` preselects a known service."""
    catalog = container.catalog
    selected = service if service and catalog.get(service) else DEFAULT_SERVICE_ID
    return {"services": catalog.list_services(), "selected_service": selected}


@router.post("/bookings", status_code=201)
async def create_booking(booking: BookingRequest, container: AppContainer = Depends(get_container)):
    try:
        result = await submit_booking(container.db, booking)
    except BookingError as e:
        # Echo the submitted values so the form keeps what was typed
        return JSONResponse(
            status_code=503 if e.unreachable else 400,
            content={"error": e.user_message, "form": booking.model_dump(mode="json")}
        )

    service = container.catalog.get(booking.service_type)
    service_name = service.name if service else booking.service_type
    return {
        "success": True,
        "appointment_id": result.appointment.id,
        "service": service_name,
        "message": f"Your {service_name} session is securely registered. "
                   "The clinic will contact you via WhatsApp shortly."
    }
