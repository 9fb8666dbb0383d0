from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from schemas.booking import BookingRequest
from config.container import AppContainer, get_container
from services.booking_service import BookingError
from services.twilio_service import MessagingError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.post("/create-appointment")
async def create_appointment(request: Request, container: AppContainer = Depends(get_container)):
    """Book and notify in one call, usable without a staff session."""
    try:
        payload = await request.json()
        booking = BookingRequest.model_validate(payload)
    except (ValueError, ValidationError) as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        return await container.notifications.create_appointment(booking)
    except BookingError as e:
        return JSONResponse(status_code=400, content={"error": e.user_message})
    except MessagingError as e:
        logger.error(f"Booking saved but notification failed: {e.message}")
        return JSONResponse(status_code=500, content={"error": e.message})
