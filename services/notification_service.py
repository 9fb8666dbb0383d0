from typing import Dict, Optional
from schemas.booking import BookingRequest
from config.database import Database
from services.booking_service import submit_booking
from services.twilio_service import TwilioService
import asyncio
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    """Server-side booking entry point that also alerts the client and the clinic.

    Messaging is optional: without a TwilioService the booking is still
    written and the response simply carries no message sids.
    """

    def __init__(
        self,
        db: Database,
        messenger: Optional[TwilioService] = None,
        admin_number: Optional[str] = None,
        clinic_name: str = "Serenity Massage"
    ):
        self.db = db
        self.messenger = messenger
        self.admin_number = admin_number
        self.clinic_name = clinic_name

    def _client_message(self, request: BookingRequest) -> str:
        return (
            f"Hello {request.full_name}! 🌿 Your session for {request.service_type} is booked for "
            f"{request.appointment_date} at {request.appointment_time}. "
            f"We look forward to seeing you at {self.clinic_name}."
        )

    def _admin_message(self, request: BookingRequest) -> str:
        return (
            f"🛎️ NEW BOOKING: {request.full_name} scheduled a {request.service_type} session on "
            f"{request.appointment_date} at {request.appointment_time}."
        )

    async def create_appointment(self, request: BookingRequest) -> Dict:
        """Raises BookingError from the insert path and MessagingError from the send path.

        Sends go through the blocking Twilio client, so they run in a worker thread.
        """
        result = await submit_booking(self.db, request)
        response = {"success": True, "appointmentId": result.appointment.id}

        if self.messenger is None:
            return response

        logger.info(f"Triggering WhatsApp notifications for appointment {result.appointment.id}")
        response["clientSid"] = await asyncio.to_thread(
            self.messenger.send_message, request.whatsapp, self._client_message(request)
        )
        if self.admin_number:
            response["adminSid"] = await asyncio.to_thread(
                self.messenger.send_message, self.admin_number, self._admin_message(request)
            )
        else:
            logger.warning("ADMIN_WHATSAPP_NUMBER is not set, skipping clinic alert")
        return response
