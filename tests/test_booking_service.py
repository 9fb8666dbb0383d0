"""
Tests for the two-step booking workflow and the store error taxonomy.
"""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from crud.errors import StoreRejected, StoreUnreachable, store_operation
from schemas.appointment import AppointmentStatus
from schemas.booking import BookingRequest
from services.booking_service import (
    UNREACHABLE_MESSAGE,
    AppointmentInsertFailed,
    ClientInsertFailed,
    submit_booking,
)


@pytest.fixture
def booking(booking_payload):
    return BookingRequest.model_validate(booking_payload)


class TestSubmitBooking:

    @pytest.mark.asyncio
    async def test_creates_one_client_and_one_pending_appointment(self, db, booking):
        result = await submit_booking(db, booking)

        assert await db.clients.count_documents({}) == 1
        assert await db.appointments.count_documents({}) == 1

        stored = await db.appointments.find_one({"id": result.appointment.id})
        assert stored["client_id"] == result.client.id
        assert stored["status"] == "pending"
        assert stored["appointment_date"] == "2026-10-21"
        assert stored["appointment_time"] == "14:30"
        assert stored["service_type"] == "swedish"

        client = await db.clients.find_one({"id": result.client.id})
        assert client["full_name"] == "Ann Lee"
        assert client["whatsapp_number"] == "+1 415 555 0100"

    @pytest.mark.asyncio
    async def test_status_is_pending_regardless_of_input(self, db, booking_payload):
        booking_payload["status"] = "confirmed"
        result = await submit_booking(db, BookingRequest.model_validate(booking_payload))
        assert result.appointment.status == AppointmentStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_service_type_is_not_checked(self, db, booking_payload):
        booking_payload["serviceType"] = "not-in-catalog"
        result = await submit_booking(db, BookingRequest.model_validate(booking_payload))
        assert result.appointment.service_type == "not-in-catalog"

    @pytest.mark.asyncio
    async def test_appointment_failure_leaves_orphan_client(self, db, booking):
        with patch('services.booking_service.create_appointment', new_callable=AsyncMock,
                   side_effect=StoreRejected("insert violates foreign key", "insert appointment")):
            with pytest.raises(AppointmentInsertFailed) as excinfo:
                await submit_booking(db, booking)

        assert excinfo.value.user_message == "insert violates foreign key"
        assert not excinfo.value.unreachable
        # No compensating delete: the client written in step one is still there
        assert await db.clients.count_documents({"id": excinfo.value.client_id}) == 1
        assert await db.appointments.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_client_failure_aborts_before_appointment(self, db, booking):
        mock_create_appointment = AsyncMock()
        with patch('services.booking_service.create_client', new_callable=AsyncMock,
                   side_effect=StoreUnreachable("No servers found yet", "insert client")), \
             patch('services.booking_service.create_appointment', mock_create_appointment):
            with pytest.raises(ClientInsertFailed) as excinfo:
                await submit_booking(db, booking)

        mock_create_appointment.assert_not_called()
        assert excinfo.value.unreachable
        assert excinfo.value.user_message == UNREACHABLE_MESSAGE


class TestBookingRequest:

    def test_accepts_snake_case_fields(self):
        booking = BookingRequest(
            full_name="Bob Ray", email="bob@example.com", whatsapp="+15550001111",
            service_type="deeptissue", date="2026-11-02", time="09:05"
        )
        assert booking.appointment_date == "2026-11-02"
        assert booking.appointment_time == "09:05"
        assert booking.notes is None

    def test_blank_required_field_is_rejected(self, booking_payload):
        booking_payload["fullName"] = "   "
        with pytest.raises(ValidationError):
            BookingRequest.model_validate(booking_payload)

    def test_missing_date_is_rejected(self, booking_payload):
        del booking_payload["date"]
        with pytest.raises(ValidationError):
            BookingRequest.model_validate(booking_payload)


class TestStoreOperation:

    @pytest.mark.asyncio
    async def test_unreachable_server_is_classified(self):
        with pytest.raises(StoreUnreachable) as excinfo:
            async with store_operation("insert client"):
                raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        assert excinfo.value.operation == "insert client"

    @pytest.mark.asyncio
    async def test_rejected_operations_are_classified(self):
        with pytest.raises(StoreRejected):
            async with store_operation("insert client"):
                raise DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(StoreRejected):
            async with store_operation("list services"):
                raise OperationFailure("ns not found")
