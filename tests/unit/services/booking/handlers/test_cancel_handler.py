import json
from unittest.mock import patch

import pytest

from services.booking.domain.enum import BookingStatus
from services.booking.domain.value_object import BookingId, CancellationResult
from services.booking.handlers import cancel
from services.shared.domain import InvalidStateTransitionException
from services.shared.infrastructure import UpstreamServiceException


@pytest.fixture
def mock_service():
    with patch.object(cancel, "service") as service:
        yield service


@pytest.fixture
def cancel_event(api_event):
    return api_event(
        path="/bookings/booking-123/cancel",
        path_parameters={"booking_id": "booking-123"},
    )


class TestCancelBookingHandler:
    def test_returns_cancellation_result(
        self, mock_service, cancel_event, lambda_context
    ):
        mock_service.cancel.return_value = CancellationResult(
            booking_id="booking-123",
            status=BookingStatus.CANCELLED,
            seats_released=2,
        )

        response = cancel.lambda_handler(cancel_event, lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["message"] == "Booking cancelled successfully"
        assert body["data"] == {
            "booking_id": "booking-123",
            "status": "CANCELLED",
            "seats_released": 2,
        }
        mock_service.cancel.assert_called_once_with(BookingId(value="booking-123"))

    def test_already_cancelled_returns_409(
        self, mock_service, cancel_event, lambda_context
    ):
        mock_service.cancel.side_effect = InvalidStateTransitionException(
            "CANCELLED", "CANCEL", "Booking is already cancelled"
        )

        response = cancel.lambda_handler(cancel_event, lambda_context)

        assert response["statusCode"] == 409
        body = json.loads(response["body"])
        assert body["error"]["type"] == "InvalidStateTransitionException"

    def test_release_failure_returns_502(
        self, mock_service, cancel_event, lambda_context
    ):
        mock_service.cancel.side_effect = UpstreamServiceException("down")

        response = cancel.lambda_handler(cancel_event, lambda_context)

        assert response["statusCode"] == 502
        assert json.loads(response["body"])["message"] == (
            "Flight service is unavailable"
        )
