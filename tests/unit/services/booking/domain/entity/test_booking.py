from datetime import timedelta
from decimal import Decimal

import pytest

from services.booking.domain.enum import BookingAction, BookingStatus
from services.shared.domain import (
    BusinessRuleViolationException,
    InvalidStateTransitionException,
)


class TestBooking:
    def test_create_booking_with_defaults(self, create_booking):
        booking = create_booking()

        assert booking.status == BookingStatus.INITIATED
        assert booking.updated_at == booking.created_at
        assert booking.total_cost == Decimal("200")

    @pytest.mark.parametrize("no_of_seats", [0, -1])
    def test_rejects_non_positive_seats(self, create_booking, no_of_seats):
        with pytest.raises(BusinessRuleViolationException):
            create_booking(no_of_seats=no_of_seats)

    def test_rejects_negative_cost(self, create_booking):
        with pytest.raises(BusinessRuleViolationException):
            create_booking(total_cost=Decimal("-1"))

    def test_equality_by_id(self, create_booking):
        assert create_booking(booking_id="b-1") == create_booking(
            booking_id="b-1", no_of_seats=3
        )
        assert create_booking(booking_id="b-1") != create_booking(booking_id="b-2")

    def test_confirm_moves_to_booked_and_updates_timestamp(self, create_booking):
        booking = create_booking()
        paid_at = booking.created_at + timedelta(minutes=1)

        booking.confirm(paid_at)

        assert booking.status == BookingStatus.BOOKED
        assert booking.updated_at == paid_at

    @pytest.mark.parametrize(
        "status", [BookingStatus.INITIATED, BookingStatus.BOOKED]
    )
    def test_cancel_from_live_states(self, create_booking, status):
        booking = create_booking(status=status)

        booking.cancel(booking.created_at)

        assert booking.status == BookingStatus.CANCELLED

    def test_cancel_twice_is_rejected_without_changing_state(self, create_booking):
        booking = create_booking(status=BookingStatus.CANCELLED)
        before = booking.updated_at

        with pytest.raises(InvalidStateTransitionException):
            booking.cancel(before + timedelta(minutes=1))

        assert booking.status == BookingStatus.CANCELLED
        assert booking.updated_at == before

    def test_ensure_can_does_not_change_state(self, create_booking):
        booking = create_booking()

        booking.ensure_can(BookingAction.PAY)

        assert booking.status == BookingStatus.INITIATED

    def test_ensure_can_rejects_paying_booked(self, create_booking):
        booking = create_booking(status=BookingStatus.BOOKED)

        with pytest.raises(InvalidStateTransitionException):
            booking.ensure_can(BookingAction.PAY)


class TestBookingExpiry:
    def test_not_expired_at_exactly_five_minutes(self, create_booking):
        booking = create_booking()

        assert not booking.is_expired(booking.created_at + timedelta(minutes=5))

    def test_expired_after_five_minutes(self, create_booking):
        booking = create_booking()

        assert booking.is_expired(
            booking.created_at + timedelta(minutes=5, seconds=1)
        )

    def test_custom_window(self, create_booking):
        booking = create_booking()

        assert booking.is_expired(
            booking.created_at + timedelta(seconds=2), window=timedelta(seconds=1)
        )


class TestVerifyPayment:
    def test_accepts_matching_amount_and_user(self, create_booking):
        create_booking().verify_payment("9", Decimal("200.00"))

    def test_rejects_amount_mismatch(self, create_booking):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            create_booking().verify_payment("9", Decimal("150"))

        assert exc_info.value.message == "Payment amount mismatch"
        assert exc_info.value.context["expected_amount"] == "200"
        assert exc_info.value.context["actual_amount"] == "150"

    def test_rejects_user_mismatch(self, create_booking):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            create_booking().verify_payment("10", Decimal("200"))

        assert exc_info.value.message == "User does not match the booking"
