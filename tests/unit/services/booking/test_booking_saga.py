from datetime import timedelta
from decimal import Decimal

import pytest

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.applications.create_booking import CreateBookingService
from services.booking.applications.make_payment import MakePaymentService
from services.booking.applications.reap_expired_bookings import (
    ReapExpiredBookingsService,
)
from services.booking.domain.enum import BookingStatus
from services.booking.domain.factory import BookingFactory
from services.booking.infrastructure.in_memory_idempotency_ledger import (
    InMemoryIdempotencyLedger,
)
from services.shared.domain import ConflictException


@pytest.fixture
def services(booking_repository, flight_inventory, clock):
    cancel = CancelBookingService(
        repository=booking_repository, inventory=flight_inventory, clock=clock
    )
    return {
        "create": CreateBookingService(
            repository=booking_repository,
            inventory=flight_inventory,
            factory=BookingFactory(),
            clock=clock,
        ),
        "pay": MakePaymentService(
            repository=booking_repository,
            ledger=InMemoryIdempotencyLedger(),
            cancel_service=cancel,
            clock=clock,
        ),
        "cancel": cancel,
        "reap": ReapExpiredBookingsService(
            repository=booking_repository, cancel_service=cancel, clock=clock
        ),
    }


class TestBookingSaga:
    def test_create_then_cancel_twice(self, services, flight_inventory):
        """5席・単価100のフライトに2席予約し、キャンセルを2回行う"""
        booking = services["create"].create(flight_id="1", user_id="9", no_of_seats=2)

        assert booking.status == BookingStatus.INITIATED
        assert booking.total_cost == Decimal("200")
        assert flight_inventory.calls == [("reserve", "1", 2)]

        result = services["cancel"].cancel(booking.id)

        assert result.status == BookingStatus.CANCELLED
        assert flight_inventory.calls[-1] == ("release", "1", 2)

        with pytest.raises(ConflictException):
            services["cancel"].cancel(booking.id)

        assert len(flight_inventory.calls) == 2
        assert flight_inventory.seats_of("1") == 5

    def test_create_pay_cancel(self, services, booking_repository, flight_inventory):
        booking = services["create"].create(flight_id="1", user_id="9", no_of_seats=2)

        receipt = services["pay"].pay(booking.id, "9", Decimal("200"), "key-1")
        assert receipt.status == BookingStatus.BOOKED

        services["cancel"].cancel(booking.id)

        assert booking_repository.rows[str(booking.id)].status == (
            BookingStatus.CANCELLED
        )
        assert flight_inventory.seats_of("1") == 5

    def test_unpaid_booking_is_reaped_and_cannot_be_paid(
        self, services, flight_inventory, clock
    ):
        booking = services["create"].create(flight_id="1", user_id="9", no_of_seats=2)
        clock.advance(timedelta(minutes=6))

        result = services["reap"].reap()

        assert (result.total, result.succeeded, result.failed) == (1, 1, 0)
        assert flight_inventory.seats_of("1") == 5
        with pytest.raises(ConflictException):
            services["pay"].pay(booking.id, "9", Decimal("200"), "key-1")

    def test_reaper_and_user_cancel_release_seats_once(
        self, services, flight_inventory, clock
    ):
        booking = services["create"].create(flight_id="1", user_id="9", no_of_seats=2)
        clock.advance(timedelta(minutes=6))
        services["cancel"].cancel(booking.id)

        result = services["reap"].reap()

        assert result.total == 0
        assert [c for c in flight_inventory.calls if c[0] == "release"] == [
            ("release", "1", 2)
        ]
