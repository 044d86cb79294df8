from decimal import Decimal

import pytest

from services.booking.applications.create_booking import CreateBookingService
from services.booking.domain.enum import BookingStatus
from services.booking.domain.exception import InsufficientSeatsException
from services.booking.domain.factory import BookingFactory
from services.shared.domain import ResourceNotFoundException
from services.shared.infrastructure import (
    PersistenceException,
    UpstreamServiceException,
)


@pytest.fixture
def service(booking_repository, flight_inventory, clock):
    return CreateBookingService(
        repository=booking_repository,
        inventory=flight_inventory,
        factory=BookingFactory(),
        clock=clock,
    )


class TestCreateBookingService:
    def test_create_persists_booking_and_reserves_seats(
        self, service, booking_repository, flight_inventory
    ):
        booking = service.create(flight_id="1", user_id="9", no_of_seats=2)

        assert booking.status == BookingStatus.INITIATED
        assert booking.total_cost == Decimal("200")
        assert flight_inventory.calls == [("reserve", "1", 2)]
        assert flight_inventory.seats_of("1") == 3
        stored = booking_repository.find_by_id(booking.id)
        assert stored == booking
        assert stored.status == BookingStatus.INITIATED

    @pytest.mark.parametrize("no_of_seats", [6, 10])
    def test_insufficient_seats_persists_nothing_and_never_reserves(
        self, service, booking_repository, flight_inventory, no_of_seats
    ):
        with pytest.raises(InsufficientSeatsException):
            service.create(flight_id="1", user_id="9", no_of_seats=no_of_seats)

        assert booking_repository.rows == {}
        assert flight_inventory.calls == []

    def test_unknown_flight_is_not_found(self, service, flight_inventory):
        with pytest.raises(ResourceNotFoundException):
            service.create(flight_id="404", user_id="9", no_of_seats=1)

        assert flight_inventory.calls == []

    def test_reserve_failure_rolls_back_booking(
        self, service, booking_repository, flight_inventory
    ):
        flight_inventory.errors["reserve_seats"] = UpstreamServiceException(
            "Flight service timed out"
        )

        with pytest.raises(UpstreamServiceException):
            service.create(flight_id="1", user_id="9", no_of_seats=2)

        assert booking_repository.rows == {}
        assert booking_repository.rollbacks == 1
        assert booking_repository.commits == 0
        # 補償対象の確保が成立していないので返却も呼ばない
        assert flight_inventory.calls == [("reserve", "1", 2)]

    def test_commit_failure_releases_reserved_seats(
        self, service, booking_repository, flight_inventory
    ):
        booking_repository.commit_error = PersistenceException("commit failed")

        with pytest.raises(PersistenceException):
            service.create(flight_id="1", user_id="9", no_of_seats=2)

        assert booking_repository.rows == {}
        assert flight_inventory.calls == [
            ("reserve", "1", 2),
            ("release", "1", 2),
        ]
        assert flight_inventory.seats_of("1") == 5

    def test_commit_failure_is_raised_even_if_compensation_fails(
        self, service, booking_repository, flight_inventory
    ):
        booking_repository.commit_error = PersistenceException("commit failed")
        flight_inventory.errors["release_seats"] = UpstreamServiceException("down")

        with pytest.raises(PersistenceException):
            service.create(flight_id="1", user_id="9", no_of_seats=2)
