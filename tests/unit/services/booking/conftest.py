import copy
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.gateway import FlightInventoryClient
from services.booking.domain.repository import BookingRepository
from services.booking.domain.value_object import BookingId, FlightInventory
from services.shared.domain import (
    DuplicateResourceException,
    OptimisticLockException,
    ResourceNotFoundException,
    Transaction,
)

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """テストから時刻を進められる Clock"""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeTransaction(Transaction):
    def __init__(self, repository: "InMemoryBookingRepository") -> None:
        super().__init__()
        self._repository = repository
        self.staged: list[tuple[Booking, BookingStatus | None]] = []
        self.locked: set[str] = set()

    def _do_commit(self) -> None:
        if self._repository.commit_error is not None:
            raise self._repository.commit_error

        rows = self._repository.rows
        for booking, expected in self.staged:
            stored = rows.get(str(booking.id))
            if expected is None and stored is not None:
                raise DuplicateResourceException("Booking already exists")
            if expected is not None and (stored is None or stored.status != expected):
                raise OptimisticLockException("Booking was modified")

        for booking, _ in self.staged:
            rows[str(booking.id)] = copy.deepcopy(booking)
        self._release_locks()
        self._repository.commits += 1

    def _do_rollback(self) -> None:
        self.staged.clear()
        self._release_locks()
        self._repository.rollbacks += 1

    def _release_locks(self) -> None:
        self._repository.locks -= self.locked
        self.locked.clear()


class InMemoryBookingRepository(BookingRepository):
    """コミットされた行だけを保持する BookingRepository のフェイク"""

    def __init__(self) -> None:
        self.rows: dict[str, Booking] = {}
        self.locks: set[str] = set()
        self.commit_error: Exception | None = None
        self.commits = 0
        self.rollbacks = 0
        self.update_calls: list[tuple[str, BookingStatus, BookingStatus]] = []
        self._sequence = 0

    def add(self, booking: Booking) -> Booking:
        self.rows[str(booking.id)] = copy.deepcopy(booking)
        return booking

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def next_identity(self) -> BookingId:
        self._sequence += 1
        return BookingId(value=f"booking-{self._sequence}")

    def find_by_id(self, id: BookingId) -> Booking | None:
        stored = self.rows.get(str(id))
        return copy.deepcopy(stored) if stored is not None else None

    def create(self, booking: Booking, tx: FakeTransaction) -> None:
        tx.staged.append((copy.deepcopy(booking), None))

    def get(
        self, booking_id: BookingId, tx: FakeTransaction, for_update: bool = False
    ) -> Booking | None:
        key = str(booking_id)
        if key not in self.rows:
            return None
        if for_update and key not in tx.locked:
            if key in self.locks:
                raise OptimisticLockException("Booking is locked", booking_id=key)
            self.locks.add(key)
            tx.locked.add(key)
        return self.find_by_id(booking_id)

    def update(
        self, booking: Booking, tx: FakeTransaction, expected_status: BookingStatus
    ) -> None:
        self.update_calls.append((str(booking.id), expected_status, booking.status))
        tx.staged.append((copy.deepcopy(booking), expected_status))

    def list_by_status_before(
        self, status: BookingStatus, cutoff: datetime
    ) -> list[Booking]:
        return [
            copy.deepcopy(b)
            for b in self.rows.values()
            if b.status == status and b.created_at < cutoff
        ]


class FakeFlightInventory(FlightInventoryClient):
    """呼び出しを記録するフライト在庫サービスのフェイク"""

    def __init__(self) -> None:
        self.flights: dict[str, FlightInventory] = {}
        self.calls: list[tuple[str, str, int]] = []
        self.errors: dict[str, Exception] = {}

    def add_flight(
        self, flight_id: str, total_seats: int, price: Decimal = Decimal("100")
    ) -> None:
        self.flights[flight_id] = FlightInventory(
            flight_id=flight_id, total_seats=total_seats, price=price
        )

    def seats_of(self, flight_id: str) -> int:
        return self.flights[flight_id].total_seats

    def get_flight(self, flight_id: str) -> FlightInventory:
        self._raise_if_failing("get_flight")
        flight = self.flights.get(flight_id)
        if flight is None:
            raise ResourceNotFoundException("Flight not found", flight_id=flight_id)
        return flight

    def reserve_seats(self, flight_id: str, seats: int) -> None:
        self.calls.append(("reserve", flight_id, seats))
        self._raise_if_failing("reserve_seats")
        self._adjust(flight_id, -seats)

    def release_seats(self, flight_id: str, seats: int) -> None:
        self.calls.append(("release", flight_id, seats))
        self._raise_if_failing("release_seats")
        self._adjust(flight_id, seats)

    def _adjust(self, flight_id: str, delta: int) -> None:
        flight = self.flights[flight_id]
        self.flights[flight_id] = FlightInventory(
            flight_id=flight_id,
            total_seats=flight.total_seats + delta,
            price=flight.price,
        )

    def _raise_if_failing(self, method: str) -> None:
        error = self.errors.get(method)
        if error is not None:
            raise error


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def booking_repository():
    return InMemoryBookingRepository()


@pytest.fixture
def flight_inventory():
    inventory = FakeFlightInventory()
    inventory.add_flight("1", total_seats=5, price=Decimal("100"))
    return inventory


@pytest.fixture
def create_booking():
    """Booking を生成する Factory fixture（Factories as fixtures パターン）"""

    def _factory(
        status: BookingStatus = BookingStatus.INITIATED,
        booking_id: str = "booking-123",
        flight_id: str = "1",
        user_id: str = "9",
        no_of_seats: int = 2,
        total_cost: Decimal = Decimal("200"),
        created_at: datetime = NOW,
    ) -> Booking:
        return Booking(
            id=BookingId(value=booking_id),
            flight_id=flight_id,
            user_id=user_id,
            no_of_seats=no_of_seats,
            total_cost=total_cost,
            created_at=created_at,
            status=status,
        )

    return _factory
