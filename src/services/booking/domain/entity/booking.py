from datetime import datetime, timedelta
from decimal import Decimal

from services.booking.domain.constants import BOOKING_PAYMENT_WINDOW
from services.booking.domain.enum import BookingAction, BookingStatus
from services.booking.domain.state_machine import BookingStateMachine
from services.booking.domain.value_object import BookingId
from services.shared.domain import BusinessRuleViolationException, Entity


class Booking(Entity[BookingId]):
    """座席予約

    no_of_seats と total_cost は作成時に確定し、以後変更されない。
    ステータスは BookingStateMachine の遷移表に沿ってのみ進む。
    """

    def __init__(
        self,
        id: BookingId,
        flight_id: str,
        user_id: str,
        no_of_seats: int,
        total_cost: Decimal,
        created_at: datetime,
        status: BookingStatus = BookingStatus.INITIATED,
        updated_at: datetime | None = None,
    ) -> None:
        super().__init__(id)

        self._flight_id = flight_id
        self._user_id = user_id
        self._no_of_seats = no_of_seats
        self._total_cost = total_cost
        self._created_at = created_at
        self._updated_at = updated_at or created_at
        self._status = status

        self._validate()

    def _validate(self) -> None:
        if self._no_of_seats <= 0:
            raise BusinessRuleViolationException(
                "Number of seats must be a positive integer",
                no_of_seats=self._no_of_seats,
            )
        if self._total_cost < 0:
            raise BusinessRuleViolationException(
                "Total cost cannot be negative", total_cost=str(self._total_cost)
            )

    @property
    def flight_id(self) -> str:
        return self._flight_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def no_of_seats(self) -> int:
        return self._no_of_seats

    @property
    def total_cost(self) -> Decimal:
        return self._total_cost

    @property
    def status(self) -> BookingStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def is_expired(
        self, now: datetime, window: timedelta = BOOKING_PAYMENT_WINDOW
    ) -> bool:
        """作成から決済期限を超過しているか"""
        return now - self._created_at > window

    def verify_payment(self, user_id: str, amount: Decimal) -> None:
        """決済リクエストの金額と利用者が予約と一致するか検証する"""
        if amount != self._total_cost:
            raise BusinessRuleViolationException(
                "Payment amount mismatch",
                booking_id=str(self.id),
                expected_amount=str(self._total_cost),
                actual_amount=str(amount),
            )
        if user_id != self._user_id:
            raise BusinessRuleViolationException(
                "User does not match the booking",
                booking_id=str(self.id),
                expected_user_id=self._user_id,
                actual_user_id=user_id,
            )

    def ensure_can(self, action: BookingAction) -> None:
        """状態を変えずに、操作が現在のステータスで許可されるか確認する"""
        BookingStateMachine.next_status(self._status, action)

    def confirm(self, now: datetime) -> None:
        """決済済みとして予約を確定する"""
        self._transition(BookingAction.PAY, now)

    def cancel(self, now: datetime) -> None:
        """予約をキャンセルする"""
        self._transition(BookingAction.CANCEL, now)

    def _transition(self, action: BookingAction, now: datetime) -> None:
        self._status = BookingStateMachine.next_status(self._status, action)
        self._updated_at = now
