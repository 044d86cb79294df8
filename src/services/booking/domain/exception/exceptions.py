from datetime import datetime

from services.shared.domain.exception import BusinessRuleViolationException


class InsufficientSeatsException(BusinessRuleViolationException):
    """要求座席数がフライトの空席数を超えている場合"""

    def __init__(self, flight_id: str, requested: int, available: int) -> None:
        super().__init__(
            "Not enough seats available",
            flight_id=flight_id,
            requested_seats=requested,
            available_seats=available,
        )


class BookingExpiredException(BusinessRuleViolationException):
    """決済期限を過ぎた予約に対して決済しようとした場合"""

    def __init__(self, booking_id: str, created_at: datetime) -> None:
        super().__init__(
            "The booking has expired",
            booking_id=booking_id,
            created_at=created_at.isoformat(),
        )
