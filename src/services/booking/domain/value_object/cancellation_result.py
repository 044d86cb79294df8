from dataclasses import dataclass

from services.booking.domain.enum import BookingStatus


@dataclass(frozen=True)
class CancellationResult:
    """予約キャンセルの結果"""

    booking_id: str
    status: BookingStatus
    seats_released: int
    message: str = "Booking cancelled successfully"
