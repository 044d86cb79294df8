from enum import Enum


class BookingStatus(str, Enum):
    """予約ステータス"""

    INITIATED = "INITIATED"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    # 将来の拡張用。現在の遷移表からは到達しない
    PENDING = "PENDING"
