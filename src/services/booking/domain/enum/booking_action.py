from enum import Enum


class BookingAction(str, Enum):
    """予約に対する操作"""

    CREATE = "CREATE"
    PAY = "PAY"
    CANCEL = "CANCEL"
