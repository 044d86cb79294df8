from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from services.booking.domain.enum import BookingStatus


@dataclass(frozen=True)
class Receipt:
    """決済の領収情報

    冪等性台帳にキャッシュされ、同じキーの再試行にはこの値がそのまま返る。
    """

    booking_id: str
    user_id: str
    amount: Decimal
    status: BookingStatus
    paid_at: datetime
    message: str = "Payment processed successfully"

    def to_dict(self) -> dict:
        """共有ストアに保存できるプリミティブ型の辞書に変換する"""
        return {
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "amount": str(self.amount),
            "status": self.status.value,
            "paid_at": self.paid_at.isoformat(),
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Receipt:
        return cls(
            booking_id=data["booking_id"],
            user_id=data["user_id"],
            amount=Decimal(data["amount"]),
            status=BookingStatus(data["status"]),
            paid_at=datetime.fromisoformat(data["paid_at"]),
            message=data["message"],
        )
