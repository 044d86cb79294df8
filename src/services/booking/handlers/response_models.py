from __future__ import annotations

from pydantic import BaseModel

from services.booking.applications.reap_expired_bookings import BatchResult
from services.booking.domain.entity import Booking
from services.booking.domain.value_object import CancellationResult, Receipt
from services.shared.utils import success_body


class BookingData(BaseModel):
    """予約データのレスポンスモデル"""

    booking_id: str
    flight_id: str
    user_id: str
    status: str
    no_of_seats: int
    total_cost: str
    created_at: str
    updated_at: str


class ReceiptData(BaseModel):
    """決済結果のレスポンスモデル"""

    booking_id: str
    user_id: str
    amount: str
    status: str
    paid_at: str


class CancellationData(BaseModel):
    booking_id: str
    status: str
    seats_released: int


class ReapOutcomeData(BaseModel):
    booking_id: str
    status: str
    error: str | None = None


class BatchData(BaseModel):
    """期限切れ予約回収のレスポンスモデル"""

    total: int
    succeeded: int
    failed: int
    results: list[ReapOutcomeData]


def booking_to_response(booking: Booking, message: str) -> dict:
    """Booking エンティティをレスポンス辞書に変換する"""
    data = BookingData(
        booking_id=str(booking.id),
        flight_id=booking.flight_id,
        user_id=booking.user_id,
        status=booking.status.value,
        no_of_seats=booking.no_of_seats,
        total_cost=str(booking.total_cost),
        created_at=booking.created_at.isoformat(),
        updated_at=booking.updated_at.isoformat(),
    )
    return success_body(message, data.model_dump())


def receipt_to_response(receipt: Receipt) -> dict:
    data = ReceiptData(
        booking_id=receipt.booking_id,
        user_id=receipt.user_id,
        amount=str(receipt.amount),
        status=receipt.status.value,
        paid_at=receipt.paid_at.isoformat(),
    )
    return success_body(receipt.message, data.model_dump())


def cancellation_to_response(result: CancellationResult) -> dict:
    data = CancellationData(
        booking_id=result.booking_id,
        status=result.status.value,
        seats_released=result.seats_released,
    )
    return success_body(result.message, data.model_dump())


def batch_to_response(result: BatchResult) -> dict:
    data = BatchData(
        total=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
        results=[
            ReapOutcomeData(
                booking_id=o.booking_id,
                status="cancelled" if o.succeeded else "failed",
                error=o.error,
            )
            for o in result.results
        ],
    )
    return success_body(result.message, data.model_dump())
