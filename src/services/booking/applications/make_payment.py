from decimal import Decimal

from aws_lambda_powertools import Logger

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingAction
from services.booking.domain.exception import BookingExpiredException
from services.booking.domain.repository import BookingRepository, IdempotencyLedger
from services.booking.domain.value_object import BookingId, Receipt
from services.shared.domain import (
    BusinessRuleViolationException,
    ResourceNotFoundException,
)
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)


class MakePaymentService:
    """決済確定サービス

    冪等性キーで決済を一意に識別する。同じキーで成功済みの決済がある場合は、
    ペイロードが異なっていてもキャッシュ済みの Receipt をそのまま返し、
    予約の更新も在庫サービスへの問い合わせも行わない。
    """

    def __init__(
        self,
        repository: BookingRepository,
        ledger: IdempotencyLedger,
        cancel_service: CancelBookingService,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._ledger = ledger
        self._cancel_service = cancel_service
        self._clock = clock

    def pay(
        self,
        booking_id: BookingId,
        user_id: str,
        total_cost: Decimal,
        idempotency_key: str | None,
    ) -> Receipt:
        """予約の決済を行い BOOKED に遷移させる"""
        if not idempotency_key or not idempotency_key.strip():
            raise BusinessRuleViolationException("Idempotency key is required")

        with self._ledger.lock(idempotency_key):
            cached = self._ledger.get(idempotency_key, self._clock())
            if cached is not None:
                logger.info(
                    "Returning cached payment result",
                    extra={"idempotency_key": idempotency_key},
                )
                return cached

            receipt = self._confirm(booking_id, user_id, total_cost)

            now = self._clock()
            self._ledger.put(idempotency_key, receipt, now)
            purged = self._ledger.purge_expired(now)
            if purged:
                logger.debug("Purged expired idempotency keys", extra={"count": purged})

        return receipt

    def _confirm(
        self, booking_id: BookingId, user_id: str, total_cost: Decimal
    ) -> Receipt:
        with self._repository.transaction() as tx:
            booking = self._repository.get(booking_id, tx, for_update=True)
            if booking is None:
                raise ResourceNotFoundException(
                    "Booking not found", booking_id=str(booking_id)
                )

            booking.ensure_can(BookingAction.PAY)

            now = self._clock()
            if booking.is_expired(now):
                # キャンセル側が同じ予約をロックできるよう、先にこのトランザクションを閉じる
                tx.rollback()
                self._expire(booking)
                raise BookingExpiredException(str(booking_id), booking.created_at)

            booking.verify_payment(user_id, total_cost)

            expected_status = booking.status
            booking.confirm(now)
            self._repository.update(booking, tx, expected_status=expected_status)
            tx.commit()

        logger.info(
            "Payment processed",
            extra={"booking_id": str(booking_id), "amount": str(total_cost)},
        )
        return Receipt(
            booking_id=str(booking.id),
            user_id=booking.user_id,
            amount=booking.total_cost,
            status=booking.status,
            paid_at=booking.updated_at,
        )

    def _expire(self, booking: Booking) -> None:
        """期限切れの予約をキャンセル経路で解放する

        失敗しても期限切れエラーは呼び出し側へ返す。残った予約は ExpiryReaper が回収する。
        """
        try:
            self._cancel_service.cancel(booking.id)
        except Exception:
            logger.exception(
                "Failed to cancel expired booking during payment",
                extra={"booking_id": str(booking.id)},
            )
