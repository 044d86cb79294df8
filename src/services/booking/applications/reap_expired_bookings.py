from __future__ import annotations

from dataclasses import dataclass, field

from aws_lambda_powertools import Logger

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.domain.constants import BOOKING_PAYMENT_WINDOW
from services.booking.domain.enum import BookingStatus
from services.booking.domain.repository import BookingRepository
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)


@dataclass(frozen=True)
class ReapOutcome:
    """1件の期限切れ予約に対する処理結果"""

    booking_id: str
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """期限切れ予約の一括キャンセル結果"""

    total: int
    succeeded: int
    failed: int
    results: list[ReapOutcome] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.total == 0:
            return "No expired bookings to cancel"
        return f"Processed {self.total} expired bookings"

    @classmethod
    def from_outcomes(cls, outcomes: list[ReapOutcome]) -> BatchResult:
        succeeded = sum(1 for o in outcomes if o.succeeded)
        return cls(
            total=len(outcomes),
            succeeded=succeeded,
            failed=len(outcomes) - succeeded,
            results=outcomes,
        )


class ReapExpiredBookingsService:
    """期限切れ予約の回収（ExpiryReaper）

    決済期限を過ぎた INITIATED の予約を通常のキャンセル経路で1件ずつキャンセルする。
    各予約は独立したトランザクションで処理し、1件の失敗で全体を中断しない。
    候補の検索自体が失敗した場合のみ例外を送出する。
    """

    def __init__(
        self,
        repository: BookingRepository,
        cancel_service: CancelBookingService,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._cancel_service = cancel_service
        self._clock = clock

    def reap(self) -> BatchResult:
        cutoff = self._clock() - BOOKING_PAYMENT_WINDOW
        candidates = self._repository.list_by_status_before(
            BookingStatus.INITIATED, cutoff
        )

        outcomes: list[ReapOutcome] = []
        for booking in candidates:
            try:
                self._cancel_service.cancel(booking.id)
            except Exception as e:
                logger.warning(
                    "Failed to cancel expired booking",
                    extra={"booking_id": str(booking.id), "error": str(e)},
                    exc_info=True,
                )
                outcomes.append(
                    ReapOutcome(
                        booking_id=str(booking.id), succeeded=False, error=str(e)
                    )
                )
                continue
            outcomes.append(ReapOutcome(booking_id=str(booking.id), succeeded=True))

        result = BatchResult.from_outcomes(outcomes)
        logger.info(
            "Expired booking sweep finished",
            extra={
                "cutoff": cutoff.isoformat(),
                "total": result.total,
                "succeeded": result.succeeded,
                "failed": result.failed,
            },
        )
        return result
