from aws_lambda_powertools import Logger

from services.booking.domain.gateway import FlightInventoryClient
from services.booking.domain.repository import BookingRepository
from services.booking.domain.value_object import BookingId, CancellationResult
from services.shared.domain import ResourceNotFoundException
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)


class CancelBookingService:
    """予約キャンセルサービス

    1. 予約を CANCELLED に遷移させてステージする
    2. 補償アクション: 確保済みの座席を在庫サービスへ返却する
    3. 返却が成功した場合のみコミットする

    返却に失敗した場合は全体をロールバックするため、予約はキャンセル前の状態に残り、
    呼び出し側はキャンセル全体を再試行できる。
    """

    def __init__(
        self,
        repository: BookingRepository,
        inventory: FlightInventoryClient,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._inventory = inventory
        self._clock = clock

    def cancel(self, booking_id: BookingId) -> CancellationResult:
        """予約をキャンセルし、座席を返却する"""
        with self._repository.transaction() as tx:
            booking = self._repository.get(booking_id, tx, for_update=True)
            if booking is None:
                raise ResourceNotFoundException(
                    "Booking not found", booking_id=str(booking_id)
                )

            expected_status = booking.status
            # CANCELLED などからの遷移はここで拒否され、在庫サービスには到達しない
            booking.cancel(self._clock())
            self._repository.update(booking, tx, expected_status=expected_status)

            self._inventory.release_seats(booking.flight_id, booking.no_of_seats)

            try:
                tx.commit()
            except Exception:
                self._compensate_release(booking.flight_id, booking.no_of_seats)
                raise

        logger.info(
            "Booking cancelled",
            extra={
                "booking_id": str(booking_id),
                "previous_status": expected_status.value,
                "seats_released": booking.no_of_seats,
            },
        )
        return CancellationResult(
            booking_id=str(booking_id),
            status=booking.status,
            seats_released=booking.no_of_seats,
        )

    def _compensate_release(self, flight_id: str, seats: int) -> None:
        """コミットに失敗した場合、返却した座席を確保し直して再試行に備える"""
        logger.error(
            "Booking cancellation commit failed after seats were released",
            extra={"flight_id": flight_id, "seats": seats},
        )
        try:
            self._inventory.reserve_seats(flight_id, seats)
        except Exception:
            logger.exception(
                "Failed to re-reserve released seats",
                extra={"flight_id": flight_id, "seats": seats},
            )
