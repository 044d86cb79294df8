from aws_lambda_powertools import Logger

from services.booking.domain.entity import Booking
from services.booking.domain.factory import BookingDetails, BookingFactory
from services.booking.domain.gateway import FlightInventoryClient
from services.booking.domain.repository import BookingRepository
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)


class CreateBookingService:
    """予約作成サービス

    1. 在庫サービスから座席数と単価を取得する（副作用なし）
    2. 予約を INITIATED でステージする
    3. 在庫サービスで座席を確保する
    4. 確保が成功した場合のみコミットする

    座席確保に失敗した場合はロールバックし、予約レコードは残らない。
    """

    def __init__(
        self,
        repository: BookingRepository,
        inventory: FlightInventoryClient,
        factory: BookingFactory,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._inventory = inventory
        self._factory = factory
        self._clock = clock

    def create(self, flight_id: str, user_id: str, no_of_seats: int) -> Booking:
        """予約を作成し、座席を確保する"""
        flight = self._inventory.get_flight(flight_id)
        details: BookingDetails = {
            "flight_id": flight_id,
            "user_id": user_id,
            "no_of_seats": no_of_seats,
        }
        booking = self._factory.create(
            self._repository.next_identity(), flight, details, self._clock()
        )

        with self._repository.transaction() as tx:
            self._repository.create(booking, tx)

            self._inventory.reserve_seats(flight_id, no_of_seats)

            try:
                tx.commit()
            except Exception:
                self._compensate_reservation(booking)
                raise

        logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "flight_id": flight_id,
                "no_of_seats": no_of_seats,
                "total_cost": str(booking.total_cost),
            },
        )
        return booking

    def _compensate_reservation(self, booking: Booking) -> None:
        """補償アクション: コミットできなかった予約の座席を返却する"""
        logger.error(
            "Booking commit failed after seats were reserved",
            extra={"booking_id": str(booking.id), "flight_id": booking.flight_id},
        )
        try:
            self._inventory.release_seats(booking.flight_id, booking.no_of_seats)
        except Exception:
            logger.exception(
                "Failed to release seats of an uncommitted booking",
                extra={"booking_id": str(booking.id), "seats": booking.no_of_seats},
            )
