from datetime import datetime
from typing import TypedDict

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingAction
from services.booking.domain.exception import InsufficientSeatsException
from services.booking.domain.state_machine import BookingStateMachine
from services.booking.domain.value_object import BookingId, FlightInventory


class BookingDetails(TypedDict):
    """予約作成の入力データ構造"""

    flight_id: str
    user_id: str
    no_of_seats: int


class BookingFactory:
    """予約エンティティのファクトリ

    - 空席数の検証
    - 料金の計算（座席数 × 単価）
    - 初期ステータスの決定
    """

    def create(
        self,
        booking_id: BookingId,
        flight: FlightInventory,
        details: BookingDetails,
        now: datetime,
    ) -> Booking:
        """新規予約エンティティを生成する

        Args:
            booking_id: レコードストアが採番した予約ID
            flight: 在庫サービスから取得したフライト情報
            details: 予約の入力データ
            now: 作成時刻（決済期限の起点）

        Returns:
            Booking: INITIATED 状態の予約エンティティ
        """
        no_of_seats = details["no_of_seats"]
        if not flight.has_capacity_for(no_of_seats):
            raise InsufficientSeatsException(
                flight_id=flight.flight_id,
                requested=no_of_seats,
                available=flight.total_seats,
            )

        return Booking(
            id=booking_id,
            flight_id=details["flight_id"],
            user_id=details["user_id"],
            no_of_seats=no_of_seats,
            total_cost=flight.cost_of(no_of_seats),
            created_at=now,
            status=BookingStateMachine.next_status(None, BookingAction.CREATE),
        )
