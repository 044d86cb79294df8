from abc import abstractmethod
from datetime import datetime

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.value_object import BookingId
from services.shared.domain import Repository, Transaction


class BookingRepository(Repository[Booking, BookingId]):
    """予約レコードストア

    書き込みはすべて呼び出し側のトランザクションにステージされ、commit 時に確定する。
    """

    @abstractmethod
    def create(self, booking: Booking, tx: Transaction) -> None:
        """新規予約を書き込む"""
        raise NotImplementedError

    @abstractmethod
    def get(
        self, booking_id: BookingId, tx: Transaction, for_update: bool = False
    ) -> Booking | None:
        """トランザクション内で予約を取得する

        for_update=True の場合、トランザクション終了まで他の処理による更新を排他する。
        """
        raise NotImplementedError

    @abstractmethod
    def update(
        self, booking: Booking, tx: Transaction, expected_status: BookingStatus
    ) -> None:
        """予約のステータスを更新する（expected_status からの遷移であることを条件とする）"""
        raise NotImplementedError

    @abstractmethod
    def list_by_status_before(
        self, status: BookingStatus, cutoff: datetime
    ) -> list[Booking]:
        """指定ステータスで cutoff より前に作成された予約を返す"""
        raise NotImplementedError
