from abc import ABC, abstractmethod

from services.booking.domain.value_object import FlightInventory


class FlightInventoryClient(ABC):
    """フライト在庫サービス（座席数の正本を持つリモートサービス）のインターフェース

    座席の確保と返却は、サガの前進ステップと補償アクションの組になる。
    """

    @abstractmethod
    def get_flight(self, flight_id: str) -> FlightInventory:
        """座席数と単価を取得する（副作用なし）"""
        raise NotImplementedError

    @abstractmethod
    def reserve_seats(self, flight_id: str, seats: int) -> None:
        """空席数を減らす"""
        raise NotImplementedError

    @abstractmethod
    def release_seats(self, flight_id: str, seats: int) -> None:
        """空席数を戻す（reserve_seats の補償アクション）"""
        raise NotImplementedError
