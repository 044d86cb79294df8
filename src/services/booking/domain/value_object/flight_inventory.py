from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class FlightInventory:
    """フライト在庫サービスから読み取った座席数と単価"""

    flight_id: str
    total_seats: int
    price: Decimal

    def has_capacity_for(self, seats: int) -> bool:
        return seats <= self.total_seats

    def cost_of(self, seats: int) -> Decimal:
        return self.price * seats
