from .booking_id import BookingId as BookingId
from .cancellation_result import CancellationResult as CancellationResult
from .flight_inventory import FlightInventory as FlightInventory
from .receipt import Receipt as Receipt
