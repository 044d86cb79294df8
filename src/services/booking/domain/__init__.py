from .entity import Booking as Booking
from .enum import BookingAction as BookingAction
from .enum import BookingStatus as BookingStatus
from .factory import BookingDetails as BookingDetails
from .factory import BookingFactory as BookingFactory
from .gateway import FlightInventoryClient as FlightInventoryClient
from .repository import BookingRepository as BookingRepository
from .repository import IdempotencyLedger as IdempotencyLedger
from .state_machine import BookingStateMachine as BookingStateMachine
from .value_object import BookingId as BookingId
from .value_object import CancellationResult as CancellationResult
from .value_object import FlightInventory as FlightInventory
from .value_object import Receipt as Receipt
