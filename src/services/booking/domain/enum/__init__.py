from .booking_action import BookingAction as BookingAction
from .booking_status import BookingStatus as BookingStatus
