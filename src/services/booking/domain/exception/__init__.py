from .exceptions import BookingExpiredException as BookingExpiredException
from .exceptions import InsufficientSeatsException as InsufficientSeatsException
