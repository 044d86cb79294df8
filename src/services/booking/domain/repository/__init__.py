from .booking_repository import BookingRepository as BookingRepository
from .idempotency_ledger import IdempotencyLedger as IdempotencyLedger
from .idempotency_ledger import IdempotencyRecord as IdempotencyRecord
from .idempotency_ledger import IdempotencyStats as IdempotencyStats
