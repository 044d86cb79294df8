from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.applications.reap_expired_bookings import (
    ReapExpiredBookingsService,
)
from services.booking.handlers.response_models import batch_to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.http_flight_inventory_client import (
    HttpFlightInventoryClient,
)

logger = Logger()

repository = DynamoDBBookingRepository()
inventory = HttpFlightInventoryClient()
service = ReapExpiredBookingsService(
    repository=repository,
    cancel_service=CancelBookingService(repository=repository, inventory=inventory),
)


@logger.inject_lambda_context
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    """期限切れ予約回収 Lambda Handler（EventBridge のスケジュールから起動）

    候補の検索に失敗した場合は例外をそのまま送出し、呼び出しを失敗として扱わせる。
    """
    logger.info("Starting expired booking sweep")

    try:
        result = service.reap()
    except Exception:
        logger.exception("Failed to query expired bookings")
        raise

    return batch_to_response(result)
