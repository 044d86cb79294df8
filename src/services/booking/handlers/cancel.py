from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.domain.value_object import BookingId
from services.booking.handlers.response_models import cancellation_to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.http_flight_inventory_client import (
    HttpFlightInventoryClient,
)
from services.shared.utils import api_response, error_response, require_path_parameter

logger = Logger()

repository = DynamoDBBookingRepository()
inventory = HttpFlightInventoryClient()
service = CancelBookingService(repository=repository, inventory=inventory)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEvent)
def lambda_handler(event: APIGatewayProxyEvent, context: LambdaContext) -> dict:
    """予約キャンセル Lambda Handler (POST /bookings/{booking_id}/cancel)"""
    try:
        booking_id = BookingId(value=require_path_parameter(event, "booking_id"))
        logger.info(
            "Received cancel booking request", extra={"booking_id": str(booking_id)}
        )
        result = service.cancel(booking_id)
    except Exception as e:
        return error_response(e)

    return api_response(200, cancellation_to_response(result))
