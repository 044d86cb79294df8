from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.get_booking import GetBookingService
from services.booking.domain.value_object import BookingId
from services.booking.handlers.response_models import booking_to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.shared.utils import api_response, error_response, require_path_parameter

logger = Logger()

repository = DynamoDBBookingRepository()
service = GetBookingService(repository=repository)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEvent)
def lambda_handler(event: APIGatewayProxyEvent, context: LambdaContext) -> dict:
    """予約詳細取得 Lambda Handler (GET /bookings/{booking_id})"""
    try:
        booking_id = BookingId(value=require_path_parameter(event, "booking_id"))
        logger.info("Fetching booking", extra={"booking_id": str(booking_id)})
        booking = service.get(booking_id)
    except Exception as e:
        return error_response(e)

    message = f"Booking {booking_id} retrieved successfully"
    return api_response(200, booking_to_response(booking, message))
