from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.create_booking import CreateBookingService
from services.booking.domain.factory import BookingFactory
from services.booking.handlers.request_models import CreateBookingRequest
from services.booking.handlers.response_models import booking_to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.http_flight_inventory_client import (
    HttpFlightInventoryClient,
)
from services.shared.utils import api_response, error_response, parse_body

logger = Logger()

repository = DynamoDBBookingRepository()
inventory = HttpFlightInventoryClient()
service = CreateBookingService(
    repository=repository, inventory=inventory, factory=BookingFactory()
)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEvent)
def lambda_handler(event: APIGatewayProxyEvent, context: LambdaContext) -> dict:
    """予約作成 Lambda Handler (POST /bookings)"""
    logger.info("Received create booking request")

    try:
        request = CreateBookingRequest.model_validate(parse_body(event))
        booking = service.create(
            flight_id=request.flight_id,
            user_id=request.user_id,
            no_of_seats=request.no_of_seats,
        )
    except Exception as e:
        return error_response(e)

    return api_response(
        201, booking_to_response(booking, "Booking created successfully")
    )
