from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.cancel_booking import CancelBookingService
from services.booking.applications.make_payment import MakePaymentService
from services.booking.domain.value_object import BookingId
from services.booking.handlers.request_models import MakePaymentRequest
from services.booking.handlers.response_models import receipt_to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.dynamodb_idempotency_ledger import (
    DynamoDBIdempotencyLedger,
)
from services.booking.infrastructure.http_flight_inventory_client import (
    HttpFlightInventoryClient,
)
from services.shared.utils import api_response, error_response, parse_body

IDEMPOTENCY_HEADER = "x-idempotency-key"

logger = Logger()

repository = DynamoDBBookingRepository()
inventory = HttpFlightInventoryClient()
# Lambda は複数インスタンスで動くため、冪等性台帳は DynamoDB で共有する
ledger = DynamoDBIdempotencyLedger()
service = MakePaymentService(
    repository=repository,
    ledger=ledger,
    cancel_service=CancelBookingService(repository=repository, inventory=inventory),
)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEvent)
def lambda_handler(event: APIGatewayProxyEvent, context: LambdaContext) -> dict:
    """決済 Lambda Handler (POST /bookings/payments)"""
    idempotency_key = event.get_header_value(IDEMPOTENCY_HEADER, case_sensitive=False)
    logger.info(
        "Received payment request", extra={"idempotency_key": idempotency_key}
    )

    try:
        request = MakePaymentRequest.model_validate(parse_body(event))
        receipt = service.pay(
            booking_id=BookingId(value=request.booking_id),
            user_id=request.user_id,
            total_cost=request.total_cost,
            idempotency_key=idempotency_key,
        )
    except Exception as e:
        return error_response(e)

    return api_response(200, receipt_to_response(receipt))
