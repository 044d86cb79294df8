import datetime

from aws_cdk import Duration
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_lambda as _lambda
from constructs import Construct

SERVICE_NAME = "booking-service"


class Functions(Construct):
    """Lambda 関数を管理する Construct"""

    def __init__(
        self,
        scope: Construct,
        id: str,
        table: dynamodb.Table,
        common_layer: _lambda.LayerVersion,
        flight_service_url: str,
        flight_service_timeout: int = 3,
    ) -> None:
        super().__init__(scope, id)

        self._table = table
        self._common_layer = common_layer
        self._environment = {
            "TABLE_NAME": table.table_name,
            "FLIGHT_SERVICE_URL": flight_service_url,
            "FLIGHT_SERVICE_TIMEOUT": str(flight_service_timeout),
            "POWERTOOLS_SERVICE_NAME": SERVICE_NAME,
            "POWERTOOLS_LOG_LEVEL": "INFO",
            "DEPLOY_TIME": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }

        self.create_booking = self._create_function(
            "CreateBookingLambda",
            "services.booking.handlers.create.lambda_handler",
        )
        self.get_booking = self._create_function(
            "GetBookingLambda",
            "services.booking.handlers.get.lambda_handler",
        )
        self.make_payment = self._create_function(
            "MakePaymentLambda",
            "services.booking.handlers.pay.lambda_handler",
        )
        self.cancel_booking = self._create_function(
            "CancelBookingLambda",
            "services.booking.handlers.cancel.lambda_handler",
        )
        # 1回の起動で複数件をキャンセルするため長めに取る
        self.reap_expired = self._create_function(
            "ReapExpiredBookingsLambda",
            "services.booking.handlers.reap.lambda_handler",
            timeout=Duration.minutes(1),
        )

        for fn in [
            self.create_booking,
            self.make_payment,
            self.cancel_booking,
            self.reap_expired,
        ]:
            table.grant_read_write_data(fn)

        table.grant_read_data(self.get_booking)

    @property
    def all_functions(self) -> list[_lambda.Function]:
        return [
            self.create_booking,
            self.get_booking,
            self.make_payment,
            self.cancel_booking,
            self.reap_expired,
        ]

    def _create_function(
        self,
        id: str,
        handler: str,
        timeout: Duration | None = None,
    ) -> _lambda.Function:
        return _lambda.Function(
            self,
            id,
            runtime=_lambda.Runtime.PYTHON_3_13,
            handler=handler,
            code=_lambda.Code.from_asset("src"),
            layers=[self._common_layer],
            timeout=timeout or Duration.seconds(15),
            environment=self._environment,
        )
