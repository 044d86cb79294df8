from aws_cdk import aws_apigateway as apigw
from constructs import Construct

from infra.constructs.functions import Functions


class Api(Construct):
    """API Gateway Construct

    POST /bookings                      -> 予約作成
    GET  /bookings/{booking_id}         -> 予約参照
    POST /bookings/payments             -> 決済（x-idempotency-key ヘッダー必須）
    POST /bookings/{booking_id}/cancel  -> キャンセル
    """

    def __init__(self, scope: Construct, id: str, functions: Functions) -> None:
        super().__init__(scope, id)

        self.rest_api = apigw.RestApi(
            self,
            "BookingRestApi",
            rest_api_name="Flight Booking API",
            deploy_options=apigw.StageOptions(
                stage_name="prod",
                throttling_burst_limit=20,
                throttling_rate_limit=10,
            ),
        )

        bookings = self.rest_api.root.add_resource("bookings")
        bookings.add_method("POST", apigw.LambdaIntegration(functions.create_booking))

        payments = bookings.add_resource("payments")
        payments.add_method(
            "POST",
            apigw.LambdaIntegration(functions.make_payment),
            request_parameters={
                "method.request.header.x-idempotency-key": True,
            },
        )

        booking = bookings.add_resource("{booking_id}")
        booking.add_method("GET", apigw.LambdaIntegration(functions.get_booking))

        cancel = booking.add_resource("cancel")
        cancel.add_method("POST", apigw.LambdaIntegration(functions.cancel_booking))
