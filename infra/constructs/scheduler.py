from aws_cdk import Duration
from aws_cdk import aws_events as events
from aws_cdk import aws_events_targets as targets
from aws_cdk import aws_lambda as _lambda
from constructs import Construct


class Scheduler(Construct):
    """期限切れ予約の回収を定期実行する Construct"""

    def __init__(
        self,
        scope: Construct,
        id: str,
        reaper: _lambda.Function,
        interval: Duration | None = None,
    ) -> None:
        super().__init__(scope, id)

        self.rule = events.Rule(
            self,
            "ReapExpiredBookingsRule",
            description="Cancel INITIATED bookings whose payment window has passed",
            schedule=events.Schedule.rate(interval or Duration.minutes(1)),
        )
        self.rule.add_target(targets.LambdaFunction(reaper, retry_attempts=2))
