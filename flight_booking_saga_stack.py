from aws_cdk import CfnOutput, Stack
from constructs import Construct

from infra.constructs import Api, Database, Functions, Layers, Scheduler

DEFAULT_FLIGHT_SERVICE_URL = "http://localhost:3000"


class FlightBookingSagaStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        flight_service_url = (
            self.node.try_get_context("flight_service_url")
            or DEFAULT_FLIGHT_SERVICE_URL
        )

        database = Database(self, "Database")
        layers = Layers(self, "Layers")

        fns = Functions(
            self,
            "Functions",
            table=database.table,
            common_layer=layers.common_layer,
            flight_service_url=flight_service_url,
        )

        api = Api(self, "Api", functions=fns)

        Scheduler(self, "Scheduler", reaper=fns.reap_expired)

        CfnOutput(self, "ApiUrl", value=api.rest_api.url)
        CfnOutput(self, "TableName", value=database.table.table_name)
