import json

import pytest


@pytest.fixture
def api_event():
    """API Gateway (REST API, Lambda Proxy) のイベントを生成する Factory fixture"""

    def _factory(
        body=None,
        path_parameters: dict | None = None,
        headers: dict | None = None,
        method: str = "POST",
        path: str = "/bookings",
    ) -> dict:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return {
            "resource": path,
            "path": path,
            "httpMethod": method,
            "headers": headers or {},
            "pathParameters": path_parameters,
            "queryStringParameters": None,
            "requestContext": {"requestId": "test-request-id", "stage": "prod"},
            "body": body,
            "isBase64Encoded": False,
        }

    return _factory
