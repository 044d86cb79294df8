from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent

from services.shared.domain.exception import BusinessRuleViolationException


def parse_body(event: APIGatewayProxyEvent) -> dict:
    """リクエストボディを JSON オブジェクトとして取り出す

    不正な JSON の場合は json.JSONDecodeError がそのまま送出される。
    """
    if not event.body:
        raise BusinessRuleViolationException("Request body is empty or missing")
    body = event.json_body
    if not isinstance(body, dict):
        raise BusinessRuleViolationException("Request body must be a JSON object")
    return body


def require_path_parameter(event: APIGatewayProxyEvent, name: str) -> str:
    value = (event.path_parameters or {}).get(name)
    if not value:
        raise BusinessRuleViolationException(f"{name} is required")
    return value
