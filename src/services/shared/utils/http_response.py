import json

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from services.shared.domain.exception import (
    BusinessRuleViolationException,
    ConflictException,
    DomainException,
    ResourceNotFoundException,
)
from services.shared.infrastructure import UpstreamServiceException

logger = Logger(child=True)


def api_response(status_code: int, body: dict) -> dict:
    """API Gateway REST API (Lambda Proxy) のレスポンス形式を生成する"""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def success_body(message: str, data: dict) -> dict:
    return {"success": True, "message": message, "data": data, "error": {}}


def error_body(message: str, error: dict | None = None) -> dict:
    return {"success": False, "message": message, "data": {}, "error": error or {}}


def _domain_status_code(error: DomainException) -> int:
    if isinstance(error, ResourceNotFoundException):
        return 404
    if isinstance(error, ConflictException):
        return 409
    if isinstance(error, BusinessRuleViolationException):
        return 400
    return 422


def error_response(error: Exception) -> dict:
    """例外を HTTP レスポンスに変換する

    - ドメイン例外: メッセージと context をそのまま返す
    - 入力値エラー: 400
    - インフラ・想定外の例外: 詳細は隠してログにのみ出力する
    """
    if isinstance(error, ValidationError):
        details = [
            {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
            for e in error.errors()
        ]
        return api_response(
            400, error_body("Invalid request", {"details": details})
        )

    if isinstance(error, json.JSONDecodeError):
        return api_response(400, error_body("Request body is not valid JSON"))

    if isinstance(error, DomainException):
        status_code = _domain_status_code(error)
        logger.info(
            "Request rejected",
            extra={"reason": error.message, "status_code": status_code},
        )
        return api_response(
            status_code,
            error_body(
                error.message,
                {"type": type(error).__name__, "context": error.context},
            ),
        )

    if isinstance(error, UpstreamServiceException):
        logger.exception("Flight service call failed")
        return api_response(502, error_body("Flight service is unavailable"))

    logger.exception("Unhandled error while processing request")
    return api_response(500, error_body("Internal server error"))
