import os
from unittest.mock import MagicMock

import pytest

# Handler モジュールは import 時に boto3 リソースとクライアントを生成するため、先に設定する
os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-1")
os.environ.setdefault("TABLE_NAME", "test-booking-table")
os.environ.setdefault("FLIGHT_SERVICE_URL", "http://flight-service.test")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "booking-service-test")


@pytest.fixture
def mock_repository():
    """リポジトリのモックフィクスチャ"""
    return MagicMock()


@pytest.fixture
def lambda_context():
    """Logger.inject_lambda_context が参照する属性を持つ LambdaContext"""
    context = MagicMock()
    context.function_name = "test-function"
    context.memory_limit_in_mb = 128
    context.invoked_function_arn = (
        "arn:aws:lambda:ap-northeast-1:123456789012:function:test-function"
    )
    context.aws_request_id = "test-request-id"
    return context
