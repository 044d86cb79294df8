import os
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

import boto3
from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from services.booking.domain.constants import IDEMPOTENCY_RETENTION
from services.booking.domain.repository import IdempotencyLedger, IdempotencyStats
from services.booking.domain.value_object import Receipt
from services.shared.domain import OptimisticLockException
from services.shared.infrastructure import PersistenceException
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)

STATUS_IN_PROGRESS = "INPROGRESS"
STATUS_COMPLETED = "COMPLETED"


def _epoch(dt: datetime) -> int:
    return int(dt.timestamp())


class DynamoDBIdempotencyLedger(IdempotencyLedger):
    """DynamoDB を使用した冪等性台帳（複数インスタンス間で共有）

    - lock(key): 条件付き Put で INPROGRESS レコードを書き込み、キーを占有する
      占有中のキーは完了するか in_progress_expiration を過ぎるまで待機する
    - put(key): COMPLETED レコードで上書きし、Receipt を保存する
    - 保持期間の削除はテーブルの TTL（expiration 属性）に任せ、読み取り時にも期限を判定する
    """

    def __init__(
        self,
        table_name: str | None = None,
        retention: timedelta = IDEMPOTENCY_RETENTION,
        in_progress_lease: timedelta = timedelta(seconds=30),
        wait_timeout: float = 10.0,
        poll_interval: float = 0.2,
        clock: Clock = utc_now,
    ) -> None:
        self.table_name = table_name or os.getenv("TABLE_NAME")
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(self.table_name)
        self._retention = retention
        self._in_progress_lease = in_progress_lease
        self._wait_timeout = wait_timeout
        self._poll_interval = poll_interval
        self._clock = clock

    @property
    def retention(self) -> timedelta:
        return self._retention

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        token = uuid.uuid4().hex
        owned = self._acquire(key, token)
        try:
            yield
        finally:
            if owned:
                self._release(key, token)

    def _acquire(self, key: str, token: str) -> bool:
        """キーを占有する。完了済みレコードがある場合は占有せずに False を返す"""
        deadline = time.monotonic() + self._wait_timeout
        while True:
            now = self._clock()
            try:
                self.table.put_item(
                    Item={
                        **self._key(key),
                        "entity_type": "IDEMPOTENCY",
                        "idempotency_key": key,
                        "status": STATUS_IN_PROGRESS,
                        "lock_owner": token,
                        "in_progress_expiration": _epoch(now + self._in_progress_lease),
                        "expiration": _epoch(now + self._retention),
                    },
                    ConditionExpression=Attr("PK").not_exists()
                    | Attr("expiration").lt(_epoch(now))
                    | (
                        Attr("status").eq(STATUS_IN_PROGRESS)
                        & Attr("in_progress_expiration").lt(_epoch(now))
                    ),
                )
                return True
            except ClientError as e:
                if e.response["Error"]["Code"] != "ConditionalCheckFailedException":
                    raise PersistenceException(
                        "Failed to lock idempotency key", idempotency_key=key
                    ) from e

            item = self._get_item(key)
            if item is not None and item.get("status") == STATUS_COMPLETED:
                return False
            if time.monotonic() >= deadline:
                raise OptimisticLockException(
                    "A payment with this idempotency key is already in progress",
                    idempotency_key=key,
                )
            time.sleep(self._poll_interval)

    def _release(self, key: str, token: str) -> None:
        """INPROGRESS のまま残った自分のレコードを削除する（完了済みなら何もしない）"""
        try:
            self.table.delete_item(
                Key=self._key(key),
                ConditionExpression=Attr("status").eq(STATUS_IN_PROGRESS)
                & Attr("lock_owner").eq(token),
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return
            # 削除できなくても in_progress_expiration を過ぎれば再取得できる
            logger.warning(
                "Failed to release idempotency key",
                extra={"idempotency_key": key},
                exc_info=True,
            )

    def get(self, key: str, now: datetime) -> Receipt | None:
        item = self._get_item(key)
        if item is None or item.get("status") != STATUS_COMPLETED:
            return None
        stored_at = datetime.fromisoformat(item["timestamp"])
        if now - stored_at > self._retention:
            return None
        return Receipt.from_dict(item["receipt"])

    def put(self, key: str, receipt: Receipt, now: datetime) -> None:
        try:
            self.table.put_item(
                Item={
                    **self._key(key),
                    "entity_type": "IDEMPOTENCY",
                    "idempotency_key": key,
                    "status": STATUS_COMPLETED,
                    "receipt": receipt.to_dict(),
                    "timestamp": now.isoformat(),
                    "expiration": _epoch(now + self._retention),
                }
            )
        except ClientError as e:
            raise PersistenceException(
                "Failed to store payment result", idempotency_key=key
            ) from e

    def purge_expired(self, now: datetime) -> int:
        # 期限切れレコードの物理削除は TTL が行う。get() は期限を見て無視する
        return 0

    def stats(self) -> IdempotencyStats:
        keys = tuple(
            item["idempotency_key"]
            for item in self._scan_records()
            if item.get("status") == STATUS_COMPLETED
        )
        return IdempotencyStats(total_keys=len(keys), keys=keys)

    def clear(self) -> None:
        with self.table.batch_writer() as batch:
            for item in self._scan_records():
                batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})

    def _scan_records(self) -> list[dict]:
        kwargs: dict = {
            "FilterExpression": Attr("entity_type").eq("IDEMPOTENCY"),
            "ProjectionExpression": "PK, SK, idempotency_key, #status",
            "ExpressionAttributeNames": {"#status": "status"},
        }
        items: list[dict] = []
        try:
            while True:
                response = self.table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            raise PersistenceException("Failed to scan idempotency records") from e
        return items

    def _get_item(self, key: str) -> dict | None:
        try:
            response = self.table.get_item(Key=self._key(key), ConsistentRead=True)
        except ClientError as e:
            raise PersistenceException(
                "Failed to read idempotency record", idempotency_key=key
            ) from e
        return response.get("Item")

    @staticmethod
    def _key(key: str) -> dict:
        return {"PK": f"IDEMPOTENCY#{key}", "SK": "IDEMPOTENCY"}
