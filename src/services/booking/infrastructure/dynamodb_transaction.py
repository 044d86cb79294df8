import uuid
from datetime import datetime, timedelta

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from services.shared.domain import OptimisticLockException, Transaction
from services.shared.infrastructure import PersistenceException
from services.shared.utils import Clock, utc_now

logger = Logger(child=True)

# 行ロックのリース期間。在庫サービスのタイムアウトより十分長くする
LOCK_LEASE = timedelta(seconds=30)


def _epoch(dt: datetime) -> int:
    return int(dt.timestamp())


class DynamoDBTransaction(Transaction):
    """DynamoDB 上のローカルトランザクション

    - 書き込みは TransactItems としてバッファし、commit 時に TransactWriteItems で一括確定する
    - lock() はアイテム自体にリース（lock_owner / lock_expires_at）を書き込む行ロック
    - rollback はバッファを破棄し、取得したリースを解放する
    """

    def __init__(self, table, clock: Clock = utc_now) -> None:
        super().__init__()
        self.id = uuid.uuid4().hex
        self._table = table
        self._client = table.meta.client
        self._clock = clock
        self._items: list[dict] = []
        self._written: set[str] = set()
        self._locks: dict[str, dict] = {}

    @property
    def table_name(self) -> str:
        return self._table.name

    def holds_lock(self, lock_id: str) -> bool:
        return lock_id in self._locks

    def lock(self, lock_id: str, key: dict) -> bool:
        """アイテムのリースを取得する

        Returns:
            True: 取得成功 / False: 他のトランザクションが保持中、またはアイテムが存在しない
        """
        if lock_id in self._locks:
            return True

        now = self._clock()
        try:
            self._table.update_item(
                Key=key,
                UpdateExpression="SET lock_owner = :owner, lock_expires_at = :expires",
                ConditionExpression=(
                    "attribute_exists(PK) AND "
                    "(attribute_not_exists(lock_owner) OR lock_expires_at < :now)"
                ),
                ExpressionAttributeValues={
                    ":owner": self.id,
                    ":expires": _epoch(now + LOCK_LEASE),
                    ":now": _epoch(now),
                },
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise PersistenceException("Failed to lock booking record") from e

        self._locks[lock_id] = key
        return True

    def stage(self, lock_id: str, transact_item: dict) -> None:
        """TransactWriteItems の1要素をバッファに追加する"""
        if not self.is_active:
            raise RuntimeError("Transaction has already been completed")
        self._items.append(transact_item)
        self._written.add(lock_id)

    def _release_item(self, key: dict) -> dict:
        return {
            "Update": {
                "TableName": self.table_name,
                "Key": key,
                "UpdateExpression": "REMOVE lock_owner, lock_expires_at",
                "ConditionExpression": "lock_owner = :owner",
                "ExpressionAttributeValues": {":owner": self.id},
            }
        }

    def _do_commit(self) -> None:
        items = list(self._items)
        # 書き込みを伴わないロックもコミットと同時に解放する
        for lock_id, key in self._locks.items():
            if lock_id not in self._written:
                items.append(self._release_item(key))

        if not items:
            return

        try:
            self._client.transact_write_items(TransactItems=items)
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                raise OptimisticLockException(
                    "Booking was modified by another operation",
                    transaction_id=self.id,
                ) from e
            raise PersistenceException("Failed to commit booking transaction") from e

        self._items.clear()
        self._locks.clear()

    def _do_rollback(self) -> None:
        self._items.clear()
        for key in self._locks.values():
            try:
                self._table.update_item(
                    Key=key,
                    UpdateExpression="REMOVE lock_owner, lock_expires_at",
                    ConditionExpression="lock_owner = :owner",
                    ExpressionAttributeValues={":owner": self.id},
                )
            except ClientError:
                # 解放できなくてもリース期限で自然に失効する
                logger.warning(
                    "Failed to release booking lock",
                    extra={"key": key, "transaction_id": self.id},
                    exc_info=True,
                )
        self._locks.clear()
