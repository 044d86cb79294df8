import os
from datetime import datetime
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.repository import BookingRepository
from services.booking.domain.value_object import BookingId
from services.booking.infrastructure.dynamodb_transaction import DynamoDBTransaction
from services.shared.domain import OptimisticLockException, Transaction
from services.shared.infrastructure import PersistenceException
from services.shared.utils import Clock, utc_now


def _timestamp(dt: datetime) -> str:
    # GSI1SK の辞書順比較が時刻順と一致するよう桁数を固定する
    return dt.isoformat(timespec="microseconds")


class DynamoDBBookingRepository(BookingRepository):
    """DynamoDB を使用した BookingRepository の具象実装

    シングルテーブル設計:
        PK = "BOOKING#{booking_id}", SK = "BOOKING"
        GSI1PK = "STATUS#{status}", GSI1SK = created_at（ステータス + 経過時間での検索用）
    """

    def __init__(self, table_name: str | None = None, clock: Clock = utc_now) -> None:
        self.table_name = table_name or os.getenv("TABLE_NAME")
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(self.table_name)
        self._clock = clock

    def transaction(self) -> DynamoDBTransaction:
        return DynamoDBTransaction(self.table, clock=self._clock)

    def next_identity(self) -> BookingId:
        return BookingId.generate()

    def create(self, booking: Booking, tx: Transaction) -> None:
        """予約の Put をトランザクションにステージする"""
        dynamo_tx = self._require_dynamodb(tx)
        dynamo_tx.stage(
            str(booking.id),
            {
                "Put": {
                    "TableName": dynamo_tx.table_name,
                    "Item": self._to_item(booking),
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
        )

    def get(
        self, booking_id: BookingId, tx: Transaction, for_update: bool = False
    ) -> Booking | None:
        """トランザクション内で予約を取得する"""
        dynamo_tx = self._require_dynamodb(tx)
        if for_update and not dynamo_tx.lock(str(booking_id), self._key(booking_id)):
            if self.find_by_id(booking_id) is None:
                return None
            raise OptimisticLockException(
                "Booking is being modified by another operation",
                booking_id=str(booking_id),
            )
        return self.find_by_id(booking_id)

    def find_by_id(self, booking_id: BookingId) -> Booking | None:
        """予約IDで検索"""
        try:
            response = self.table.get_item(
                Key=self._key(booking_id),
                ConsistentRead=True,
            )
        except ClientError as e:
            raise PersistenceException(
                "Failed to read booking", booking_id=str(booking_id)
            ) from e
        item = response.get("Item")
        if not item:
            return None
        return self._to_entity(item)

    def update(
        self, booking: Booking, tx: Transaction, expected_status: BookingStatus
    ) -> None:
        """ステータス更新をトランザクションにステージする"""
        dynamo_tx = self._require_dynamodb(tx)
        booking_id = str(booking.id)

        condition = "#status = :expected"
        values: dict = {
            ":status": booking.status.value,
            ":expected": expected_status.value,
            ":updated_at": _timestamp(booking.updated_at),
            ":gsi1pk": f"STATUS#{booking.status.value}",
        }
        update_expression = (
            "SET #status = :status, updated_at = :updated_at, GSI1PK = :gsi1pk"
        )
        if dynamo_tx.holds_lock(booking_id):
            condition += " AND lock_owner = :owner"
            values[":owner"] = dynamo_tx.id
            update_expression += " REMOVE lock_owner, lock_expires_at"

        dynamo_tx.stage(
            booking_id,
            {
                "Update": {
                    "TableName": dynamo_tx.table_name,
                    "Key": self._key(booking.id),
                    "UpdateExpression": update_expression,
                    "ConditionExpression": condition,
                    "ExpressionAttributeNames": {"#status": "status"},
                    "ExpressionAttributeValues": values,
                }
            },
        )

    def list_by_status_before(
        self, status: BookingStatus, cutoff: datetime
    ) -> list[Booking]:
        """GSI1 を使い、指定ステータスで cutoff より前に作成された予約を検索する"""
        kwargs: dict = {
            "IndexName": "GSI1",
            "KeyConditionExpression": Key("GSI1PK").eq(f"STATUS#{status.value}")
            & Key("GSI1SK").lt(_timestamp(cutoff)),
        }
        bookings: list[Booking] = []
        try:
            while True:
                response = self.table.query(**kwargs)
                bookings.extend(self._to_entity(i) for i in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            raise PersistenceException(
                "Failed to query bookings", status=status.value
            ) from e
        return bookings

    @staticmethod
    def _require_dynamodb(tx: Transaction) -> DynamoDBTransaction:
        if not isinstance(tx, DynamoDBTransaction):
            raise TypeError(f"Expected DynamoDBTransaction, got {type(tx).__name__}")
        return tx

    @staticmethod
    def _key(booking_id: BookingId) -> dict:
        return {"PK": f"BOOKING#{booking_id}", "SK": "BOOKING"}

    def _to_item(self, booking: Booking) -> dict:
        return {
            **self._key(booking.id),
            "entity_type": "BOOKING",
            "booking_id": str(booking.id),
            "flight_id": booking.flight_id,
            "user_id": booking.user_id,
            "status": booking.status.value,
            "no_of_seats": booking.no_of_seats,
            "total_cost": str(booking.total_cost),
            "created_at": _timestamp(booking.created_at),
            "updated_at": _timestamp(booking.updated_at),
            "GSI1PK": f"STATUS#{booking.status.value}",
            "GSI1SK": _timestamp(booking.created_at),
        }

    def _to_entity(self, item: dict) -> Booking:
        """DynamoDB アイテムをドメインエンティティに変換する"""
        return Booking(
            id=BookingId(value=item["booking_id"]),
            flight_id=item["flight_id"],
            user_id=item["user_id"],
            no_of_seats=int(item["no_of_seats"]),
            total_cost=Decimal(item["total_cost"]),
            status=BookingStatus(item["status"]),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )
