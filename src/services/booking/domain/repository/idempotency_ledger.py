from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime, timedelta

from services.booking.domain.value_object import Receipt


@dataclass(frozen=True)
class IdempotencyRecord:
    """冪等性キーに紐づく成功済み決済の記録"""

    key: str
    outcome: Receipt
    timestamp: datetime

    def is_expired(self, now: datetime, retention: timedelta) -> bool:
        return now - self.timestamp > retention


@dataclass(frozen=True)
class IdempotencyStats:
    """台帳の監視用スナップショット"""

    total_keys: int
    keys: tuple[str, ...]


class IdempotencyLedger(ABC):
    """決済結果の冪等性台帳

    - 成功した決済のみを記録する（失敗した試行は記録しないので、同じキーで再試行できる）
    - lock(key) で同じキーの決済処理を直列化する
    - retention を超えた記録は存在しないものとして扱う
    """

    @property
    @abstractmethod
    def retention(self) -> timedelta:
        raise NotImplementedError

    @abstractmethod
    def lock(self, key: str) -> AbstractContextManager[None]:
        """キー単位の排他区間を返す"""
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str, now: datetime) -> Receipt | None:
        """保持期間内のキャッシュ済み決済結果を返す"""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, receipt: Receipt, now: datetime) -> None:
        """成功した決済結果を記録する"""
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self, now: datetime) -> int:
        """保持期間を過ぎた記録を削除し、削除件数を返す"""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> IdempotencyStats:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """すべての記録を削除する"""
        raise NotImplementedError
