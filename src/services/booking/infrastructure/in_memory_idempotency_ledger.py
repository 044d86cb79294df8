import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from services.booking.domain.constants import IDEMPOTENCY_RETENTION
from services.booking.domain.repository import (
    IdempotencyLedger,
    IdempotencyRecord,
    IdempotencyStats,
)
from services.booking.domain.value_object import Receipt


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class InMemoryIdempotencyLedger(IdempotencyLedger):
    """プロセス内の冪等性台帳

    単一プロセスで動かす場合に使用する。複数インスタンスで動かす場合は
    DynamoDBIdempotencyLedger を使わないと二重決済が起こり得る。
    """

    def __init__(self, retention: timedelta = IDEMPOTENCY_RETENTION) -> None:
        self._retention = retention
        self._records: dict[str, IdempotencyRecord] = {}
        self._key_locks: dict[str, _KeyLock] = {}
        self._guard = threading.Lock()

    @property
    def retention(self) -> timedelta:
        return self._retention

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._key_locks.setdefault(key, _KeyLock())
            entry.holders += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._key_locks[key]

    def get(self, key: str, now: datetime) -> Receipt | None:
        with self._guard:
            record = self._records.get(key)
        if record is None or record.is_expired(now, self._retention):
            return None
        return record.outcome

    def put(self, key: str, receipt: Receipt, now: datetime) -> None:
        with self._guard:
            self._records[key] = IdempotencyRecord(
                key=key, outcome=receipt, timestamp=now
            )

    def purge_expired(self, now: datetime) -> int:
        with self._guard:
            expired = [
                key
                for key, record in self._records.items()
                if record.is_expired(now, self._retention)
            ]
            for key in expired:
                del self._records[key]
        return len(expired)

    def stats(self) -> IdempotencyStats:
        with self._guard:
            keys = tuple(self._records)
        return IdempotencyStats(total_keys=len(keys), keys=keys)

    def clear(self) -> None:
        with self._guard:
            self._records.clear()
