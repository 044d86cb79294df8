from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class Transaction(ABC):
    """ローカルトランザクションの境界

    with 文で使用する。commit() されないままブロックを抜けた場合
    （例外の送出を含む）は必ず rollback される。

        with repository.transaction() as tx:
            repository.create(booking, tx)
            inventory.reserve_seats(...)
            tx.commit()
    """

    def __init__(self) -> None:
        self._completed = False

    @property
    def is_active(self) -> bool:
        """commit / rollback のいずれもまだ行われていないか"""
        return not self._completed

    def commit(self) -> None:
        """ステージした書き込みを確定する"""
        if self._completed:
            raise RuntimeError("Transaction has already been completed")
        # 失敗時は未完了のまま例外を伝播させ、__exit__ で rollback させる
        self._do_commit()
        self._completed = True

    def rollback(self) -> None:
        """ステージした書き込みを破棄する（複数回呼んでも安全）"""
        if self._completed:
            return
        self._completed = True
        self._do_rollback()

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._completed:
            self.rollback()

    @abstractmethod
    def _do_commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _do_rollback(self) -> None:
        raise NotImplementedError
