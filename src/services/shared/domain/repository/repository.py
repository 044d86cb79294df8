from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .transaction import Transaction

T = TypeVar("T")
ID = TypeVar("ID")


class Repository(ABC, Generic[T, ID]):
    """Repository 基底クラス

    - 集約の永続化を抽象化する
    - 書き込みは呼び出し側が開始した Transaction に参加する
    """

    @abstractmethod
    def transaction(self) -> Transaction:
        """新しいトランザクションを開始する"""
        raise NotImplementedError

    @abstractmethod
    def next_identity(self) -> ID:
        """新規集約に割り当てる ID を採番する"""
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, id: ID) -> T | None:
        """IDで集約を検索する（トランザクション外の読み取り）"""
        raise NotImplementedError
