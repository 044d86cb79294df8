class DomainException(Exception):
    """ドメイン層で発生する基底例外

    context にはユーザーへそのまま返して良い情報（予約ID、期待値と実際の値など）を格納する。
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class BusinessRuleViolationException(DomainException):
    """ビジネスルールに違反した場合（入力値の不整合、座席不足、期限切れなど）"""


class ResourceNotFoundException(DomainException):
    """リソースが見つからない場合"""


class ConflictException(DomainException):
    """現在の状態と操作が競合する場合"""


class InvalidStateTransitionException(ConflictException):
    """状態遷移表に存在しない遷移を試みた場合"""

    def __init__(
        self, current_status: str, action: str, message: str | None = None
    ) -> None:
        super().__init__(
            message or f"Cannot {action.lower()} a booking in {current_status} state",
            current_status=current_status,
            action=action,
        )
        self.current_status = current_status
        self.action = action


class DuplicateResourceException(ConflictException):
    """リソースの重複エラー（条件付き書き込みの失敗時）"""


class OptimisticLockException(ConflictException):
    """同じリソースを別の処理が更新中、または更新済みの場合"""
