class InfrastructureException(Exception):
    """外部リソース起因の基底例外

    ユーザーには詳細を返さず、原因（__cause__）はログにのみ出力する。
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class UpstreamServiceException(InfrastructureException):
    """リモートサービスの呼び出しが失敗、またはタイムアウトした場合"""


class PersistenceException(InfrastructureException):
    """データストアへの読み書きが失敗した場合"""
