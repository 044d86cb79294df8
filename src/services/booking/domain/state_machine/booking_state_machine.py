from services.booking.domain.enum import BookingAction, BookingStatus
from services.shared.domain.exception import InvalidStateTransitionException

# (現在のステータス, 操作) -> 遷移先。None は「予約がまだ存在しない」を表す
_TRANSITIONS: dict[tuple[BookingStatus | None, BookingAction], BookingStatus] = {
    (None, BookingAction.CREATE): BookingStatus.INITIATED,
    (BookingStatus.INITIATED, BookingAction.PAY): BookingStatus.BOOKED,
    (BookingStatus.INITIATED, BookingAction.CANCEL): BookingStatus.CANCELLED,
    (BookingStatus.BOOKED, BookingAction.CANCEL): BookingStatus.CANCELLED,
}

_REJECTION_MESSAGES: dict[tuple[BookingStatus, BookingAction], str] = {
    (BookingStatus.BOOKED, BookingAction.PAY): "The booking is already confirmed",
    (
        BookingStatus.CANCELLED,
        BookingAction.PAY,
    ): "The booking has already been cancelled",
    (BookingStatus.CANCELLED, BookingAction.CANCEL): "Booking is already cancelled",
}


class BookingStateMachine:
    """予約ステータスの遷移表

    すべてのステータス判定はこのクラスを経由する。I/O は行わない。
    """

    @classmethod
    def next_status(
        cls, current: BookingStatus | None, action: BookingAction
    ) -> BookingStatus:
        """遷移先のステータスを返す。遷移できない場合は例外を送出する

        Raises:
            InvalidStateTransitionException: 遷移表に存在しない組み合わせの場合
        """
        next_status = _TRANSITIONS.get((current, action))
        if next_status is None:
            current_label = current.value if current is not None else "NEW"
            message = (
                _REJECTION_MESSAGES.get((current, action))
                if current is not None
                else None
            )
            raise InvalidStateTransitionException(
                current_status=current_label,
                action=action.value,
                message=message,
            )
        return next_status

    @classmethod
    def can_apply(cls, current: BookingStatus | None, action: BookingAction) -> bool:
        return (current, action) in _TRANSITIONS

    @classmethod
    def allowed_actions(cls, current: BookingStatus | None) -> set[BookingAction]:
        return {action for (status, action) in _TRANSITIONS if status == current}

    @classmethod
    def is_terminal(cls, status: BookingStatus) -> bool:
        """これ以上どの操作も受け付けないステータスか"""
        return not cls.allowed_actions(status)
