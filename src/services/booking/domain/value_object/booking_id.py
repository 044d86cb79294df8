from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingId:
    """予約ID

    レコードストアが作成時に採番する。例: "3f2b0c9e6a7d4e51b8f0a2c4d6e8f012"
    """

    value: str

    def __post_init__(self) -> None:
        normalized = str(self.value).strip()
        if not normalized:
            raise ValueError("BookingId cannot be empty")
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> BookingId:
        return cls(value=uuid.uuid4().hex)
