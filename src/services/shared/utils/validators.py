from decimal import Decimal, InvalidOperation


def to_decimal(v: object) -> Decimal:
    """任意の値を Decimal に変換する

    Pydantic の field_validator (mode="before") や外部 API のレスポンス変換から呼び出す。
    float は str 経由で変換し、2進数表現の誤差を持ち込まない。
    """
    if isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise ValueError(f"Not a numeric value: {v!r}")
    try:
        return Decimal(str(v))
    except InvalidOperation as e:
        raise ValueError(f"Not a numeric value: {v!r}") from e


def to_identifier(v: object) -> str:
    """数値または文字列の識別子を文字列に正規化する"""
    if isinstance(v, bool) or v is None:
        raise ValueError(f"Invalid identifier: {v!r}")
    if isinstance(v, int):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    raise ValueError(f"Invalid identifier: {v!r}")
