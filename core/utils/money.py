"""
금액 변환 유틸리티

저장: 최소 단위 정수 (예: 센트) | 외부 표시: Decimal 문자열
부동소수점 누적 오차 방지를 위해 잔고 연산은 정수로만 수행.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.constants import Money

_QUANT = Decimal(1).scaleb(-Money.MINOR_UNIT_DIGITS)  # Decimal("0.01")


def to_minor_units(value: Decimal | int | float | str) -> int:
    """금액을 최소 단위 정수로 변환

    Args:
        value: "12.34", 12.34, Decimal("12.34") 등

    Returns:
        최소 단위 정수 (1234)

    Raises:
        ValueError: 숫자가 아니거나 소수 자릿수가 초과된 경우

    Example:
        >>> to_minor_units("12.34")
        1234
        >>> to_minor_units(200)
        20000
    """
    if isinstance(value, bool):
        raise ValueError(f"not a valid amount: {value!r}")

    try:
        # float는 repr 경유로 변환 (0.1 → "0.1")
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"not a valid amount: {value!r}") from e

    if not amount.is_finite():
        raise ValueError(f"amount must be finite: {value!r}")

    try:
        quantized = amount.quantize(_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # 자릿수 초과 (예: 1e40)
        raise ValueError(f"amount is out of range: {value!r}") from e

    if amount != quantized:
        raise ValueError(
            f"at most {Money.MINOR_UNIT_DIGITS} decimal places are allowed: {value!r}"
        )

    return int(amount * Money.MINOR_UNITS_PER_MAJOR)


def format_minor_units(value: int) -> str:
    """최소 단위 정수를 Decimal 문자열로 변환

    Example:
        >>> format_minor_units(-15000)
        '-150.00'
    """
    return str((Decimal(value) / Money.MINOR_UNITS_PER_MAJOR).quantize(_QUANT))
