"""
금액 유틸리티

모든 금액은 Decimal로 다루고 소수점 2자리로 정규화한다.
float는 str을 거쳐 변환하여 이진 부동소수점 오차를 피한다.

금액과 잔액의 절댓값은 MONEY_MAX 이하로 제한한다.
두 값의 합도 기본 Decimal 정밀도(28자리) 안에 들어가므로
잔액 계산에서 반올림이 일어나지 않는다.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MONEY_QUANTUM = Decimal("0.01")

# 정수부 15자리
MONEY_MAX = Decimal("999999999999999.99")

# 통화 표시 기호
CURRENCY_SYMBOLS: dict[str, str] = {
    "ARS": "$",
    "USD": "US$",
    "EUR": "€",
}


def to_money(value: Decimal | int | float | str, exact: bool = False) -> Decimal:
    """금액 값을 Decimal(소수점 2자리)로 변환

    Args:
        value: Decimal, int, float 또는 숫자 문자열
        exact: True면 소수점 2자리를 넘는 값을 반올림하지 않고 거부

    Returns:
        정규화된 Decimal

    Raises:
        ValueError: 숫자가 아니거나, 유한하지 않거나, MONEY_MAX를 넘거나,
            exact인데 1센트 미만 단위가 있는 경우
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, float):
            amount = Decimal(str(value))
        else:
            amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e

    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")

    if abs(amount) > MONEY_MAX:
        raise ValueError(f"Amount out of range (max {MONEY_MAX}): {value!r}")

    quantized = amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    if exact and quantized != amount:
        raise ValueError(f"Amount has more than 2 decimal places: {value!r}")
    return quantized


def format_money(amount: Decimal, currency: str) -> str:
    """통화 기호와 함께 금액 포맷

    Example:
        >>> format_money(Decimal("1234.5"), "ARS")
        '$ 1,234.50 ARS'
    """
    symbol = CURRENCY_SYMBOLS.get(currency)
    body = f"{amount:,.2f}"
    if symbol is None:
        return f"{body} {currency}"
    return f"{symbol} {body} {currency}"
