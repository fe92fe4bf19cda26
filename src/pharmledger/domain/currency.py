"""Currency conversion into the ledger's base currency."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional

from pharmledger.domain.errors import InvalidRateError, ValidationError

BASE_CURRENCY = "IDR"
MONEY_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


def to_decimal(value) -> Decimal:
    """Coerce ints, strings and Decimals to Decimal without float rounding."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValidationError(f"Invalid amount '{value}'") from e


def to_money(value) -> Decimal:
    """Quantize an amount to base-currency precision (2 places, half up)."""
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def is_base_currency(currency: Optional[str], base_currency: str = BASE_CURRENCY) -> bool:
    return currency is None or currency.upper() == base_currency.upper()


def convert_to_base(
    amount,
    currency: Optional[str],
    exchange_rate=None,
    base_currency: str = BASE_CURRENCY,
) -> Decimal:
    """Convert an amount to the base currency using a transaction-scoped rate.

    Args:
        amount: Amount in ``currency``
        currency: ISO code of the amount; None means base currency
        exchange_rate: Base-currency units per one unit of ``currency``
        base_currency: Ledger base currency

    Returns:
        Base-currency amount quantized to 2 places

    Raises:
        InvalidRateError: If a non-zero foreign amount has no positive rate
    """
    value = to_decimal(amount)
    if is_base_currency(currency, base_currency):
        return to_money(value)

    if value == 0:
        return to_money(0)

    if exchange_rate is None:
        raise InvalidRateError(f"Exchange rate required to convert {currency} to {base_currency}")
    rate = to_decimal(exchange_rate)
    if rate <= 0:
        raise InvalidRateError(
            f"Exchange rate for {currency} must be greater than zero (got {rate})"
        )
    return to_money(value * rate)
