"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CURRENCY_MARKERS = re.compile(r"^(rp\.?|idr|usd|us\$|\$)|(rp\.?|idr|usd)$", re.IGNORECASE)


def _normalize_separators(amount_str: str) -> str:
    """Turn grouping and decimal separators into plain "1234.56" form.

    Both "1,234,567.89" and the Indonesian "1.234.567,89" are accepted. A
    lone separator followed by exactly three digits is read as grouping.
    """
    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            return amount_str.replace(".", "").replace(",", ".")
        return amount_str.replace(",", "")

    for sep in (",", "."):
        if sep not in amount_str:
            continue
        head, _, tail = amount_str.rpartition(sep)
        if amount_str.count(sep) > 1 or len(tail) == 3:
            return amount_str.replace(sep, "")
        return f"{head}.{tail}"
    return amount_str


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "16250000"
    - "Rp 16.250.000" / "IDR 16,250,000"
    - "1.234.567,89"
    - "$1,000.00"
    - "-500000"
    - "(500.000)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1].strip()
    if amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:].strip()

    amount_str = CURRENCY_MARKERS.sub("", amount_str).replace(" ", "")
    if amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:]

    try:
        amount = Decimal(_normalize_separators(amount_str))
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
