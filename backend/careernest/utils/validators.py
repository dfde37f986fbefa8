"""
Validators — Phone number and amount rules for mobile-money collections.
"""
import re
from decimal import Decimal, InvalidOperation

MSISDN_PATTERN = r"^\+?[1-9]\d{8,14}$"


def normalize_msisdn(phone: str | None) -> str:
    """Strip spaces, dashes and brackets; keep a leading '+' if present."""
    if not phone:
        return ""
    return re.sub(r"[\s\-()]", "", phone.strip())


def validate_msisdn(phone: str | None) -> bool:
    """E.164-style MSISDN: optional '+', 9 to 15 digits, no leading zero."""
    return bool(re.match(MSISDN_PATTERN, normalize_msisdn(phone)))


def to_money(value) -> Decimal:
    """Coerce to a 2-place Decimal. Raises ValueError for non-numeric input."""
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def validate_amount(value) -> tuple[bool, str]:
    """Collection amounts must be positive with at most 2 decimal places."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        return False, "Amount must be a number"
    if amount <= 0:
        return False, "Amount must be greater than zero"
    if amount != amount.quantize(Decimal("0.01")):
        return False, "Amount cannot have more than 2 decimal places"
    return True, "Valid"
