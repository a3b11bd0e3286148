import math
from datetime import date
from decimal import Decimal, InvalidOperation

from .models import TRANSACTION_TYPES


def is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_positive_amount(value) -> bool:
    return is_finite_number(value) and value > 0


def validate_type(s: str) -> str:
    if s not in TRANSACTION_TYPES:
        raise ValueError("type must be income or expense")
    return s


def parse_amount(s: str) -> float:
    if not isinstance(s, str) or not s.strip():
        raise ValueError("amount required")
    try:
        d = Decimal(s.strip())
    except InvalidOperation as e:
        raise ValueError("amount invalid") from e
    if not d.is_finite() or d <= 0:
        raise ValueError("enter a number greater than 0")
    return float(d)


def parse_date(s: str) -> str:
    if not isinstance(s, str) or not s.strip():
        raise ValueError("date required")
    try:
        return date.fromisoformat(s.strip()).isoformat()
    except ValueError as e:
        raise ValueError("date must be YYYY-MM-DD") from e


def parse_category(s: str) -> str:
    name = s.strip() if isinstance(s, str) else ""
    if not name:
        raise ValueError("category required")
    return name


def coerce_edited_amount(s: str) -> float:
    """Loose parse used for inline amount edits: anything unparsable is 0."""
    try:
        value = float(s)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def parse_balance(s: str) -> float | None:
    try:
        value = float(s)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value
