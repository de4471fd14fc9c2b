import re
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID
from typing import Any

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TWO_PLACES = Decimal("0.01")


def make_json_serializable(data: Any) -> Any:
    """
    Recursively convert non-serializable values (UUID, Decimal, datetime) to JSON-serializable formats.
    """
    if isinstance(data, dict):
        return {str(k): make_json_serializable(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [make_json_serializable(v) for v in data]
    elif isinstance(data, UUID):
        return str(data)
    elif isinstance(data, Decimal):
        return float(data)
    elif isinstance(data, (datetime, date)):
        return data.isoformat()
    return data


def is_valid_email(value: Any) -> bool:
    """Basic syntactic check: something@something.tld, no whitespace."""
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def to_money(value: Any) -> Decimal:
    """Coerce a number to a Decimal with two decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping, ORM row or pydantic model alike."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)
