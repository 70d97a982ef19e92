# Common validation utilities shared across the feature services

from typing import Any, Optional

from assistant.errors import PreconditionViolation


def coerce_positive_int(value: Any, default: int = 1) -> int:
    # Coerce a value to a positive integer; fractions and booleans take the default
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        return default
    try:
        v = int(value)
        return v if v > 0 else default
    except (TypeError, ValueError):
        return default


def require_account_scope(account_id: Optional[str]) -> str:
    # Every store access is tenant scoped; refuse to run without one
    if account_id is None or not str(account_id).strip():
        raise PreconditionViolation("An account ID is required")
    return str(account_id).strip()


def require_positive_quantity(value: Any, product_id: str) -> int:
    # Order quantities are never defaulted: 0, negatives and non-integers are rejected
    invalid = PreconditionViolation(f"Invalid quantity for product {product_id}: {value!r}")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise invalid
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise invalid from None
    if quantity < 1:
        raise PreconditionViolation(f"Quantity for product {product_id} must be at least 1")
    return quantity
