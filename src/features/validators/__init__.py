# Central validators module for service argument validation

from .common import coerce_positive_int, require_account_scope, require_positive_quantity

__all__ = [
    "coerce_positive_int",
    "require_account_scope",
    "require_positive_quantity",
]
