"""Response helpers shared by the HTTP layer and the order statistics action."""

import decimal
from typing import Any, Dict, Optional


def json_safe(obj: Any) -> Any:
    """Convert DynamoDB Decimals (ints stay ints) so payloads serialize cleanly."""
    if isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    if isinstance(obj, decimal.Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    return obj


def standard_response(success: bool, data: Any = None, error: Optional[str] = None) -> Dict[str, Any]:
    """`{success, data, error}` envelope used by the progress log endpoints."""
    return {"success": success, "data": json_safe(data), "error": error}
