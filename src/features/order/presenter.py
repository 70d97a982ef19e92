import json
from typing import Any, Dict

from assistant.actions import TERMINATION_SENTINEL


def order_created_text(order: Dict[str, Any]) -> str:
    """Result of a successful create_order; ends with the termination sentinel."""
    items = ", ".join(
        f"Product ID: {line['product_id']} (Quantity: {line['quantity']})"
        for line in order.get("items", [])
    )
    return (
        f"Successfully created Order #{order['order_number']} (ID: {order['order_id']}) "
        f"with the following items: {items}. {TERMINATION_SENTINEL}."
    )


def order_stats_text(stats: Dict[str, Any]) -> str:
    return json.dumps(stats, ensure_ascii=False)
