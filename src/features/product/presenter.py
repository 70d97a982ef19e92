from typing import Any, Dict, List


def products_result_text(result: Dict[str, List[Any]]) -> str:
    """Summary the decision step reads after a product lookup."""
    resolved = result.get("resolved") or []
    unresolved = result.get("unresolved") or []

    lines: List[str] = []
    if resolved:
        lines.append("Found products:")
        for product in resolved:
            lines.append(
                f'- "{product["name"]}" with ID: {product["product_id"]} '
                f'(Quantity: {product["quantity"]})'
            )
    if unresolved:
        names = ", ".join(f'"{name}"' for name in unresolved)
        lines.append(f"Could not find products: {names}")
    if not lines:
        lines.append("No products were requested.")
    return "\n".join(lines)
