"""
Order repository layer for data access operations.
"""

from typing import Any, Dict, List, Optional
from db.order import OrderDB


class OrderRepo:
    """
    Thin data-access adapter around OrderDB.
    """

    def __init__(self, db: Optional[OrderDB] = None):
        self.db = db or OrderDB()

    def create(self, account_id: str, company_id: str, items: List[Dict[str, Any]], status: str) -> Dict[str, Any]:
        """Create the order header and its items atomically."""
        return self.db.create_order_with_items(
            account_id=account_id, company_id=company_id, items=items, status=status
        )

    def list_items(self, account_id: str, order_id: str) -> List[Dict[str, Any]]:
        return self.db.list_order_items(account_id, order_id)

    def list_for_company(
        self, account_id: str, company_id: str, created_from: str, created_to: str
    ) -> List[Dict[str, Any]]:
        """Orders of a company created between the two dates (inclusive)."""
        return self.db.list_company_orders(
            account_id, company_id, created_from=created_from, created_to=created_to
        )
