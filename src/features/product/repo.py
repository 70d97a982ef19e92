from __future__ import annotations
from typing import Any, Dict, List, Optional
from db.product import ProductDB


class ProductRepo:
    """
    Thin data-access adapter around ProductDB.
    """
    def __init__(self, db: Optional[ProductDB] = None):
        self.db = db or ProductDB()

    def get(self, account_id: str, product_id: str) -> Optional[Dict[str, Any]]:
        return self.db.get_product(account_id, product_id)

    def list(self, account_id: str) -> List[Dict[str, Any]]:
        return self.db.list_products(account_id)
