from __future__ import annotations
from typing import Any, Dict, List, Optional
from db.company import CompanyDB


class CompanyRepo:
    """
    Thin data-access adapter around CompanyDB.
    """
    def __init__(self, db: Optional[CompanyDB] = None):
        self.db = db or CompanyDB()

    def get(self, account_id: str, company_id: str) -> Optional[Dict[str, Any]]:
        return self.db.get_company(account_id, company_id)

    def search(self, account_id: str, name: str) -> List[Dict[str, Any]]:
        """Companies whose name contains `name` (case-insensitive), in store order."""
        return self.db.list_companies(account_id, name_contains=name)

    def list(self, account_id: str) -> List[Dict[str, Any]]:
        return self.db.list_companies(account_id)
