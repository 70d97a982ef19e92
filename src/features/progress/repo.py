from __future__ import annotations
from typing import Any, Dict, List, Optional
from db.assistant_update import AssistantUpdateDB


class ProgressRepo:
    """
    Thin data-access adapter around AssistantUpdateDB.
    """
    def __init__(self, db: Optional[AssistantUpdateDB] = None):
        self.db = db or AssistantUpdateDB()

    def add(self, user_id: str, run_id: str, content: str, created_at: Optional[str] = None) -> Dict[str, Any]:
        return self.db.put_update(user_id, run_id, content, created_at=created_at)

    def latest(self, user_id: str, since: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return self.db.latest_update(user_id, since)

    def list_for_run(self, run_id: str) -> List[Dict[str, Any]]:
        return self.db.list_run_updates(run_id)
