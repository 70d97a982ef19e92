"""
Progress reporting for assistant runs.

Status lines are written on a small thread pool so the decide/act loop never
waits on the store. Each write is tracked under its run; the runner calls
`flush(run_id)` before it returns so the last line of a run is durable by
the time the caller sees the response. A failed write is logged and dropped.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .repo import ProgressRepo
from db.assistant_update import now_iso

logger = logging.getLogger(__name__)


def normalize_since(since: Optional[str]) -> Optional[str]:
    """Parse an ISO timestamp (a trailing Z is accepted) into the stored UTC format."""
    if since is None or not since.strip():
        return None
    value = since.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat(timespec="microseconds")


class ProgressReporter:
    def __init__(self, repo: Optional[ProgressRepo] = None, max_workers: int = 4):
        self.repo = repo or ProgressRepo()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="progress")
        self._pending: Dict[str, List[Future]] = {}
        self._lock = threading.Lock()

    def report(self, user_id: str, run_id: str, content: str) -> None:
        """Queue one status line. Never raises."""
        if not content:
            return
        try:
            # Stamped at report time; writes may finish out of order
            future = self._executor.submit(self._write, user_id, run_id, content, now_iso())
        except RuntimeError:
            # Executor already shut down
            logger.warning("progress_report_dropped", extra={"run_id": run_id, "user_id": user_id})
            return
        with self._lock:
            self._pending.setdefault(run_id, []).append(future)

    def _write(self, user_id: str, run_id: str, content: str, created_at: str) -> Optional[Dict[str, Any]]:
        try:
            return self.repo.add(user_id, run_id, content, created_at)
        except Exception as e:
            logger.warning(
                "progress_write_failed",
                extra={"run_id": run_id, "user_id": user_id, "error": str(e)},
                exc_info=True,
            )
            return None

    def flush(self, run_id: str, timeout: Optional[float] = None) -> None:
        """Wait until every queued write of the run has finished."""
        with self._lock:
            futures = self._pending.pop(run_id, [])
        if not futures:
            return
        done, not_done = wait(futures, timeout=timeout)
        if not_done:
            logger.warning(
                "progress_flush_timeout",
                extra={"run_id": run_id, "pending": len(not_done)},
            )

    def latest_update(self, user_id: str, since: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return self.repo.latest(user_id, normalize_since(since))

    def list_run_updates(self, user_id: str, run_id: str) -> List[Dict[str, Any]]:
        """A run's entries, oldest first; other users' entries are never returned."""
        return [u for u in self.repo.list_for_run(run_id) if u.get("user_id") == user_id]

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
