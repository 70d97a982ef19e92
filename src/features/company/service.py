from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .repo import CompanyRepo
from features.validators.common import require_account_scope
from utils.matching import COMPANY_TIERS, rank_candidates

logger = logging.getLogger(__name__)


class CompanyService:
    """
    Resolves free-text company names to company records of one account.
    """

    def __init__(self, repo: Optional[CompanyRepo] = None, fuzzy_threshold: Optional[float] = None):
        self.repo = repo or CompanyRepo()
        self.fuzzy_threshold = fuzzy_threshold

    def resolve_company(self, account_id: str, company_name: str) -> Optional[Dict[str, Any]]:
        """
        Best matching company for `company_name`, or None when nothing matches.

        A miss is not an error: the caller reports it back as text.
        """
        account_id = require_account_scope(account_id)
        query = (company_name or "").strip()
        if not query:
            return None

        # The contains filter runs in the store; the similarity fallback needs every row
        if self.fuzzy_threshold is None:
            candidates = self.repo.search(account_id, query)
        else:
            candidates = self.repo.list(account_id)

        ranked = rank_candidates(
            query,
            candidates,
            tiers=COMPANY_TIERS,
            fuzzy_threshold=self.fuzzy_threshold,
        )
        if not ranked:
            logger.info("company_not_found", extra={"account_id": account_id, "query": query})
            return None

        best = ranked[0]
        logger.info(
            "company_resolved",
            extra={
                "account_id": account_id,
                "query": query,
                "company_id": best.item.get("company_id"),
                "tier": best.tier,
                "candidates": len(ranked),
            },
        )
        return best.item
