from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from .repo import ProductRepo
from features.validators.common import coerce_positive_int, require_account_scope
from utils.matching import PRODUCT_TIERS, rank_candidates

logger = logging.getLogger(__name__)


class ProductService:
    """
    Resolves free-text product names against one account's catalog.
    """

    def __init__(self, repo: Optional[ProductRepo] = None, fuzzy_threshold: Optional[float] = None):
        self.repo = repo or ProductRepo()
        self.fuzzy_threshold = fuzzy_threshold

    def resolve_products(
        self, account_id: str, requests: Iterable[Dict[str, Any]]
    ) -> Dict[str, List[Any]]:
        """
        Resolve each {"name", "quantity"} request to a catalog product.

        Args:
            account_id: Tenant whose catalog is searched
            requests: Product requests; quantity defaults to 1 when omitted

        Returns:
            {"resolved": [{"product_id", "name", "quantity"}, ...],
             "unresolved": [requested name, ...]}
            Partial resolution is a normal result, never an error.
        """
        account_id = require_account_scope(account_id)
        requests = list(requests or [])
        resolved: List[Dict[str, Any]] = []
        unresolved: List[str] = []
        if not requests:
            return {"resolved": resolved, "unresolved": unresolved}

        # One catalog read serves every request of the batch
        catalog = self.repo.list(account_id)

        for request in requests:
            name = str(request.get("name") or "").strip()
            ranked = rank_candidates(
                name,
                catalog,
                tiers=PRODUCT_TIERS,
                fuzzy_threshold=self.fuzzy_threshold,
            )
            if not ranked:
                unresolved.append(name)
                continue
            product = ranked[0].item
            resolved.append({
                "product_id": product.get("product_id"),
                "name": product.get("name"),
                "quantity": coerce_positive_int(request.get("quantity"), default=1),
            })

        logger.info(
            "products_resolved",
            extra={
                "account_id": account_id,
                "requested": len(requests),
                "resolved": len(resolved),
                "unresolved": len(unresolved),
            },
        )
        return {"resolved": resolved, "unresolved": unresolved}
