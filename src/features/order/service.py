"""
Order service: order creation and per-company order statistics.

Creation validates everything it can before touching the store, so a
PreconditionViolation always means nothing was written. The header and its
items then go to the store in one transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from botocore.exceptions import ClientError

from .repo import OrderRepo
from assistant.errors import DownstreamWriteError, PreconditionViolation
from db.order import MAX_ITEMS_PER_ORDER
from features.company.repo import CompanyRepo
from features.product.repo import ProductRepo
from features.validators.common import require_account_scope, require_positive_quantity
from utils.response import json_safe

logger = logging.getLogger(__name__)

INITIAL_ORDER_STATUS = "new"


def _store_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message") or str(error)


class OrderService:
    def __init__(
        self,
        repo: Optional[OrderRepo] = None,
        company_repo: Optional[CompanyRepo] = None,
        product_repo: Optional[ProductRepo] = None,
    ):
        self.repo = repo or OrderRepo()
        self.company_repo = company_repo or CompanyRepo()
        self.product_repo = product_repo or ProductRepo()

    # ---- Commands ----
    def create_order(
        self,
        account_id: Optional[str],
        company_id: Optional[str],
        items: Iterable[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Create one order with its line items.

        Args:
            account_id: Tenant scope, required
            company_id: Company the order is for; must belong to the account
            items: [{"product_id": str, "quantity": int}, ...]; non-empty, every
                product must belong to the account

        Returns:
            {"order_id", "order_number", "company_id", "status", "items"}

        Raises:
            PreconditionViolation: a check failed; nothing was written
            DownstreamWriteError: the store rejected the write
        """
        account_id = require_account_scope(account_id)
        items = list(items or [])
        if not items:
            raise PreconditionViolation("Cannot create an order without items")
        if len(items) > MAX_ITEMS_PER_ORDER:
            raise PreconditionViolation(
                f"An order can have at most {MAX_ITEMS_PER_ORDER} items, got {len(items)}"
            )
        if not company_id or not str(company_id).strip():
            raise PreconditionViolation("A company ID is required to create an order")

        lines: List[Dict[str, Any]] = []
        for item in items:
            product_id = str(item.get("product_id") or "").strip()
            if not product_id:
                raise PreconditionViolation("Every order item needs a product ID")
            quantity = require_positive_quantity(item.get("quantity"), product_id)
            lines.append({"product_id": product_id, "quantity": quantity})

        try:
            if not self.company_repo.get(account_id, company_id):
                raise PreconditionViolation(f"Company {company_id} does not exist in this account")
            for product_id in dict.fromkeys(line["product_id"] for line in lines):
                if not self.product_repo.get(account_id, product_id):
                    raise PreconditionViolation(f"Product {product_id} does not exist in this account")

            header = self.repo.create(account_id, company_id, lines, INITIAL_ORDER_STATUS)
        except ClientError as e:
            message = _store_message(e)
            logger.error(
                "order_write_failed",
                extra={"account_id": account_id, "company_id": company_id, "error": message},
            )
            raise DownstreamWriteError(message) from e

        logger.info(
            "order_created",
            extra={
                "account_id": account_id,
                "company_id": company_id,
                "order_id": header["order_id"],
                "order_number": int(header["order_number"]),
                "item_count": len(lines),
            },
        )
        return {
            "order_id": header["order_id"],
            "order_number": int(header["order_number"]),
            "company_id": company_id,
            "status": header.get("status", INITIAL_ORDER_STATUS),
            "items": lines,
        }

    # ---- Queries ----
    def get_order_stats(
        self,
        account_id: Optional[str],
        company_id: Optional[str],
        from_date: date,
        to_date: date,
    ) -> Dict[str, Any]:
        """
        Revenue, order count and per-product totals for a company's orders
        created within [from_date, to_date].
        """
        account_id = require_account_scope(account_id)
        if not company_id:
            raise PreconditionViolation("A company ID is required for order statistics")
        if from_date > to_date:
            raise PreconditionViolation(
                f"fromDate {from_date.isoformat()} is after toDate {to_date.isoformat()}"
            )

        orders = self.repo.list_for_company(
            account_id, company_id, from_date.isoformat(), to_date.isoformat()
        )

        products: Dict[str, Optional[Dict[str, Any]]] = {}
        total_revenue = Decimal("0")
        product_stats: Dict[str, Dict[str, Any]] = {}

        for order in orders:
            for item in self.repo.list_items(account_id, order["order_id"]):
                product_id = item.get("product_id")
                if product_id not in products:
                    products[product_id] = self.product_repo.get(account_id, product_id)
                product = products[product_id]
                if not product:
                    continue

                quantity = int(item.get("quantity", 0))
                spent = Decimal(str(product.get("price", 0))) * quantity
                total_revenue += spent

                stats = product_stats.setdefault(
                    product.get("name"), {"quantity": 0, "totalSpent": Decimal("0")}
                )
                stats["quantity"] += quantity
                stats["totalSpent"] += spent

        return json_safe({
            "totalRevenue": total_revenue,
            "totalOrders": len(orders),
            "productStats": product_stats,
        })
