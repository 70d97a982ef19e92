"""
Action dispatch for the assistant's ACT step.

Each requested action is looked up in a closed table keyed by `ActionName`,
its arguments are validated against the action's schema, and the handler's
outcome comes back as an `ActionResult`. Resolution misses are ordinary
results; anything that must abort the run is raised.
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping

from assistant.actions import (
    ActionContext,
    ActionName,
    ActionResult,
    CreateOrderArgs,
    GetOrderStatsArgs,
    ResolveCompanyArgs,
    ResolveProductsArgs,
    parse_arguments,
)
from assistant.errors import PreconditionViolation
from features.company import CompanyService, company_result_text
from features.order import OrderService, order_created_text, order_stats_text
from features.product import ProductService, products_result_text

logger = logging.getLogger(__name__)

Handler = Callable[[Any, ActionContext], ActionResult]


class ActionDispatcher:
    def __init__(
        self,
        company_service: CompanyService,
        product_service: ProductService,
        order_service: OrderService,
    ):
        self.company_service = company_service
        self.product_service = product_service
        self.order_service = order_service
        self._handlers: Dict[ActionName, Handler] = {
            ActionName.RESOLVE_COMPANY: self._resolve_company,
            ActionName.RESOLVE_PRODUCTS: self._resolve_products,
            ActionName.CREATE_ORDER: self._create_order,
            ActionName.GET_ORDER_STATS: self._get_order_stats,
        }

    def dispatch(self, tool_call: Mapping[str, Any], context: ActionContext) -> ActionResult:
        """
        Execute one requested action.

        Args:
            tool_call: {"id", "name", "args"} as found on AIMessage.tool_calls
            context: Run scope and the write-once fields set so far

        Raises:
            UnknownActionError, MalformedDecisionError, PreconditionViolation,
            DownstreamWriteError
        """
        action = ActionName.parse(tool_call.get("name"))
        args = parse_arguments(action, tool_call.get("args"))
        handler = self._handlers[action]

        started = time.perf_counter()
        ok = False
        try:
            result = handler(args, context)
            ok = True
            return result
        finally:
            logger.info(
                "action_dispatched",
                extra={
                    "action": action.value,
                    "request_id": context.request_id,
                    "account_id": context.account_id,
                    "ok": ok,
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                },
            )

    # ---- Handlers ----
    def _resolve_company(self, args: ResolveCompanyArgs, context: ActionContext) -> ActionResult:
        company = self.company_service.resolve_company(context.account_id, args.companyName)
        update = {"resolved_company_id": company["company_id"]} if company else {}
        return ActionResult(
            request_id=context.request_id,
            name=ActionName.RESOLVE_COMPANY.value,
            content=company_result_text(args.companyName, company),
            structured_update=update,
        )

    def _resolve_products(self, args: ResolveProductsArgs, context: ActionContext) -> ActionResult:
        result = self.product_service.resolve_products(
            context.account_id,
            [{"name": r.name, "quantity": r.quantity} for r in args.requests],
        )
        return ActionResult(
            request_id=context.request_id,
            name=ActionName.RESOLVE_PRODUCTS.value,
            content=products_result_text(result),
        )

    def _create_order(self, args: CreateOrderArgs, context: ActionContext) -> ActionResult:
        if context.created_order_id:
            raise PreconditionViolation(
                f"Order {context.created_order_id} was already created in this run"
            )
        if args.accountId and args.accountId != context.account_id:
            raise PreconditionViolation("Account ID does not match the account of this request")

        company_id = args.companyId or context.resolved_company_id
        if context.resolved_company_id and company_id != context.resolved_company_id:
            raise PreconditionViolation(
                f"Company {company_id} is not the company resolved in this run "
                f"({context.resolved_company_id})"
            )
        order = self.order_service.create_order(
            context.account_id,
            company_id,
            [{"product_id": line.productId, "quantity": line.quantity} for line in args.items],
        )
        return ActionResult(
            request_id=context.request_id,
            name=ActionName.CREATE_ORDER.value,
            content=order_created_text(order),
            structured_update={"created_order_id": order["order_id"]},
        )

    def _get_order_stats(self, args: GetOrderStatsArgs, context: ActionContext) -> ActionResult:
        stats = self.order_service.get_order_stats(
            context.account_id,
            args.companyId or context.resolved_company_id,
            args.fromDate,
            args.toDate,
        )
        return ActionResult(
            request_id=context.request_id,
            name=ActionName.GET_ORDER_STATS.value,
            content=order_stats_text(stats),
        )
