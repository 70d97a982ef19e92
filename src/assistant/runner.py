"""
Assistant Runner

Entry point for one instruction: authenticate the caller, run the decide/act
graph to completion, and turn the outcome into a flat response dict. Every
failure is reported through `success: False`; nothing escapes `run()`.
"""

import logging
import threading
import time
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.errors import GraphRecursionError

from assistant.config import SYSTEM_MESSAGE, AssistantSettings, build_instruction
from assistant.decision import DecisionStep, build_chat_model, message_text
from assistant.dispatcher import ActionDispatcher
from assistant.errors import AssistantError, LoopExceeded
from assistant.graph import build_graph
from db.assistant_update import AssistantUpdateDB
from db.company import CompanyDB
from db.order import OrderDB
from db.product import ProductDB
from db.user import UserDB
from features.company import CompanyRepo, CompanyService
from features.order import OrderRepo, OrderService
from features.product import ProductRepo, ProductService
from features.progress import ProgressRepo, ProgressReporter
from features.user import TokenAuthenticator

logger = logging.getLogger(__name__)


def _response(
    run_id: Optional[str],
    success: bool,
    message: Optional[str] = None,
    error: Optional[str] = None,
    order_id: Optional[str] = None,
    company_id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "success": success,
        "runId": run_id,
        "orderId": order_id,
        "companyId": company_id,
        "message": message,
        "error": error,
    }


class AssistantRunner:
    def __init__(
        self,
        graph,
        reporter: ProgressReporter,
        authenticator: TokenAuthenticator,
        settings: Optional[AssistantSettings] = None,
    ):
        self.graph = graph
        self.reporter = reporter
        self.authenticator = authenticator
        self.settings = settings or AssistantSettings()

    def authenticate(self, caller_token: Optional[str]) -> Dict[str, Any]:
        """Resolve the caller token to a user; raises AuthenticationError."""
        return self.authenticator.authenticate(caller_token)

    def run(
        self,
        prompt: str,
        account_id: str,
        caller_token: Optional[str],
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout_seconds: Optional[float] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Run one instruction for the caller identified by `caller_token`.

        Returns:
            {"success", "runId", "orderId", "companyId", "message", "error"}
        """
        try:
            user = self.authenticate(caller_token)
        except AssistantError as e:
            return _response(None, False, error=str(e))
        except ClientError as e:
            logger.error("auth_lookup_failed", extra={"error": str(e)})
            return _response(None, False, error=e.response.get("Error", {}).get("Message") or str(e))

        return self.execute(
            prompt,
            account_id,
            user["user_id"],
            cancel_event=cancel_event,
            timeout_seconds=timeout_seconds,
            today=today,
        )

    def execute(
        self,
        prompt: str,
        account_id: str,
        user_id: str,
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout_seconds: Optional[float] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Run the loop for an already authenticated user."""
        if not prompt or not prompt.strip():
            return _response(None, False, error="Prompt is required")
        if not account_id or not account_id.strip():
            return _response(None, False, error="Account ID is required")

        run_id = str(uuid.uuid4())
        max_iterations = self.settings.max_iterations
        timeout = timeout_seconds if timeout_seconds is not None else self.settings.run_timeout_seconds

        configurable: Dict[str, Any] = {"cancel_event": cancel_event}
        if timeout:
            configurable["deadline"] = time.monotonic() + timeout

        initial_state = {
            "messages": [
                SystemMessage(content=SYSTEM_MESSAGE.content),
                HumanMessage(content=build_instruction(prompt, account_id, today)),
            ],
            "account_id": account_id,
            "user_id": user_id,
            "run_id": run_id,
        }

        log_ctx = {"run_id": run_id, "user_id": user_id, "account_id": account_id}
        logger.info("run_started", extra=log_ctx)
        started = time.perf_counter()

        try:
            final_state = self.graph.invoke(
                initial_state,
                config={
                    "recursion_limit": 2 * max_iterations + 4,
                    "configurable": configurable,
                },
            )
            final_message = final_state["messages"][-1]
            response = _response(
                run_id,
                True,
                message=message_text(final_message),
                order_id=final_state.get("created_order_id"),
                company_id=final_state.get("resolved_company_id"),
            )
        except GraphRecursionError:
            response = _response(run_id, False, error=str(LoopExceeded(max_iterations)))
        except AssistantError as e:
            logger.warning("run_aborted", extra={**log_ctx, "error_type": type(e).__name__, "error": str(e)})
            response = _response(run_id, False, error=str(e))
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message") or str(e)
            logger.error("store_error", extra={**log_ctx, "error": message})
            response = _response(run_id, False, error=message)
        except Exception as e:
            logger.exception("run_failed", extra=log_ctx)
            response = _response(run_id, False, error=f"Unexpected error: {e}")
        finally:
            self.reporter.flush(run_id)

        logger.info(
            "run_finished",
            extra={
                **log_ctx,
                "success": response["success"],
                "order_id": response["orderId"],
                "duration_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        return response

    def latest_update(self, user_id: str, since: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return self.reporter.latest_update(user_id, since)

    def run_updates(self, user_id: str, run_id: str) -> List[Dict[str, Any]]:
        return self.reporter.list_run_updates(user_id, run_id)


def build_runner(settings: Optional[AssistantSettings] = None) -> AssistantRunner:
    """Wire the production runner: DynamoDB-backed services and the OpenAI chat model."""
    settings = settings or AssistantSettings.from_env()
    region = settings.aws_region

    company_repo = CompanyRepo(CompanyDB(settings.companies_table, region))
    product_repo = ProductRepo(ProductDB(settings.products_table, region))
    order_repo = OrderRepo(OrderDB(settings.orders_table, region))

    dispatcher = ActionDispatcher(
        company_service=CompanyService(company_repo, fuzzy_threshold=settings.fuzzy_threshold),
        product_service=ProductService(product_repo, fuzzy_threshold=settings.fuzzy_threshold),
        order_service=OrderService(order_repo, company_repo, product_repo),
    )
    reporter = ProgressReporter(ProgressRepo(AssistantUpdateDB(settings.updates_table, region)))
    decision = DecisionStep(build_chat_model(settings))

    graph = build_graph(
        decision.decide,
        dispatcher,
        reporter=reporter,
        max_iterations=settings.max_iterations,
    )
    return AssistantRunner(
        graph,
        reporter,
        TokenAuthenticator(UserDB(settings.users_table, region)),
        settings,
    )
