"""
Configuration for the AutoCRM assistant.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from langchain_core.messages import SystemMessage
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# System message configuration
SYSTEM_MESSAGE = SystemMessage(content=(
    "You are an assistant that creates orders in a CRM system. "
    "You can find customer companies and products by name and create orders for them. "
    "Use resolve_company to find the customer, resolve_products to find the products, "
    "then create_order with the exact IDs those tools returned. "
    "Never invent, modify or replace an ID. "
    "If the customer or a product cannot be found, say so and do not create an order. "
    "When a tool result ends with TERMINATE, reply with a short final summary for the user "
    "and do not call any more tools."
))

# LLM Configuration
DEFAULT_MODEL = "gpt-4o-mini"
FALLBACK_MODEL = "gpt-3.5-turbo"

DEFAULT_MAX_ITERATIONS = 8
DEFAULT_RUN_TIMEOUT_SECONDS = 120.0
DEFAULT_AWS_REGION = "eu-west-2"


def load_env_files(root: Optional[Path] = None) -> None:
    """Load .env, then .env.local on top of it."""
    root = root or Path.cwd()
    env_file = root / ".env"
    env_local = root / ".env.local"
    if env_file.exists():
        load_dotenv(env_file)
    if env_local.exists():
        load_dotenv(env_local, override=True)


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("invalid_setting", extra={"setting": name, "value": raw})
        return default
    if value <= 0:
        logger.warning("invalid_setting", extra={"setting": name, "value": raw})
        return default
    return value


def _positive_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("invalid_setting", extra={"setting": name, "value": raw})
        return default
    if value <= 0:
        logger.warning("invalid_setting", extra={"setting": name, "value": raw})
        return default
    return value


class AssistantSettings(BaseModel):
    model: str = DEFAULT_MODEL
    fallback_model: str = FALLBACK_MODEL
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    run_timeout_seconds: Optional[float] = DEFAULT_RUN_TIMEOUT_SECONDS
    fuzzy_threshold: Optional[float] = None
    aws_region: str = DEFAULT_AWS_REGION
    companies_table: str = "customer_companies"
    products_table: str = "products"
    orders_table: str = "orders"
    updates_table: str = "assistant_updates"
    users_table: str = "users"
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "AssistantSettings":
        """Read settings from the environment; bad values fall back to defaults."""
        fuzzy = _positive_float("ASSISTANT_FUZZY_THRESHOLD", None)
        if fuzzy is not None and fuzzy > 1:
            logger.warning("invalid_setting", extra={"setting": "ASSISTANT_FUZZY_THRESHOLD", "value": fuzzy})
            fuzzy = None
        return cls(
            model=os.getenv("ASSISTANT_MODEL") or DEFAULT_MODEL,
            fallback_model=os.getenv("ASSISTANT_FALLBACK_MODEL") or FALLBACK_MODEL,
            max_iterations=_positive_int("ASSISTANT_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
            run_timeout_seconds=_positive_float("ASSISTANT_RUN_TIMEOUT_SECONDS", DEFAULT_RUN_TIMEOUT_SECONDS),
            fuzzy_threshold=fuzzy,
            aws_region=os.getenv("AWS_REGION") or DEFAULT_AWS_REGION,
            companies_table=os.getenv("COMPANIES_TABLE") or "customer_companies",
            products_table=os.getenv("PRODUCTS_TABLE") or "products",
            orders_table=os.getenv("ORDERS_TABLE") or "orders",
            updates_table=os.getenv("ASSISTANT_UPDATES_TABLE") or "assistant_updates",
            users_table=os.getenv("USERS_TABLE") or "users",
            log_level=os.getenv("LOG_LEVEL") or "INFO",
            log_format=os.getenv("LOG_FORMAT") or "json",
        )


def build_instruction(prompt: str, account_id: str, today: Optional[date] = None) -> str:
    """The first user message of a run: the prompt plus the run's scope."""
    today = today or date.today()
    return (
        f"{prompt.strip()}\n\n"
        f"Today's date is {today.isoformat()}. "
        f"The account ID for this request is {account_id}."
    )
