"""
Action manifest for the assistant.

The set of actions is closed: `ActionName` lists every action the decision
step may request, each mapped to a pydantic argument schema. The manifest
handed to the chat model is generated from the same schemas, so what the
model is told and what the dispatcher accepts cannot drift apart.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from langchain_core.messages import ToolMessage
from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import BaseModel, Field, ValidationError

from assistant.errors import MalformedDecisionError, UnknownActionError

# Appended to the create_order result; tells the model its next message is the last.
TERMINATION_SENTINEL = "TERMINATE"


class ActionName(str, Enum):
    RESOLVE_COMPANY = "resolve_company"
    RESOLVE_PRODUCTS = "resolve_products"
    CREATE_ORDER = "create_order"
    GET_ORDER_STATS = "get_order_stats"

    @classmethod
    def parse(cls, name: Any) -> "ActionName":
        try:
            return cls(name)
        except ValueError:
            raise UnknownActionError(name) from None


# ---------------------------- argument schemas ----------------------------

class ResolveCompanyArgs(BaseModel):
    companyName: str = Field(description="The name of the customer company to find")


class ProductRequest(BaseModel):
    name: str = Field(description="The name of the product to find")
    quantity: Optional[float] = Field(
        default=None,
        description="The quantity of the product (defaults to 1 when missing or not a positive whole number)",
    )


class ResolveProductsArgs(BaseModel):
    requests: List[ProductRequest] = Field(
        description="Product requests with names and optional quantities"
    )


class OrderLine(BaseModel):
    productId: str = Field(description="The exact ID of a previously resolved product")
    quantity: int = Field(description="The quantity of the product")


class CreateOrderArgs(BaseModel):
    companyId: Optional[str] = Field(
        default=None, description="The ID of the customer company to create the order for"
    )
    accountId: Optional[str] = Field(
        default=None, description="The ID of the account to create the order in"
    )
    items: List[OrderLine] = Field(
        default_factory=list, description="Product IDs and their quantities"
    )


class GetOrderStatsArgs(BaseModel):
    companyId: Optional[str] = Field(
        default=None, description="The ID of the customer company to report on"
    )
    fromDate: date = Field(description="Start of the period (YYYY-MM-DD, inclusive)")
    toDate: date = Field(description="End of the period (YYYY-MM-DD, inclusive)")


ACTION_SCHEMAS: Dict[ActionName, Type[BaseModel]] = {
    ActionName.RESOLVE_COMPANY: ResolveCompanyArgs,
    ActionName.RESOLVE_PRODUCTS: ResolveProductsArgs,
    ActionName.CREATE_ORDER: CreateOrderArgs,
    ActionName.GET_ORDER_STATS: GetOrderStatsArgs,
}

ACTION_DESCRIPTIONS: Dict[ActionName, str] = {
    ActionName.RESOLVE_COMPANY: (
        "Find a customer company by name. Returns its ID, or says that no company matched."
    ),
    ActionName.RESOLVE_PRODUCTS: (
        "Find products by name and return their exact IDs and quantities. "
        "Once products are found, their IDs must be used exactly as provided."
    ),
    ActionName.CREATE_ORDER: (
        "Create a new order using the exact product IDs that were previously found. "
        "Do not modify or replace the product IDs."
    ),
    ActionName.GET_ORDER_STATS: (
        "Get order statistics for a customer company over a period: total revenue, "
        "total orders and per-product quantities."
    ),
}

PROGRESS_PHRASES: Dict[ActionName, str] = {
    ActionName.RESOLVE_COMPANY: "Looking up the customer",
    ActionName.RESOLVE_PRODUCTS: "Looking up the products",
    ActionName.CREATE_ORDER: "Creating the order",
    ActionName.GET_ORDER_STATS: "Gathering order statistics",
}


def action_manifest() -> List[Dict[str, Any]]:
    """OpenAI tool definitions for every action, in enum order."""
    manifest = []
    for action, schema in ACTION_SCHEMAS.items():
        tool = convert_to_openai_tool(schema)
        tool["function"]["name"] = action.value
        tool["function"]["description"] = ACTION_DESCRIPTIONS[action]
        manifest.append(tool)
    return manifest


def parse_arguments(action: ActionName, arguments: Any) -> BaseModel:
    """Validate raw tool-call arguments against the action's schema."""
    schema = ACTION_SCHEMAS[action]
    try:
        return schema.model_validate(arguments or {})
    except ValidationError as e:
        raise MalformedDecisionError(
            f"Invalid arguments for {action.value}: {e.errors(include_url=False)}"
        ) from e


def progress_line(action_names: Iterable[str]) -> str:
    """Status line for one decision: distinct phrases in request order."""
    phrases: List[str] = []
    for name in action_names:
        try:
            phrase = PROGRESS_PHRASES[ActionName(name)]
        except ValueError:
            continue
        if phrase not in phrases:
            phrases.append(phrase)
    return ", ".join(phrases)


# ---------------------------- dispatch records ----------------------------

@dataclass
class ActionContext:
    """What a handler may know about the run it executes in."""

    request_id: str
    account_id: str
    resolved_company_id: Optional[str] = None
    created_order_id: Optional[str] = None


@dataclass
class ActionResult:
    """Outcome of one requested action, fed back to the model as a ToolMessage."""

    request_id: str
    name: str
    content: str
    structured_update: Dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> ToolMessage:
        return ToolMessage(content=self.content, tool_call_id=self.request_id, name=self.name)
