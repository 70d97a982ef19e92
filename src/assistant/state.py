from typing import Annotated, Any, Callable, List, Optional

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages
from pydantic import BaseModel, Field

from assistant.errors import WriteOnceViolation


def write_once(field: str) -> Callable[[Optional[Any], Optional[Any]], Optional[Any]]:
    """Reducer for fields that may be set once per run and never change after."""

    def reducer(current: Optional[Any], update: Optional[Any]) -> Optional[Any]:
        if update is None:
            return current
        if current is None or current == update:
            return update
        raise WriteOnceViolation(field, current, update)

    return reducer


class RunState(BaseModel):
    """State carried through the decide/act loop for one run."""

    messages: Annotated[List[AnyMessage], add_messages] = Field(default_factory=list)
    account_id: str
    user_id: str
    run_id: str
    round_trips: int = 0
    resolved_company_id: Annotated[Optional[str], write_once("resolved_company_id")] = None
    created_order_id: Annotated[Optional[str], write_once("created_order_id")] = None
