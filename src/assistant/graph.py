"""
AutoCRM Assistant Graph - the decide/act loop.

    START -> decide --(action requests)--> act -> decide
             decide --(plain message)----> END

`decide` asks the chat model for the next message; `act` executes every
action request on that message in order and appends one ToolMessage per
request. The number of decide->act round trips is capped.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from assistant.actions import ActionContext, progress_line
from assistant.config import DEFAULT_MAX_ITERATIONS
from assistant.decision import message_text
from assistant.dispatcher import ActionDispatcher
from assistant.errors import LoopExceeded, RunCancelled
from assistant.state import RunState, write_once
from features.progress import ProgressReporter

logger = logging.getLogger(__name__)

DecideFn = Callable[[Sequence[BaseMessage]], AIMessage]

WRITE_ONCE_FIELDS = ("resolved_company_id", "created_order_id")


def _check_cancelled(config: Optional[RunnableConfig]) -> None:
    configurable = (config or {}).get("configurable", {}) or {}
    cancel_event = configurable.get("cancel_event")
    if cancel_event is not None and cancel_event.is_set():
        raise RunCancelled("Run was cancelled")
    deadline = configurable.get("deadline")
    if deadline is not None and time.monotonic() >= deadline:
        raise RunCancelled("Run deadline exceeded")


def route_after_decide(state: RunState) -> str:
    last = state.messages[-1] if state.messages else None
    if isinstance(last, AIMessage) and last.tool_calls:
        return "act"
    return END


def build_graph(
    decide: DecideFn,
    dispatcher: ActionDispatcher,
    reporter: Optional[ProgressReporter] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
):
    """Build and compile the assistant graph."""

    def report(state: RunState, content: str) -> None:
        if reporter is not None and content:
            reporter.report(state.user_id, state.run_id, content)

    def decide_node(state: RunState, config: RunnableConfig) -> Dict[str, Any]:
        _check_cancelled(config)

        message = decide(state.messages)
        action_names = [call["name"] for call in message.tool_calls]
        logger.info(
            "decide_step",
            extra={
                "run_id": state.run_id,
                "round_trip": state.round_trips,
                "actions": action_names,
            },
        )

        if not action_names:
            report(state, message_text(message))
            return {"messages": [message]}

        if state.round_trips >= max_iterations:
            raise LoopExceeded(max_iterations)

        report(state, progress_line(action_names))
        return {"messages": [message], "round_trips": state.round_trips + 1}

    def act_node(state: RunState) -> Dict[str, Any]:
        last = state.messages[-1]
        fields = {name: getattr(state, name) for name in WRITE_ONCE_FIELDS}
        results = []

        for call in last.tool_calls:
            context = ActionContext(
                request_id=call["id"],
                account_id=state.account_id,
                resolved_company_id=fields["resolved_company_id"],
                created_order_id=fields["created_order_id"],
            )
            result = dispatcher.dispatch(call, context)
            for name, value in result.structured_update.items():
                if name in fields:
                    fields[name] = write_once(name)(fields[name], value)
            results.append(result.to_message())

        return {"messages": results, **fields}

    graph = StateGraph(RunState)

    # Nodes
    graph.add_node("decide", decide_node)
    graph.add_node("act", act_node)

    # Edges
    graph.set_entry_point("decide")
    graph.add_conditional_edges("decide", route_after_decide, {"act": "act", END: END})
    graph.add_edge("act", "decide")

    return graph.compile()
