"""
Decision step: one chat model call over the full message history.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import ChatOpenAI

from assistant.actions import action_manifest
from assistant.config import AssistantSettings
from assistant.errors import MalformedDecisionError, UpstreamModelError

logger = logging.getLogger(__name__)


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of content blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def build_chat_model(settings: AssistantSettings) -> BaseChatModel:
    # Initialize LLM with fallback
    try:
        return ChatOpenAI(model=settings.model, temperature=0)
    except Exception:
        logger.warning("chat_model_fallback", extra={"model": settings.model, "fallback": settings.fallback_model})
        return ChatOpenAI(model=settings.fallback_model, temperature=0)


class DecisionStep:
    """
    Wraps a chat model bound to the action manifest.

    `decide(messages)` returns the model's next AIMessage. Failures of the call
    become UpstreamModelError; output the loop cannot act on becomes
    MalformedDecisionError. No retries.
    """

    def __init__(self, llm: BaseChatModel, manifest: Optional[List[Dict[str, Any]]] = None):
        self.manifest = manifest if manifest is not None else action_manifest()
        self.model = llm.bind_tools(self.manifest)

    def decide(self, messages: Sequence[BaseMessage]) -> AIMessage:
        try:
            response = self.model.invoke(list(messages))
        except Exception as e:
            logger.error("model_call_failed", extra={"error": str(e)}, exc_info=True)
            raise UpstreamModelError(f"Language model call failed: {e}") from e

        if not isinstance(response, AIMessage):
            raise MalformedDecisionError(
                f"Language model returned {type(response).__name__} instead of an assistant message"
            )
        if response.invalid_tool_calls:
            bad = response.invalid_tool_calls[0]
            raise MalformedDecisionError(
                f"Language model returned an unparsable action request "
                f"{bad.get('name')!r}: {bad.get('error')}"
            )
        for call in response.tool_calls:
            if not call.get("id"):
                raise MalformedDecisionError(
                    f"Action request {call.get('name')!r} is missing its id"
                )
        return response

    __call__ = decide
