"""Type definitions for Ollama integration.

This module contains the dataclass describing one collected chat completion
and the helpers translating Ollama tool calls into ToolCall objects.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from toolbridge_server.tools.types import ToolCall


def tool_call_from_ollama(data: Any) -> ToolCall:
    """Create a ToolCall from an Ollama tool call.

    Ollama hands arguments over as a mapping and does not always assign an
    identifier; arguments are stored as JSON text and a missing id is
    generated locally.

    Args:
        data: Tool call as dict or ollama ``Message.ToolCall`` object

    Returns:
        ToolCall: Normalized tool call
    """
    if hasattr(data, "model_dump"):
        data = data.model_dump()

    function = data.get("function") or {}
    arguments = function.get("arguments")
    if arguments is None:
        arguments = "{}"
    elif not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False)

    return ToolCall(
        id=data.get("id") or ToolCall.generate_id(),
        name=function.get("name") or "",
        arguments=arguments,
    )


@dataclass
class CompletionResult:
    """One assistant message collected from the completion service.

    Attributes:
        content: Assistant text (may be empty when only tools are requested)
        tool_calls: Tool calls in the order the model emitted them
        model: Model that produced the message
        eval_count: Number of tokens generated
        prompt_eval_count: Number of tokens in the prompt
    """

    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    model: str = ""
    eval_count: int | None = None
    prompt_eval_count: int | None = None

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0
