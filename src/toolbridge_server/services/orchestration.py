"""Orchestration loop driving model and tool round-trips.

One run takes a user message and alternates between asking the model for
the next assistant message and executing the tool calls it requested, until
the model answers in plain text or the step budget is spent.

    AWAITING_MODEL --tool calls--> EXECUTING_TOOLS --results--> AWAITING_MODEL
    AWAITING_MODEL --text--> DONE
    AWAITING_MODEL --budget spent--> FAILED

Tool calls of one assistant message are executed one after another in the
order the model emitted them, and every call is answered by exactly one tool
message before the model is asked again. Completion services reject a turn
in which any tool call is left unanswered.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from toolbridge_server.errors import ModelCallError
from toolbridge_server.ollama.types import CompletionResult
from toolbridge_server.sessions.store import ConversationStore
from toolbridge_server.sessions.types import (
    AssistantMessage,
    Message,
    ToolMessage,
    UserMessage,
)
from toolbridge_server.tools.catalog import ToolCatalog
from toolbridge_server.tools.executor import ToolExecutor
from toolbridge_server.tools.types import ToolCall, ToolResult

logger = logging.getLogger(__name__)

STEP_BUDGET_MESSAGE = (
    "I could not complete this request within the allowed number of steps."
)


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


class CompletionClient(Protocol):
    """What the loop needs from a completion service."""

    async def complete(
        self,
        model: str,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str = "auto",
        options: dict[str, Any] | None = None,
    ) -> CompletionResult: ...


@dataclass
class OrchestrationResult:
    """Outcome of one orchestration run.

    Attributes:
        conversation_id: Conversation the run belongs to
        text: Answer for the caller; never empty for FAILED runs
        state: Terminal state, DONE or FAILED
        steps: Number of model round-trips performed
        tool_results: Results of every tool call executed, in order
    """

    conversation_id: str
    text: str
    state: LoopState
    steps: int
    tool_results: list[ToolResult] = field(default_factory=list)


class OrchestrationLoop:
    """Runs the model/tool loop for one conversation at a time.

    The loop does not serialize runs for the same conversation; callers must
    hold ``ConversationStore.lock_for(conversation_id)`` around ``run()``.
    """

    def __init__(
        self,
        store: ConversationStore,
        catalog: ToolCatalog,
        executor: ToolExecutor,
        completion_client: CompletionClient,
        model: str,
        max_steps: int,
        options: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            store: Conversation store owning the message histories
            catalog: Tool catalog offered to the model
            executor: Executes the tool calls the model requests
            completion_client: Completion service client
            model: Model name passed to the completion service
            max_steps: Maximum model round-trips per run
            options: Model parameters (temperature, num_predict, ...)

        Raises:
            ValueError: If max_steps is smaller than 1
        """
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}")

        self.store = store
        self.catalog = catalog
        self.executor = executor
        self.completion_client = completion_client
        self.model = model
        self.max_steps = max_steps
        self.options = options

    async def run(
        self,
        conversation_id: str,
        user_message: str,
        system_prompt: str | None = None,
    ) -> OrchestrationResult:
        """Answer a user message, executing tools as the model requests.

        Args:
            conversation_id: Conversation identifier (created if unseen)
            user_message: The user's message
            system_prompt: Persona text for a new conversation

        Returns:
            OrchestrationResult: The answer and how the run ended

        Raises:
            ModelCallError: If the completion service fails
        """
        self.store.load_or_create(conversation_id, system_prompt)
        self.store.append(conversation_id, UserMessage(content=user_message))

        state = LoopState.AWAITING_MODEL
        steps = 0
        pending: list[ToolCall] = []
        tool_results: list[ToolResult] = []
        partial_text = ""
        answer = ""

        while state not in (LoopState.DONE, LoopState.FAILED):
            if state is LoopState.AWAITING_MODEL:
                if steps >= self.max_steps:
                    state = LoopState.FAILED
                    break

                steps += 1
                response = await self._request_completion(conversation_id, steps)
                if response.content.strip():
                    partial_text = response.content

                self.store.append(
                    conversation_id,
                    AssistantMessage(
                        content=response.content,
                        model=response.model or self.model,
                        eval_count=response.eval_count,
                        prompt_eval_count=response.prompt_eval_count,
                        tool_calls=list(response.tool_calls) or None,
                    ),
                )

                if response.has_tool_calls:
                    logger.info(
                        f"Model requesting {len(response.tool_calls)} tool(s) "
                        f"(step {steps}/{self.max_steps})"
                    )
                    pending = list(response.tool_calls)
                    state = LoopState.EXECUTING_TOOLS
                else:
                    answer = response.content
                    state = LoopState.DONE

            elif state is LoopState.EXECUTING_TOOLS:
                for tool_call in pending:
                    result = await self.executor.execute(tool_call)
                    tool_results.append(result)
                    self.store.append(
                        conversation_id,
                        ToolMessage(
                            tool_call_id=tool_call.id,
                            tool_name=tool_call.name,
                            content=result.content,
                            success=result.success,
                        ),
                    )
                pending = []
                state = LoopState.AWAITING_MODEL

        if state is LoopState.FAILED:
            logger.warning(
                f"Step budget of {self.max_steps} exhausted for conversation "
                f"{conversation_id}"
            )
            answer = partial_text or STEP_BUDGET_MESSAGE
            self.store.append(
                conversation_id, AssistantMessage(content=answer, model=self.model)
            )

        logger.info(
            f"Conversation {conversation_id} finished in state {state.value} "
            f"after {steps} step(s)"
        )
        return OrchestrationResult(
            conversation_id=conversation_id,
            text=answer,
            state=state,
            steps=steps,
            tool_results=tool_results,
        )

    async def _request_completion(
        self, conversation_id: str, step: int
    ) -> CompletionResult:
        """Ask the model for the next assistant message.

        Tools are only offered when the catalog is non-empty; an empty catalog
        disables tool choice entirely.
        """
        tools = await self.catalog.get_tools()
        tool_choice = "auto" if tools else "none"
        messages = list(self.store.get(conversation_id).messages)

        logger.debug(
            f"Step {step}: sending {len(messages)} messages, {len(tools)} tools, "
            f"tool_choice={tool_choice}"
        )

        try:
            return await self.completion_client.complete(
                model=self.model,
                messages=messages,
                tools=tools or None,
                tool_choice=tool_choice,
                options=self.options,
            )
        except ModelCallError:
            raise
        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise ModelCallError(f"Failed to get response from model: {e}") from e
