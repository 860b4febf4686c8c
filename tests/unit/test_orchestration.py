"""Unit tests for the orchestration loop."""

import json
import logging
from unittest.mock import AsyncMock

import pytest

from toolbridge_server.errors import ModelCallError
from toolbridge_server.ollama import CompletionResult
from toolbridge_server.services import LoopState, OrchestrationLoop
from toolbridge_server.services.orchestration import STEP_BUDGET_MESSAGE
from toolbridge_server.sessions import (
    AssistantMessage,
    ConversationStore,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from toolbridge_server.tools import ToolCall, ToolCatalog, ToolExecutor

DEFAULT_PROMPT = "You are a helpful assistant."


def lookup_call(call_id="call_1", arguments='{"id": "7"}'):
    return ToolCall(id=call_id, name="lookup", arguments=arguments)


@pytest.fixture
def tool_host():
    host = AsyncMock()
    host.list_tools.return_value = [
        {
            "name": "lookup",
            "description": "Look up a record",
            "inputSchema": {"type": "object", "properties": {"id": {"type": "string"}}},
        }
    ]
    host.call_tool.return_value = {
        "structuredContent": {"status": "ok"},
        "content": [{"type": "text", "text": "status ok"}],
    }
    return host


@pytest.fixture
def store():
    return ConversationStore(default_system_prompt=DEFAULT_PROMPT)


@pytest.fixture
def completion_client():
    return AsyncMock()


@pytest.fixture
def make_loop(store, tool_host, completion_client):
    def factory(max_steps=8, host=None):
        host = host or tool_host
        return OrchestrationLoop(
            store=store,
            catalog=ToolCatalog(host),
            executor=ToolExecutor(host),
            completion_client=completion_client,
            model="llama3.2:latest",
            max_steps=max_steps,
            options={"temperature": 0.1, "num_predict": 1024},
        )

    return factory


@pytest.mark.asyncio
async def test_plain_answer_takes_one_step(make_loop, store, completion_client):
    completion_client.complete.return_value = CompletionResult(
        content="Hello! How can I help?", model="llama3.2:latest"
    )
    loop = make_loop()

    result = await loop.run("c1", "hello")

    assert result.state is LoopState.DONE
    assert result.text == "Hello! How can I help?"
    assert result.steps == 1
    completion_client.complete.assert_awaited_once()

    messages = store.get("c1").messages
    assert [m.role for m in messages] == ["system", "user", "assistant"]
    assert messages[1].content == "hello"
    assert messages[2].tool_calls is None


@pytest.mark.asyncio
async def test_tool_round_trip(make_loop, store, tool_host, completion_client):
    completion_client.complete.side_effect = [
        CompletionResult(content="", tool_calls=[lookup_call()]),
        CompletionResult(content="Record 7 is ok."),
    ]
    loop = make_loop()

    result = await loop.run("c1", "look up 7")

    assert result.state is LoopState.DONE
    assert result.text == "Record 7 is ok."
    assert result.steps == 2
    assert [r.success for r in result.tool_results] == [True]
    tool_host.call_tool.assert_awaited_once_with("lookup", {"id": "7"})

    # The second request carries the tool result
    second_messages = completion_client.complete.await_args_list[1].kwargs["messages"]
    assert isinstance(second_messages[-1], ToolMessage)
    assert json.loads(second_messages[-1].content) == {"status": "ok"}

    roles = [m.role for m in store.get("c1").messages]
    assert roles == ["system", "user", "assistant", "tool", "assistant"]


@pytest.mark.asyncio
async def test_every_tool_call_is_answered_in_order(
    make_loop, store, tool_host, completion_client
):
    calls = [
        lookup_call("call_a", '{"id": "1"}'),
        lookup_call("call_b", '{"id": "2"}'),
        lookup_call("call_c", '{"id": "3"}'),
    ]
    completion_client.complete.side_effect = [
        CompletionResult(tool_calls=calls),
        CompletionResult(content="done"),
    ]
    loop = make_loop()

    await loop.run("c1", "look up three records")

    messages = store.get("c1").messages
    assistant = messages[2]
    tool_messages = messages[3:6]
    assert isinstance(assistant, AssistantMessage)
    assert [c.id for c in assistant.tool_calls] == ["call_a", "call_b", "call_c"]
    assert [m.tool_call_id for m in tool_messages] == ["call_a", "call_b", "call_c"]
    assert all(m.tool_name == "lookup" for m in tool_messages)
    assert [c.args for c in tool_host.call_tool.await_args_list] == [
        ("lookup", {"id": "1"}),
        ("lookup", {"id": "2"}),
        ("lookup", {"id": "3"}),
    ]


@pytest.mark.asyncio
async def test_failing_tool_does_not_abort_the_run(
    make_loop, store, tool_host, completion_client
):
    tool_host.call_tool.side_effect = ConnectionError("connection refused")
    completion_client.complete.side_effect = [
        CompletionResult(tool_calls=[lookup_call()]),
        CompletionResult(content="The lookup service is unavailable."),
    ]
    loop = make_loop()

    result = await loop.run("c1", "look up 7")

    assert result.state is LoopState.DONE
    assert result.text == "The lookup service is unavailable."
    tool_message = store.get("c1").messages[3]
    assert isinstance(tool_message, ToolMessage)
    assert tool_message.success is False
    assert "connection refused" in json.loads(tool_message.content)["error"]


@pytest.mark.asyncio
async def test_malformed_arguments_are_reported_to_the_model(
    make_loop, store, tool_host, completion_client
):
    completion_client.complete.side_effect = [
        CompletionResult(tool_calls=[lookup_call(arguments="{broken")]),
        CompletionResult(content="Sorry, let me retry."),
    ]
    loop = make_loop()

    await loop.run("c1", "look up 7")

    tool_host.call_tool.assert_not_awaited()
    tool_message = store.get("c1").messages[3]
    assert tool_message.success is False
    assert json.loads(tool_message.content)["tool"] == "lookup"


@pytest.mark.asyncio
async def test_step_budget_is_enforced(make_loop, store, completion_client):
    completion_client.complete.return_value = CompletionResult(
        tool_calls=[lookup_call()]
    )
    loop = make_loop(max_steps=3)

    result = await loop.run("c1", "loop forever")

    assert result.state is LoopState.FAILED
    assert result.steps == 3
    assert result.text == STEP_BUDGET_MESSAGE
    assert completion_client.complete.await_count == 3

    last = store.get("c1").messages[-1]
    assert isinstance(last, AssistantMessage)
    assert last.content == STEP_BUDGET_MESSAGE


@pytest.mark.asyncio
async def test_step_budget_keeps_partial_text(make_loop, completion_client):
    completion_client.complete.side_effect = [
        CompletionResult(content="Checking record 7...", tool_calls=[lookup_call()]),
        CompletionResult(content="", tool_calls=[lookup_call("call_2")]),
    ]
    loop = make_loop(max_steps=2)

    result = await loop.run("c1", "look up 7")

    assert result.state is LoopState.FAILED
    assert result.text == "Checking record 7..."


@pytest.mark.asyncio
async def test_max_steps_of_one(make_loop, completion_client):
    completion_client.complete.return_value = CompletionResult(
        tool_calls=[lookup_call()]
    )
    loop = make_loop(max_steps=1)

    result = await loop.run("c1", "look up 7")

    assert result.state is LoopState.FAILED
    assert completion_client.complete.await_count == 1


def test_max_steps_must_be_positive(make_loop):
    with pytest.raises(ValueError):
        make_loop(max_steps=0)


@pytest.mark.asyncio
async def test_tools_are_offered_with_auto_choice(make_loop, completion_client):
    completion_client.complete.return_value = CompletionResult(content="hi")
    loop = make_loop()

    await loop.run("c1", "hello")

    kwargs = completion_client.complete.await_args.kwargs
    assert kwargs["tool_choice"] == "auto"
    assert [t["function"]["name"] for t in kwargs["tools"]] == ["lookup"]
    assert kwargs["model"] == "llama3.2:latest"
    assert kwargs["options"] == {"temperature": 0.1, "num_predict": 1024}


@pytest.mark.asyncio
async def test_unavailable_catalog_disables_tool_choice(make_loop, completion_client):
    host = AsyncMock()
    host.list_tools.side_effect = ConnectionError("connection refused")
    completion_client.complete.return_value = CompletionResult(content="hi")
    loop = make_loop(host=host)

    result = await loop.run("c1", "hello")

    assert result.state is LoopState.DONE
    kwargs = completion_client.complete.await_args.kwargs
    assert kwargs["tools"] is None
    assert kwargs["tool_choice"] == "none"


@pytest.mark.asyncio
async def test_model_error_propagates(make_loop, store, completion_client):
    completion_client.complete.side_effect = ModelCallError("model not found")
    loop = make_loop()

    with pytest.raises(ModelCallError):
        await loop.run("c1", "hello")

    # The user message is kept; no assistant message was added
    assert [m.role for m in store.get("c1").messages] == ["system", "user"]


@pytest.mark.asyncio
async def test_unexpected_client_error_becomes_model_error(make_loop, completion_client):
    completion_client.complete.side_effect = RuntimeError("socket closed")
    loop = make_loop()

    with pytest.raises(ModelCallError, match="socket closed"):
        await loop.run("c1", "hello")


@pytest.mark.asyncio
async def test_history_carries_across_runs(make_loop, store, completion_client):
    completion_client.complete.side_effect = [
        CompletionResult(content="Hi!"),
        CompletionResult(content="You said hello."),
    ]
    loop = make_loop()

    await loop.run("c1", "hello")
    await loop.run("c1", "what did I say?")

    second_messages = completion_client.complete.await_args_list[1].kwargs["messages"]
    assert [m.role for m in second_messages] == [
        "system",
        "user",
        "assistant",
        "user",
    ]
    assert isinstance(second_messages[0], SystemMessage)
    assert isinstance(second_messages[-1], UserMessage)


@pytest.mark.asyncio
async def test_system_prompt_only_seeds_new_conversations(
    make_loop, store, completion_client
):
    completion_client.complete.return_value = CompletionResult(content="Arr!")
    loop = make_loop()

    await loop.run("c1", "hello", system_prompt="You are a pirate.")
    await loop.run("c1", "hello again", system_prompt="You are a robot.")

    system = store.get("c1").messages[0]
    assert system.content == f"{DEFAULT_PROMPT}\nYou are a pirate."
    assert sum(isinstance(m, SystemMessage) for m in store.get("c1").messages) == 1


@pytest.mark.asyncio
async def test_model_error_is_not_logged_again(make_loop, completion_client, caplog):
    completion_client.complete.side_effect = ModelCallError("model not found")
    loop = make_loop()

    with caplog.at_level(logging.ERROR, logger="toolbridge_server.services"):
        with pytest.raises(ModelCallError):
            await loop.run("c1", "hello")

    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
