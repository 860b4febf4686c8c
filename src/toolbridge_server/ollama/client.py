"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient used as
the completion service. Chat requests always use Ollama's streaming API; the
chunks are collected into one assistant message, including any tool calls.
The client is designed to be created once at startup and reused.
"""

import json
import logging
from typing import Any, AsyncIterator

import ollama

from toolbridge_server.errors import ModelCallError
from toolbridge_server.ollama.types import CompletionResult, tool_call_from_ollama
from toolbridge_server.sessions.types import AssistantMessage, Message, ToolMessage

logger = logging.getLogger(__name__)


def _arguments_as_mapping(arguments: str) -> dict[str, Any]:
    """Ollama expects tool call arguments as a mapping, not JSON text."""
    try:
        parsed = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def convert_messages_to_ollama_format(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert conversation messages to Ollama API format.

    Args:
        messages: List of message objects (UserMessage, SystemMessage,
            AssistantMessage, ToolMessage)

    Returns:
        List of message dicts in Ollama format: [{"role": "...", "content": "..."}, ...]
    """
    ollama_messages = []

    for msg in messages:
        ollama_msg: dict[str, Any] = {
            "role": msg.role,
            "content": msg.content,
        }

        if isinstance(msg, AssistantMessage) and msg.tool_calls:
            ollama_msg["tool_calls"] = [
                {
                    "function": {
                        "name": call.name,
                        "arguments": _arguments_as_mapping(call.arguments),
                    }
                }
                for call in msg.tool_calls
            ]
        elif isinstance(msg, ToolMessage):
            ollama_msg["tool_name"] = msg.tool_name

        ollama_messages.append(ollama_msg)

    return ollama_messages


class OllamaClient:
    """Async client for the Ollama chat API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str, headers: dict[str, str] | None = None) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            headers: Optional HTTP headers (e.g. Authorization) sent with every request
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host, headers=headers or {})
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat responses from Ollama.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format
            tools: Optional function schemas offered to the model
            options: Optional model parameters (temperature, etc.)

        Yields:
            dict: Response chunks from Ollama. Each chunk contains:
                  - model: str - The model name
                  - message: dict - Contains role, content and tool_calls
                  - done: bool - True on the final chunk
                  - (final chunk includes eval_count, prompt_eval_count, etc.)

        Raises:
            Exception: If the Ollama API request fails
        """
        logger.debug(f"Starting chat stream with model: {model}")
        logger.debug(f"Message count: {len(messages)}, tools: {len(tools or [])}")

        async for chunk in await self._client.chat(
            model=model,
            messages=messages,
            tools=tools,
            stream=True,
            options=options,
        ):
            if hasattr(chunk, "model_dump"):
                chunk_dict = chunk.model_dump()
            elif isinstance(chunk, dict):
                chunk_dict = chunk
            else:
                chunk_dict = vars(chunk)

            yield chunk_dict

        logger.debug("Chat stream completed")

    async def complete(
        self,
        model: str,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str = "auto",
        options: dict[str, Any] | None = None,
    ) -> CompletionResult:
        """Request one assistant message and collect it from the stream.

        Ollama has no tool-choice parameter; ``tool_choice="none"`` is honored
        by not offering any tools.

        Args:
            model: Model name
            messages: Conversation history
            tools: Function schemas offered to the model
            tool_choice: "auto" or "none"
            options: Optional model parameters

        Returns:
            CompletionResult: The collected assistant message

        Raises:
            ModelCallError: If the stream fails or ends without a done marker
        """
        offered_tools = tools if tools and tool_choice != "none" else None
        content_parts: list[str] = []
        tool_calls = []
        final_chunk = None

        try:
            async for chunk in self.chat_stream(
                model=model,
                messages=convert_messages_to_ollama_format(messages),
                tools=offered_tools,
                options=options,
            ):
                message = chunk.get("message") or {}
                content = message.get("content") or ""
                if content:
                    content_parts.append(content)

                for call in message.get("tool_calls") or []:
                    tool_calls.append(tool_call_from_ollama(call))

                if chunk.get("done"):
                    final_chunk = chunk
        except Exception as e:
            logger.error(f"Chat stream failed: {e}")
            raise ModelCallError(f"Failed to get response from Ollama: {e}") from e

        if final_chunk is None:
            logger.error("Chat stream ended without completion marker")
            raise ModelCallError(
                "Stream ended without completion marker", code="incomplete_response"
            )

        return CompletionResult(
            content="".join(content_parts),
            tool_calls=tool_calls,
            model=final_chunk.get("model") or model,
            eval_count=final_chunk.get("eval_count"),
            prompt_eval_count=final_chunk.get("prompt_eval_count"),
        )

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally which handles cleanup.
        """
        logger.debug("OllamaClient closed")
