"""Normalization of tool host results into a single text payload.

MCP tool results come in several shapes: a structured payload, a list of
content blocks, or something else entirely. The shape is classified once
into a tagged variant and then rendered with a fixed priority:

1. structured payload, serialized as JSON
2. the first text content block
3. the whole raw result, serialized as JSON
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ResultKind(str, Enum):
    """Which shape of a tool host result was found."""

    STRUCTURED = "structured"
    TEXTUAL = "textual"
    RAW = "raw"


@dataclass
class ClassifiedResult:
    """A tool host result resolved to exactly one variant."""

    kind: ResultKind
    value: Any


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _to_jsonable(obj: Any) -> Any:
    """Convert SDK objects (pydantic models) into plain JSON data."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json", exclude_none=True)
    return obj


def classify(raw_result: Any) -> ClassifiedResult:
    """Classify a raw tool host result into one variant.

    Args:
        raw_result: An ``mcp.types.CallToolResult`` or an equivalent dict

    Returns:
        ClassifiedResult: The variant and the value to render
    """
    structured = _get(raw_result, "structuredContent")
    if structured is not None:
        return ClassifiedResult(ResultKind.STRUCTURED, structured)

    content = _get(raw_result, "content")
    if isinstance(content, list):
        for block in content:
            text = _get(block, "text")
            if _get(block, "type") == "text" and isinstance(text, str):
                return ClassifiedResult(ResultKind.TEXTUAL, text)

    return ClassifiedResult(ResultKind.RAW, raw_result)


def serialize(value: Any) -> str:
    """Serialize a value to canonical JSON text."""
    return json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False, default=str)


def extract(raw_result: Any) -> str:
    """Extract the text payload of a tool host result.

    Args:
        raw_result: An ``mcp.types.CallToolResult`` or an equivalent dict

    Returns:
        str: Normalized text payload
    """
    classified = classify(raw_result)
    logger.debug(f"Tool result classified as {classified.kind.value}")

    if classified.kind is ResultKind.TEXTUAL:
        return classified.value
    return serialize(classified.value)


def is_error_result(raw_result: Any) -> bool:
    """Whether the tool host flagged the result as a tool-side error."""
    return bool(_get(raw_result, "isError", False))
