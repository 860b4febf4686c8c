"""Ollama client wrapper used as the completion service.

This package provides the async client for communicating with the Ollama API.
All Ollama chat interactions are async and use streaming internally.
"""

from toolbridge_server.ollama.client import OllamaClient
from toolbridge_server.ollama.types import CompletionResult

__all__ = ["OllamaClient", "CompletionResult"]
