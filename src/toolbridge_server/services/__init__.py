"""Business logic services for toolbridge-server.

This package contains the orchestration loop that drives model and tool
round-trips for a conversation.
"""

from toolbridge_server.services.orchestration import (
    LoopState,
    OrchestrationLoop,
    OrchestrationResult,
)

__all__ = [
    "LoopState",
    "OrchestrationLoop",
    "OrchestrationResult",
]
