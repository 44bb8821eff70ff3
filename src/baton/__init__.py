"""Baton: multi-agent tool-calling runs with explicit handoffs.

One agent talks to a model, calls tools, and may pass the baton to another
agent mid-conversation. Runs are bounded, deterministic in their history
ordering, and independent of one another.
"""

from baton._version import __version__

# Agents and messages
from baton.models.agent import Agent, ToolChoice, ToolChoiceMode
from baton.models.messages import Message, ToolCall, ToolCallResult

# Tools
from baton.toolkit import ToolDefinition, ToolRegistry, ToolResult
from baton.toolkit.executor import ToolExecutor

# Handoffs
from baton.handoff import Handoff, HandoffResolver, StopRun, detect_handoff

# Model gateway
from baton.llm import (
    CallableGateway,
    ModelGateway,
    ModelTurnResult,
    OpenAIClient,
    OpenAIGateway,
)

# Orchestration
from baton.orchestrator import (
    Orchestrator,
    RunConfig,
    RunResult,
    RunState,
    StopReason,
    TurnRecord,
)
from baton.swarm import Swarm

# Exceptions
from baton.exceptions import (
    BatonError,
    DuplicateToolError,
    HandoffAmbiguityError,
    OrchestratorError,
    RunCancelledError,
    SchemaValidationError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from baton.llm.errors import (
    GatewayAuthError,
    GatewayConfigError,
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
)

__all__ = [
    "__version__",
    # Agents and messages
    "Agent",
    "ToolChoice",
    "ToolChoiceMode",
    "Message",
    "ToolCall",
    "ToolCallResult",
    # Tools
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "ToolExecutor",
    # Handoffs
    "Handoff",
    "HandoffResolver",
    "StopRun",
    "detect_handoff",
    # Model gateway
    "ModelGateway",
    "ModelTurnResult",
    "CallableGateway",
    "OpenAIClient",
    "OpenAIGateway",
    # Orchestration
    "Orchestrator",
    "RunConfig",
    "RunResult",
    "RunState",
    "StopReason",
    "TurnRecord",
    "Swarm",
    # Exceptions
    "BatonError",
    "ToolError",
    "UnknownToolError",
    "ToolExecutionError",
    "SchemaValidationError",
    "DuplicateToolError",
    "HandoffAmbiguityError",
    "OrchestratorError",
    "RunCancelledError",
    "GatewayError",
    "GatewayConfigError",
    "GatewayAuthError",
    "GatewayRateLimitError",
    "GatewayResponseError",
]
