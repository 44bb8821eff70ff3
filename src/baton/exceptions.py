"""Baton exception hierarchy.

All Baton-specific exceptions inherit from BatonError.

Tool-level errors (``ToolError`` and subclasses) are recovered inside a run
and folded into conversation history. Gateway-level errors (see
``baton.llm.errors``) always propagate to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from baton.orchestrator.models import RunResult


class BatonError(Exception):
    """Base exception for all Baton errors."""


class ToolError(BatonError):
    """Base for failures attributable to a single tool call.

    Attributes:
        tool_name: Name of the tool the model asked for.
        kind: Short machine-readable label placed in the error payload
            that the model sees.
    """

    kind = "tool failed"

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class UnknownToolError(ToolError):
    """Raised when a tool name is not present in the registry."""

    kind = "unknown tool"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Unknown tool: {tool_name}")


class ToolExecutionError(ToolError):
    """Raised when a tool callable fails."""


class SchemaValidationError(ToolExecutionError):
    """Raised when tool arguments do not match the declared schema.

    Named SchemaValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """

    kind = "invalid arguments"


class DuplicateToolError(BatonError):
    """Raised when registering a tool name that is already taken."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class HandoffAmbiguityError(BatonError):
    """Raised when one turn's tool results name more than one target agent.

    Attributes:
        targets: Distinct agent names, in request order.
        result: Partial RunResult attached by the orchestrator.
    """

    result: RunResult | None = None

    def __init__(self, targets: list[str]) -> None:
        self.targets = targets
        super().__init__(
            "Ambiguous handoff: tool results named multiple agents "
            f"({', '.join(targets)})"
        )


class OrchestratorError(BatonError):
    """Raised for invalid run configuration (e.g. a non-positive turn budget)."""


class RunCancelledError(BatonError):
    """Raised when a run is stopped at a suspension point.

    Attributes:
        result: The RunResult accumulated up to the cancellation point,
            or None if the run was cancelled before it started.
    """

    def __init__(self, message: str = "Run cancelled", result: RunResult | None = None) -> None:
        self.result = result
        super().__init__(message)
