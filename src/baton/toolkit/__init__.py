"""Toolkit: tool definitions, the registry, argument validation and execution.

Provides the pieces a run uses to turn a model's tool-call requests into
results: ToolRegistry (lookup + schemas), ArgumentValidator (JSON Schema
checks), and ToolExecutor (dispatch, error capture, ordered batches).
"""

from baton.toolkit.introspection import function_to_parameters
from baton.toolkit.models import ToolDefinition, ToolResult
from baton.toolkit.registry import ToolRegistry
from baton.toolkit.validation import ArgumentValidator


# Lazy import to avoid circular dependency (executor imports baton.handoff,
# which imports toolkit.models)
def __getattr__(name: str):
    if name == "ToolExecutor":
        from baton.toolkit.executor import ToolExecutor
        return ToolExecutor
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ToolDefinition",
    "ToolResult",
    "ToolRegistry",
    "ToolExecutor",
    "ArgumentValidator",
    "function_to_parameters",
]
