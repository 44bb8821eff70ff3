"""Toolkit data models.

Frozen dataclasses for tool definitions and the structured value a tool
callable may return.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from baton.models.agent import Agent

logger = logging.getLogger(__name__)

CONTEXT_VARIABLES_PARAM = "context_variables"


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool: name, description, parameter schema, and callable.

    Attributes:
        name: Tool name, unique within a registry.
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema dict describing tool parameters.
        handler: Callable invoked with the validated arguments as keywords.
    """

    name: str
    description: str
    parameters: dict
    handler: Callable[..., object]

    @property
    def wants_context_variables(self) -> bool:
        """Whether the handler declares a ``context_variables`` parameter."""
        try:
            params = inspect.signature(self.handler).parameters
        except (TypeError, ValueError):
            return False
        return CONTEXT_VARIABLES_PARAM in params

    def invoke(self, arguments: dict, context_variables: dict | None = None) -> object:
        """Call the handler with ``arguments`` as keyword arguments.

        ``context_variables`` is passed only when the handler declares it.
        """
        kwargs = dict(arguments)
        if self.wants_context_variables:
            kwargs[CONTEXT_VARIABLES_PARAM] = dict(context_variables or {})
        return self.handler(**kwargs)

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolResult:
    """Structured value a tool callable may return.

    Plain return values are treated as ordinary results. Returning a
    ToolResult lets a tool also hand off to another agent and update the
    run's context variables.

    Attributes:
        value: Model-visible result payload.
        agent: Agent to hand off to, or None.
        context_variables: Variables merged into the run after this call.
    """

    value: Any = ""
    agent: Agent | None = None
    context_variables: dict = field(default_factory=dict)
