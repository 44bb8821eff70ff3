"""ToolRegistry: name -> tool definition, plus per-tool argument validators.

The registry exclusively owns tool callables. It is written during setup
and read (``resolve`` / ``validate`` / ``schemas_for``) by any number of
runs and worker threads afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from baton.exceptions import DuplicateToolError, UnknownToolError
from baton.toolkit.introspection import describe_function, function_to_parameters
from baton.toolkit.models import ToolDefinition
from baton.toolkit.validation import ArgumentValidator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from baton.models.agent import Agent

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maps tool names to definitions and validates their arguments.

    Usage::

        registry = ToolRegistry()
        registry.register(
            "get_weather",
            "Get the weather for a given location",
            {"type": "object",
             "properties": {"location": {"type": "string"}},
             "required": ["location"]},
            lambda location: {"temp": 72, "location": location},
        )

        @registry.tool()
        def transfer_to_billing() -> Agent:
            \"\"\"Hand the conversation to the billing agent.\"\"\"
            return billing_agent
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._validators: dict[str, ArgumentValidator] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        description: str,
        parameters: dict | None,
        handler: Callable[..., object],
    ) -> ToolDefinition:
        """Register a tool.

        Args:
            name: Unique tool name.
            description: Description shown to the model.
            parameters: JSON Schema for the arguments (``None`` means no
                arguments).
            handler: Callable invoked with validated arguments as keywords.

        Returns:
            The stored ToolDefinition.

        Raises:
            DuplicateToolError: If ``name`` is already registered.
        """
        return self.add(
            ToolDefinition(
                name=name,
                description=description,
                parameters=parameters or {"type": "object", "properties": {}},
                handler=handler,
            )
        )

    def add(self, tool: ToolDefinition) -> ToolDefinition:
        """Register an existing ToolDefinition."""
        if not tool.name:
            raise ValueError("Tool name must be a non-empty string")
        if not callable(tool.handler):
            raise TypeError(f"Handler for tool {tool.name!r} is not callable")
        # compile before taking the lock; a bad schema never half-registers
        validator = ArgumentValidator(tool.name, tool.parameters)
        with self._lock:
            if tool.name in self._tools:
                raise DuplicateToolError(tool.name)
            self._tools[tool.name] = tool
            self._validators[tool.name] = validator
        logger.debug("Registered tool %s", tool.name)
        return tool

    def tool(
        self,
        name: str | None = None,
        *,
        description: str | None = None,
        parameters: dict | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`register`.

        Name, description and parameter schema default to what can be read
        off the function (its ``__name__``, the first docstring line, and
        its signature). The function is returned unchanged.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(
                name or func.__name__,
                description if description is not None else describe_function(func),
                parameters if parameters is not None else function_to_parameters(func),
                func,
            )
            return func

        return decorator

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> ToolDefinition:
        """Return the definition for ``name``.

        Raises:
            UnknownToolError: If no tool with that name is registered.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def validate(self, name: str, arguments: Any) -> None:
        """Validate ``arguments`` against the schema registered for ``name``.

        Raises:
            UnknownToolError: If no tool with that name is registered.
            SchemaValidationError: If the arguments do not match.
        """
        validator = self._validators.get(name)
        if validator is None:
            raise UnknownToolError(name)
        validator.validate(arguments)

    def schemas_for(self, agent: Agent) -> list[dict]:
        """Function-calling schemas for the tools ``agent`` declares.

        Preserves the agent's declared order. Declared names that are not
        registered are skipped with a warning.
        """
        schemas: list[dict] = []
        for name in agent.tools:
            tool = self._tools.get(name)
            if tool is None:
                logger.warning(
                    "Agent %s declares unregistered tool %s; not offered to the model",
                    agent.name,
                    name,
                )
                continue
            schemas.append(tool.to_openai())
        return schemas

    def names(self) -> list[str]:
        """Registered tool names in registration order."""
        return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))
