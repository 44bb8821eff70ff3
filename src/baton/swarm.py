"""Swarm: convenience facade owning a tool registry and a model gateway.

Each ``run()`` builds a fresh Orchestrator, so one Swarm can serve several
concurrent runs; they share only the (read-mostly) registry.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from baton.llm.gateway import as_gateway
from baton.orchestrator.config import RunConfig
from baton.orchestrator.loop import Orchestrator
from baton.toolkit.registry import ToolRegistry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from baton.llm.gateway import ModelGateway
    from baton.models.agent import Agent
    from baton.models.messages import Message
    from baton.orchestrator.models import RunResult
    from baton.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


class Swarm:
    """Registry + gateway + default run settings.

    Usage::

        swarm = Swarm(gateway=my_gateway)

        @swarm.tool()
        def get_weather(location: str) -> dict:
            \"\"\"Get the weather for a given location.\"\"\"
            return {"temp": 72, "location": location}

        agent = Agent(name="Weather Agent", tools=["get_weather"])
        result = swarm.run(agent, [{"role": "user", "content": "Weather in Paris?"}])
        print(result.content)

    When no gateway is given, an OpenAIGateway over an OpenAIClient
    configured from the environment is created on first use.
    """

    def __init__(
        self,
        gateway: ModelGateway | Callable[..., Any] | None = None,
        *,
        registry: ToolRegistry | None = None,
        config: RunConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ToolRegistry()
        self.config = config or RunConfig()
        self._gateway = as_gateway(gateway) if gateway is not None else None
        self._gateway_lock = threading.Lock()

    @property
    def gateway(self) -> ModelGateway:
        with self._gateway_lock:
            if self._gateway is None:
                from baton.llm.client import OpenAIClient
                from baton.llm.gateway import OpenAIGateway

                logger.debug("No gateway supplied; creating OpenAIGateway from environment")
                self._gateway = OpenAIGateway(OpenAIClient())
            return self._gateway

    def register_tool(
        self,
        name: str,
        description: str,
        parameters: dict | None,
        function: Callable[..., object],
    ) -> ToolDefinition:
        """Register a tool with this swarm's registry."""
        return self.registry.register(name, description, parameters, function)

    def tool(
        self,
        name: str | None = None,
        *,
        description: str | None = None,
        parameters: dict | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a function as a tool (see ToolRegistry.tool)."""
        return self.registry.tool(name, description=description, parameters=parameters)

    def orchestrator(self) -> Orchestrator:
        """A new Orchestrator bound to this swarm's registry, gateway and config."""
        return Orchestrator(self.registry, self.gateway, config=self.config)

    def run(
        self,
        agent: Agent,
        messages: Iterable[Message | dict] | None = None,
        *,
        context_variables: dict | None = None,
        max_turns: int | None = None,
        execute_tools: bool | None = None,
        stream: bool = False,
        debug: bool | None = None,
        model_override: str | None = None,
        run_to_max_turns: bool | None = None,
    ) -> RunResult:
        """Run ``agent`` on ``messages``. See Orchestrator.run for arguments."""
        return self.orchestrator().run(
            agent,
            messages,
            context_variables=context_variables,
            max_turns=max_turns,
            execute_tools=execute_tools,
            stream=stream,
            debug=debug,
            model_override=model_override,
            run_to_max_turns=run_to_max_turns,
        )
