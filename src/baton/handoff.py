"""Agent handoff markers and resolution.

A tool switches the active agent by returning an explicit marker:

- ``Handoff(agent, value=None)``
- ``ToolResult(value=..., agent=agent)``
- a bare ``Agent``

Anything else, including dicts with an ``"agent"`` or ``"assistant"`` key,
is an ordinary result. Detection never inspects payload contents.

A tool may also end the run by returning ``StopRun(value)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from baton.exceptions import HandoffAmbiguityError
from baton.models.agent import Agent
from baton.models.messages import SYSTEM, Message
from baton.toolkit.models import ToolResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from baton.models.messages import ToolCallResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handoff:
    """Tool return value that transfers control to ``agent``.

    Attributes:
        agent: The agent that becomes active on the next turn.
        value: Optional model-visible text for the tool result. Defaults
            to ``{"assistant": agent.name}``.
    """

    agent: Agent
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.agent, Agent):
            raise TypeError(f"Handoff target must be an Agent, got {type(self.agent).__name__}")


@dataclass(frozen=True)
class StopRun:
    """Tool return value that ends the run after the current turn."""

    value: Any = None


def detect_handoff(payload: Any) -> Agent | None:
    """Return the agent a raw tool return value hands off to, if any."""
    if isinstance(payload, Handoff):
        return payload.agent
    if isinstance(payload, ToolResult):
        return payload.agent
    if isinstance(payload, Agent):
        return payload
    return None


def handoff_payload(target: Agent, value: Any = None) -> Any:
    """Model-visible payload recorded for a handoff tool call."""
    if value is None or value == "":
        return {"assistant": target.name}
    return value


class HandoffResolver:
    """Decides which agent is active after a batch of tool results."""

    def resolve(
        self, active: Agent, results: Sequence[ToolCallResult]
    ) -> tuple[Agent | None, ToolCallResult | None]:
        """Return the handoff target named by ``results`` and the result naming it.

        Several results naming the same agent collapse to one target (the
        first). Results naming different agents are ambiguous.

        Returns:
            ``(target, result)``, or ``(None, None)`` when no result hands off.

        Raises:
            HandoffAmbiguityError: If the results name more than one agent.
        """
        target: Agent | None = None
        source: ToolCallResult | None = None
        for result in results:
            if result.handoff is None:
                continue
            if target is None:
                target, source = result.handoff, result
            elif not target.same_as(result.handoff):
                names = []
                for r in results:
                    if r.handoff is not None and r.handoff.name not in names:
                        names.append(r.handoff.name)
                raise HandoffAmbiguityError(names)
        if target is not None and target.same_as(active):
            logger.debug("Handoff to already-active agent %s ignored", active.name)
        return target, source

    def switch_record(self, previous: Agent, target: Agent, tool_call_id: str | None) -> Message:
        """Audit message appended to history when the active agent changes."""
        return Message(
            role=SYSTEM,
            content=f"Handoff: {previous.name} -> {target.name}",
            metadata={
                "handoff": {
                    "from": previous.name,
                    "to": target.name,
                    "tool_call_id": tool_call_id,
                }
            },
        )
