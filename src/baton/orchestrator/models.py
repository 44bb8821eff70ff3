"""Orchestrator result models.

Provides TurnRecord and RunResult.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from baton.models.messages import ASSISTANT

if TYPE_CHECKING:
    from collections.abc import Iterator

    from baton.models.agent import Agent
    from baton.models.messages import Message, ToolCall, ToolCallResult
    from baton.orchestrator.config import StopReason


@dataclass(frozen=True)
class TurnRecord:
    """What happened in one gateway round-trip.

    Frozen: turn records are immutable records of what happened.
    """

    turn: int
    agent: str
    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    results: tuple[ToolCallResult, ...] = ()
    handoff_to: str | None = None

    @property
    def errors(self) -> list[ToolCallResult]:
        return [r for r in self.results if r.is_error]


@dataclass(frozen=True)
class RunResult:
    """Final result of a run.

    Iterating yields ``(history, agent, stop_reason)`` so callers can
    unpack it directly::

        history, agent, reason = orchestrator.run(agent, messages)

    Attributes:
        history: Full history, initial messages included.
        agent: Agent active when the run ended.
        stop_reason: Why the run ended.
        messages: Only the messages appended during the run.
        context_variables: Context variables after the last tool call.
        turns: Number of gateway round-trips made.
        turn_records: One TurnRecord per round-trip.
    """

    history: tuple[Message, ...]
    agent: Agent
    stop_reason: StopReason
    messages: tuple[Message, ...] = ()
    context_variables: dict = field(default_factory=dict)
    turns: int = 0
    turn_records: tuple[TurnRecord, ...] = ()

    def __iter__(self) -> Iterator[object]:
        return iter((self.history, self.agent, self.stop_reason))

    @property
    def content(self) -> str | None:
        """Text of the last assistant message appended during the run."""
        for message in reversed(self.messages):
            if message.role == ASSISTANT and message.content:
                return message.content
        return None

    @property
    def handoffs(self) -> list[Message]:
        """Handoff records appended during the run, in order."""
        return [m for m in self.messages if m.is_handoff_record]

    def pprint(self, *, file: object = None) -> None:
        """Pretty-print this run using rich formatting."""
        from baton.formatting import pprint_run_result

        pprint_run_result(self, file=file)
