"""Orchestrator configuration types.

Provides RunState, StopReason and RunConfig.

States follow the run's state machine:

- RUNNING: about to call (or calling) the model gateway
- AWAITING_TOOL_RESULTS: executing the tool calls of the current turn
- HANDOFF_PENDING: a tool named a new agent; the switch is being applied
- DONE: terminated normally (see StopReason)
- FAILED: aborted by a gateway error or an ambiguous handoff
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from baton.toolkit.executor import DEFAULT_MAX_WORKERS

if TYPE_CHECKING:
    from baton.models.messages import ToolCallResult
    from baton.orchestrator.models import TurnRecord

DEFAULT_MAX_TURNS = 10


class RunState(str, enum.Enum):
    """States the orchestrator can be in during a run."""

    IDLE = "idle"
    RUNNING = "running"
    AWAITING_TOOL_RESULTS = "awaiting_tool_results"
    HANDOFF_PENDING = "handoff_pending"
    DONE = "done"
    FAILED = "failed"


class StopReason(str, enum.Enum):
    """Why a run ended."""

    NATURAL_COMPLETION = "natural_completion"
    MAX_TURNS_EXCEEDED = "max_turns_exceeded"
    EXECUTION_STOPPED = "execution_stopped"
    TOOLS_NOT_EXECUTED = "tools_not_executed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RunConfig:
    """Per-run settings for the orchestrator.

    Mutable dataclass -- callers may adjust settings between runs. Keyword
    arguments to ``Orchestrator.run`` override these for a single run.

    Attributes:
        max_turns: Gateway round-trips allowed per run. Must be >= 1; the
            budget is never unlimited.
        execute_tools: When False, tool-call requests are appended to the
            history but not executed, and the run stops.
        run_to_max_turns: Keep calling the model after it produces final
            content, until the turn budget is spent.
        debug: Log the run's progress at INFO instead of DEBUG.
        model_override: Model identifier used instead of ``agent.model``.
        max_workers: Thread pool size for parallel tool calls.
        on_turn: Callback invoked after each turn completes.
        on_tool_result: Callback invoked for each tool result, in request
            order, as it is appended.
    """

    max_turns: int = DEFAULT_MAX_TURNS
    execute_tools: bool = True
    run_to_max_turns: bool = False
    debug: bool = False
    model_override: str | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    on_turn: Callable[[TurnRecord], None] | None = None
    on_tool_result: Callable[[ToolCallResult], None] | None = None
