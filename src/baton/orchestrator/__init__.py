"""Orchestrator package -- the multi-agent run loop.

Provides the Orchestrator class, run configuration, the state and
stop-reason enums, and the result types a run produces.
"""

from baton.orchestrator.config import (
    DEFAULT_MAX_TURNS,
    RunConfig,
    RunState,
    StopReason,
)
from baton.orchestrator.loop import Orchestrator
from baton.orchestrator.models import RunResult, TurnRecord

__all__ = [
    # Core
    "Orchestrator",
    # Config
    "RunConfig",
    "RunState",
    "StopReason",
    "DEFAULT_MAX_TURNS",
    # Models
    "RunResult",
    "TurnRecord",
]
