"""ToolExecutor: dispatches tool calls through a ToolRegistry.

``execute()`` resolves, validates and invokes a single call and always
returns a ``ToolCallResult``; tool-level failures never escape.
``execute_batch()`` runs one turn's calls, sequentially or on a thread
pool, and returns results in request order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any

from baton.exceptions import ToolError, ToolExecutionError, UnknownToolError
from baton.handoff import Handoff, StopRun, detect_handoff, handoff_payload
from baton.models.agent import Agent
from baton.models.messages import ToolCallResult
from baton.toolkit.models import ToolResult

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from baton.models.messages import ToolCall
    from baton.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def error_result(call: ToolCall, exc: ToolError) -> ToolCallResult:
    """Structured error result for a failed call."""
    return ToolCallResult(
        call_id=call.id,
        tool_name=call.name,
        payload={"error": exc.kind, "message": str(exc)},
        is_error=True,
    )


def normalize_result(call: ToolCall, raw: Any) -> ToolCallResult:
    """Turn a tool's raw return value into a ToolCallResult."""
    stop = False
    if isinstance(raw, StopRun):
        stop = True
        raw = raw.value

    target = detect_handoff(raw)
    context_variables: dict = {}

    if isinstance(raw, ToolResult):
        value = raw.value
        context_variables = dict(raw.context_variables)
    elif isinstance(raw, Handoff):
        value = raw.value
    elif isinstance(raw, Agent):
        value = None
    else:
        value = raw

    if target is not None:
        value = handoff_payload(target, value)

    return ToolCallResult(
        call_id=call.id,
        tool_name=call.name,
        payload=value,
        handoff=target,
        context_variables=context_variables,
        stop=stop,
    )


class ToolExecutor:
    """Executes model-requested tool calls against a registry.

    Usage::

        executor = ToolExecutor(registry)
        result = executor.execute(ToolCall(id="call_1", name="get_weather",
                                           arguments={"location": "Paris"}))
        if result.is_error:
            print(result.payload["message"])
    """

    def __init__(self, registry: ToolRegistry, *, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self._registry = registry
        self._max_workers = max_workers

    def execute(
        self,
        call: ToolCall,
        context_variables: dict | None = None,
        *,
        allowed: Collection[str] | None = None,
    ) -> ToolCallResult:
        """Execute a single tool call.

        Args:
            call: The request to execute.
            context_variables: Run variables, passed to handlers that
                declare a ``context_variables`` parameter.
            allowed: Tool names the calling agent declared. A call to any
                other name is treated as an unknown tool, even when the
                registry holds it. None skips the check.

        Returns:
            ToolCallResult. Unknown tools, schema mismatches and handler
            exceptions become error results.
        """
        try:
            if allowed is not None and call.name not in allowed:
                logger.debug("Tool %s is not declared by the active agent", call.name)
                raise UnknownToolError(call.name)
            tool = self._registry.resolve(call.name)
            self._registry.validate(call.name, call.arguments)
        except ToolError as exc:
            logger.warning("Tool call %s (%s) rejected: %s", call.id, call.name, exc)
            return error_result(call, exc)

        try:
            raw = tool.invoke(call.arguments, context_variables)
        except Exception as exc:
            logger.warning("Tool %s failed: %s", call.name, exc)
            logger.debug("Tool %s traceback", call.name, exc_info=True)
            return error_result(
                call, ToolExecutionError(call.name, f"{type(exc).__name__}: {exc}")
            )
        return normalize_result(call, raw)

    def execute_batch(
        self,
        calls: Sequence[ToolCall],
        context_variables: dict | None = None,
        *,
        parallel: bool = False,
        allowed: Collection[str] | None = None,
    ) -> list[ToolCallResult]:
        """Execute one turn's tool calls.

        Every call sees the same snapshot of ``context_variables``. With
        ``parallel=True`` and more than one call, handlers run on a thread
        pool; completions are buffered and returned in request order.
        ``allowed`` is forwarded to ``execute()``.
        """
        snapshot = dict(context_variables or {})
        if allowed is not None:
            allowed = frozenset(allowed)
        if not parallel or len(calls) < 2:
            return [self.execute(call, snapshot, allowed=allowed) for call in calls]

        slots: list[ToolCallResult | None] = [None] * len(calls)
        workers = max(1, min(self._max_workers, len(calls)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="baton-tool") as pool:
            future_to_index = {
                pool.submit(self.execute, call, snapshot, allowed=allowed): index
                for index, call in enumerate(calls)
            }
            for future in as_completed(future_to_index):
                slots[future_to_index[future]] = future.result()
        return [result for result in slots if result is not None]
