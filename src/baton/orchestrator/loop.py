"""Core orchestration loop.

Provides the Orchestrator class that runs the multi-agent tool-calling loop:
call the model gateway with the active agent, execute any tool calls it
requests, apply handoffs, append everything to the history, and repeat
until the model answers, a tool stops the run, or the turn budget is spent.

Tool failures are folded into the history as error results so the model
can react to them. Gateway failures end the run and propagate. Nothing is
retried here.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from baton.exceptions import (
    HandoffAmbiguityError,
    OrchestratorError,
    RunCancelledError,
)
from baton.handoff import HandoffResolver
from baton.llm.errors import GatewayError, GatewayResponseError
from baton.llm.gateway import ModelTurnResult, as_gateway
from baton.models.messages import Message
from baton.orchestrator.config import RunConfig, RunState, StopReason
from baton.orchestrator.models import RunResult, TurnRecord
from baton.toolkit.executor import ToolExecutor

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from baton.llm.gateway import ModelGateway
    from baton.models.agent import Agent
    from baton.models.messages import ToolCall, ToolCallResult
    from baton.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class _RunContext:
    """Mutable state owned by a single run."""

    agent: Agent
    history: list[Message]
    context_variables: dict
    init_len: int = 0
    turns: int = 0
    records: list[TurnRecord] = field(default_factory=list)
    seen_call_ids: set[str] = field(default_factory=set)


class Orchestrator:
    """Drives one run at a time between a model gateway and a tool registry.

    The registry is passed in explicitly and only read during a run, so any
    number of orchestrators may share one registry and run concurrently.
    A single orchestrator refuses overlapping runs.

    Usage::

        from baton.orchestrator import Orchestrator, RunConfig

        orch = Orchestrator(registry, gateway, config=RunConfig(max_turns=5))
        result = orch.run(agent, [Message.user("What's the weather in Paris?")])
        history, agent, reason = result
    """

    def __init__(
        self,
        registry: ToolRegistry,
        gateway: ModelGateway | Callable[..., Any],
        config: RunConfig | None = None,
    ) -> None:
        self._registry = registry
        self._gateway = as_gateway(gateway)
        self._config = config or RunConfig()
        self._resolver = HandoffResolver()
        self._state = RunState.IDLE
        self._stop_event = threading.Event()
        self._run_lock = threading.Lock()
        self._debug = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        """Return the current run state."""
        return self._state

    @property
    def config(self) -> RunConfig:
        return self._config

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
        """Execute the orchestration loop.

        Args:
            agent: The initially active agent.
            messages: Initial history (Message objects or OpenAI-style dicts).
                Copied; the caller's sequence is never modified.
            context_variables: Initial context variables for the run.
            max_turns: Override ``RunConfig.max_turns``.
            execute_tools: Override ``RunConfig.execute_tools``.
            stream: Must be False; streaming is not supported.
            debug: Override ``RunConfig.debug``.
            model_override: Override ``RunConfig.model_override``.
            run_to_max_turns: Override ``RunConfig.run_to_max_turns``.

        Returns:
            RunResult with the final history, final agent and stop reason.

        Raises:
            OrchestratorError: On invalid settings, or if this orchestrator
                is already running.
            GatewayError: If the model gateway fails. ``exc.result`` holds
                the history accumulated before the failure.
            HandoffAmbiguityError: If one turn's tools name different agents.
                ``exc.result`` holds the history including that turn.
            RunCancelledError: If ``stop()`` was called. ``exc.result`` holds
                the history up to the last completed turn.
        """
        cfg = self._config
        if stream:
            raise OrchestratorError("Streaming is not supported; call run() with stream=False")
        budget = cfg.max_turns if max_turns is None else max_turns
        if isinstance(budget, bool) or not isinstance(budget, int) or budget < 1:
            raise OrchestratorError(f"max_turns must be a positive integer, got {budget!r}")
        execute = cfg.execute_tools if execute_tools is None else execute_tools
        keep_going = cfg.run_to_max_turns if run_to_max_turns is None else run_to_max_turns
        model = model_override or cfg.model_override

        if not self._run_lock.acquire(blocking=False):
            raise OrchestratorError("Orchestrator is already running")
        try:
            self._debug = cfg.debug if debug is None else debug
            ctx = _RunContext(
                agent=agent,
                history=[Message.coerce(m) for m in messages or ()],
                context_variables=dict(context_variables or {}),
            )
            ctx.init_len = len(ctx.history)
            for message in ctx.history:
                for tc in message.tool_calls or ():
                    ctx.seen_call_ids.add(tc.id)
            return self._loop(ctx, budget, execute, keep_going, model)
        finally:
            self._run_lock.release()

    def stop(self) -> None:
        """Signal the running loop to stop at its next suspension point.

        Thread-safe. The run raises RunCancelledError.
        """
        self._stop_event.set()

    def reset(self) -> None:
        """Reset the orchestrator for reuse after a stop."""
        self._stop_event.clear()
        self._state = RunState.IDLE

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _loop(
        self,
        ctx: _RunContext,
        max_turns: int,
        execute_tools: bool,
        run_to_max_turns: bool,
        model: str | None,
    ) -> RunResult:
        executor = ToolExecutor(self._registry, max_workers=self._config.max_workers)
        reason: StopReason

        try:
            while True:
                if ctx.turns >= max_turns:
                    reason = StopReason.MAX_TURNS_EXCEEDED
                    break
                self._check_cancelled(ctx)

                self._state = RunState.RUNNING
                turn = self._call_gateway(ctx, model)
                ctx.turns += 1
                self._check_cancelled(ctx)
                self._register_call_ids(ctx, turn.tool_calls)

                assistant = Message.assistant(
                    turn.content, tool_calls=turn.tool_calls, sender=ctx.agent.name
                )

                if not turn.has_tool_calls:
                    ctx.history.append(assistant)
                    self._record_turn(
                        ctx, TurnRecord(turn=ctx.turns, agent=ctx.agent.name, content=turn.content)
                    )
                    if run_to_max_turns:
                        continue
                    reason = StopReason.NATURAL_COMPLETION
                    break

                if not execute_tools:
                    ctx.history.append(assistant)
                    self._record_turn(
                        ctx,
                        TurnRecord(
                            turn=ctx.turns,
                            agent=ctx.agent.name,
                            content=turn.content,
                            tool_calls=turn.tool_calls,
                        ),
                    )
                    reason = StopReason.TOOLS_NOT_EXECUTED
                    break

                self._state = RunState.AWAITING_TOOL_RESULTS
                results = self._execute_tools(executor, ctx, turn.tool_calls)
                # assistant message and its results land together or not at all
                self._check_cancelled(ctx)
                self._append_turn(ctx, assistant, results)

                previous = ctx.agent
                target, source = self._resolver.resolve(ctx.agent, results)
                handoff_to: str | None = None
                if target is not None and not target.same_as(ctx.agent):
                    self._state = RunState.HANDOFF_PENDING
                    call_id = source.call_id if source is not None else None
                    ctx.history.append(self._resolver.switch_record(ctx.agent, target, call_id))
                    self._trace("Handoff %s -> %s (call %s)", previous.name, target.name, call_id)
                    ctx.agent = target
                    handoff_to = target.name

                self._record_turn(
                    ctx,
                    TurnRecord(
                        turn=ctx.turns,
                        agent=previous.name,
                        content=turn.content,
                        tool_calls=turn.tool_calls,
                        results=tuple(results),
                        handoff_to=handoff_to,
                    ),
                )

                if any(r.stop for r in results):
                    reason = StopReason.EXECUTION_STOPPED
                    break

        except (GatewayError, HandoffAmbiguityError) as exc:
            self._state = RunState.FAILED
            exc.result = self._result(ctx, StopReason.FAILED)
            logger.error("Run failed after %d turn(s): %s", ctx.turns, exc)
            raise

        self._state = RunState.DONE
        logger.info(
            "Run finished: %s after %d turn(s), active agent %s",
            reason.value,
            ctx.turns,
            ctx.agent.name,
        )
        return self._result(ctx, reason)

    def _call_gateway(self, ctx: _RunContext, model: str | None) -> ModelTurnResult:
        """One gateway round-trip with an immutable history snapshot.

        Any non-GatewayError raised by the gateway is wrapped in GatewayError.
        """
        tools = self._registry.schemas_for(ctx.agent)
        self._trace(
            "Turn %d: calling model for agent %s (%d messages, %d tools)",
            ctx.turns + 1,
            ctx.agent.name,
            len(ctx.history),
            len(tools),
        )
        try:
            raw = self._gateway.complete(
                ctx.agent,
                tuple(ctx.history),
                tools,
                model=model,
            )
            return ModelTurnResult.coerce(raw)
        except GatewayError:
            raise
        except Exception as exc:
            raise GatewayError(f"Model gateway failed: {type(exc).__name__}: {exc}") from exc

    def _register_call_ids(self, ctx: _RunContext, tool_calls: Sequence[ToolCall]) -> None:
        """Reject call ids that already appeared in this history."""
        for tc in tool_calls:
            if tc.id in ctx.seen_call_ids:
                raise GatewayResponseError(f"Model reused tool call id {tc.id!r}")
        ctx.seen_call_ids.update(tc.id for tc in tool_calls)

    def _execute_tools(
        self,
        executor: ToolExecutor,
        ctx: _RunContext,
        tool_calls: Sequence[ToolCall],
    ) -> list[ToolCallResult]:
        parallel = ctx.agent.parallel_tool_calls and len(tool_calls) > 1
        for tc in tool_calls:
            self._trace("Dispatching tool %s (call %s) with %s", tc.name, tc.id, tc.arguments)
        return executor.execute_batch(
            tool_calls,
            ctx.context_variables,
            parallel=parallel,
            allowed=ctx.agent.tools,
        )

    def _append_turn(
        self,
        ctx: _RunContext,
        assistant: Message,
        results: Sequence[ToolCallResult],
    ) -> None:
        ctx.history.append(assistant)
        ctx.history.extend(r.to_message() for r in results)
        for result in results:
            ctx.context_variables.update(result.context_variables)
            if self._config.on_tool_result is not None:
                try:
                    self._config.on_tool_result(result)
                except Exception:
                    logger.debug("on_tool_result callback error", exc_info=True)

    def _record_turn(self, ctx: _RunContext, record: TurnRecord) -> None:
        ctx.records.append(record)
        if self._config.on_turn is not None:
            try:
                self._config.on_turn(record)
            except Exception:
                logger.debug("on_turn callback error", exc_info=True)

    def _check_cancelled(self, ctx: _RunContext) -> None:
        if self._stop_event.is_set():
            self._state = RunState.DONE
            logger.info("Run cancelled after %d turn(s)", ctx.turns)
            raise RunCancelledError(result=self._result(ctx, StopReason.CANCELLED))

    def _result(self, ctx: _RunContext, reason: StopReason) -> RunResult:
        return RunResult(
            history=tuple(ctx.history),
            agent=ctx.agent,
            stop_reason=reason,
            messages=tuple(ctx.history[ctx.init_len :]),
            context_variables=dict(ctx.context_variables),
            turns=ctx.turns,
            turn_records=tuple(ctx.records),
        )

    def _trace(self, msg: str, *args: object) -> None:
        logger.log(logging.INFO if self._debug else logging.DEBUG, msg, *args)
