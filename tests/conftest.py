"""Shared test fixtures for Baton.

Provides a tool registry with a weather tool, the agents used across the
run scenarios, and a scripted model gateway. No test talks to a real API.
"""

from __future__ import annotations

import pytest

from baton import Agent, ModelTurnResult, ToolCall, ToolRegistry

WEATHER_SCHEMA = {
    "type": "object",
    "properties": {"location": {"type": "string"}},
    "required": ["location"],
}


class ScriptedGateway:
    """Gateway that replays canned turns and records every call.

    Each entry in ``turns`` is returned for one call, in order; the last
    entry repeats once the script runs out. An entry may be a
    ModelTurnResult (or anything ModelTurnResult.coerce accepts), an
    exception instance to raise, or a callable ``(agent, history)``.
    """

    def __init__(self, turns):
        self._turns = list(turns)
        self.calls: list[dict] = []

    def complete(self, agent, history, tools, *, model=None):
        self.calls.append({"agent": agent, "history": history, "tools": tools, "model": model})
        turn = self._turns[min(len(self.calls), len(self._turns)) - 1]
        if isinstance(turn, BaseException):
            raise turn
        if callable(turn):
            return turn(agent, history)
        return turn


def tool_turn(*calls, text=None) -> ModelTurnResult:
    """A model turn requesting ``(name, arguments, call_id)`` tool calls."""
    return ModelTurnResult(
        content=text,
        tool_calls=tuple(ToolCall(id=cid, name=name, arguments=args) for name, args, cid in calls),
    )


def text_turn(text: str) -> ModelTurnResult:
    return ModelTurnResult(content=text)


@pytest.fixture
def scripted():
    """Factory: ``scripted(turn, turn, ...)`` -> ScriptedGateway."""
    return lambda *turns: ScriptedGateway(turns)


@pytest.fixture
def calls():
    """Helpers for building model turns: ``calls.tool(...)`` / ``calls.text(...)``."""

    class _Turns:
        tool = staticmethod(tool_turn)
        text = staticmethod(text_turn)

    return _Turns


@pytest.fixture
def weather_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(
        "get_weather",
        "Get the weather for a given location",
        WEATHER_SCHEMA,
        lambda location: {"temp": 72, "location": location},
    )
    return registry


@pytest.fixture
def weather_agent() -> Agent:
    return Agent(name="Weather Agent", tools=["get_weather"])


@pytest.fixture
def billing_agent() -> Agent:
    return Agent(name="Billing", instructions="You handle billing questions.")


@pytest.fixture
def triage_agent() -> Agent:
    return Agent(name="Triage", tools=["transfer_to_billing"])
