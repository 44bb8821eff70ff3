"""Tests for Agent and ToolChoice."""

from __future__ import annotations

import dataclasses

import pytest

from baton import Agent, ToolChoice, ToolChoiceMode, ToolDefinition
from baton.models.agent import DEFAULT_INSTRUCTIONS, DEFAULT_MODEL


def get_weather(location: str) -> dict:
    return {"temp": 72, "location": location}


class TestAgentDefaults:
    def test_defaults(self):
        agent = Agent()
        assert agent.name == "Agent"
        assert agent.model == DEFAULT_MODEL
        assert agent.instructions == DEFAULT_INSTRUCTIONS
        assert agent.tools == ()
        assert agent.tool_choice is None
        assert agent.parallel_tool_calls is True

    def test_frozen(self):
        agent = Agent(name="A")
        with pytest.raises(dataclasses.FrozenInstanceError):
            agent.name = "B"  # type: ignore[misc]


class TestAgentTools:
    def test_names_kept_in_order(self):
        agent = Agent(tools=["b", "a", "c"])
        assert agent.tools == ("b", "a", "c")

    def test_list_becomes_tuple(self):
        agent = Agent(tools=["a"])
        assert isinstance(agent.tools, tuple)

    def test_function_reference_uses_dunder_name(self):
        agent = Agent(tools=[get_weather])
        assert agent.tools == ("get_weather",)

    def test_tool_definition_reference_uses_name(self):
        tool = ToolDefinition("lookup", "Look something up", {"type": "object"}, get_weather)
        agent = Agent(tools=[tool, "other"])
        assert agent.tools == ("lookup", "other")

    def test_duplicate_tool_rejected(self):
        with pytest.raises(ValueError, match="more than once"):
            Agent(name="Dup", tools=["a", "a"])

    def test_unnamed_reference_rejected(self):
        with pytest.raises(TypeError):
            Agent(tools=[42])


class TestAgentIdentity:
    def test_same_as_compares_names(self):
        assert Agent(name="Billing").same_as(Agent(name="Billing", model="other"))

    def test_same_as_different_name(self):
        assert not Agent(name="Billing").same_as(Agent(name="Triage"))

    def test_same_as_none(self):
        assert not Agent(name="Billing").same_as(None)


# ---------------------------------------------------------------------------
# ToolChoice
# ---------------------------------------------------------------------------


class TestToolChoice:
    def test_auto(self):
        choice = ToolChoice.auto()
        assert choice.mode == ToolChoiceMode.AUTO
        assert choice.to_openai() == "auto"

    def test_none(self):
        assert ToolChoice.none().to_openai() == "none"

    def test_required_names_function(self):
        choice = ToolChoice.required("transfer_to_billing")
        assert choice.to_openai() == {
            "type": "function",
            "function": {"name": "transfer_to_billing"},
        }

    def test_required_without_name_rejected(self):
        with pytest.raises(ValueError):
            ToolChoice(ToolChoiceMode.REQUIRED)

    def test_auto_with_name_rejected(self):
        with pytest.raises(ValueError):
            ToolChoice(ToolChoiceMode.AUTO, "get_weather")

    def test_agent_required_tool_must_be_declared(self):
        with pytest.raises(ValueError, match="does not declare"):
            Agent(tools=["a"], tool_choice=ToolChoice.required("b"))

    def test_agent_required_tool_declared(self):
        agent = Agent(tools=["a"], tool_choice=ToolChoice.required("a"))
        assert agent.tool_choice.tool_name == "a"

    def test_mode_is_str_enum(self):
        assert ToolChoiceMode("required") is ToolChoiceMode.REQUIRED
