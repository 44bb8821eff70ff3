"""Tests for handoff markers, detection and resolution."""

from __future__ import annotations

import pytest

from baton import Agent, Handoff, HandoffResolver, ToolCallResult, ToolResult, detect_handoff
from baton.exceptions import HandoffAmbiguityError
from baton.handoff import handoff_payload

TRIAGE = Agent(name="Triage")
BILLING = Agent(name="Billing")
SUPPORT = Agent(name="Support")


def result(call_id: str, handoff: Agent | None = None) -> ToolCallResult:
    return ToolCallResult(call_id=call_id, tool_name="t", payload="x", handoff=handoff)


class TestDetectHandoff:
    def test_handoff_marker(self):
        assert detect_handoff(Handoff(BILLING)) is BILLING

    def test_tool_result_agent(self):
        assert detect_handoff(ToolResult(agent=BILLING)) is BILLING

    def test_tool_result_without_agent(self):
        assert detect_handoff(ToolResult(value="x")) is None

    def test_bare_agent(self):
        assert detect_handoff(BILLING) is BILLING

    @pytest.mark.parametrize(
        "payload",
        [None, "Billing", {"assistant": "Billing"}, {"agent": BILLING}, [BILLING]],
    )
    def test_ordinary_values(self, payload):
        assert detect_handoff(payload) is None

    def test_handoff_requires_agent(self):
        with pytest.raises(TypeError):
            Handoff("Billing")  # type: ignore[arg-type]


class TestHandoffPayload:
    def test_default_names_assistant(self):
        assert handoff_payload(BILLING) == {"assistant": "Billing"}

    def test_empty_value_uses_default(self):
        assert handoff_payload(BILLING, "") == {"assistant": "Billing"}

    def test_explicit_value(self):
        assert handoff_payload(BILLING, "moving on") == "moving on"


class TestResolver:
    def test_no_handoff(self):
        assert HandoffResolver().resolve(TRIAGE, [result("c1"), result("c2")]) == (None, None)

    def test_single_target(self):
        r = result("c2", BILLING)
        target, source = HandoffResolver().resolve(TRIAGE, [result("c1"), r])
        assert target is BILLING
        assert source is r

    def test_same_target_collapses_to_first(self):
        first, second = result("c1", BILLING), result("c2", Agent(name="Billing"))
        target, source = HandoffResolver().resolve(TRIAGE, [first, second])
        assert target is BILLING
        assert source is first

    def test_distinct_targets_are_ambiguous(self):
        with pytest.raises(HandoffAmbiguityError) as exc_info:
            HandoffResolver().resolve(
                TRIAGE, [result("c1", BILLING), result("c2", SUPPORT), result("c3", BILLING)]
            )
        assert exc_info.value.targets == ["Billing", "Support"]
        assert "Billing" in str(exc_info.value)

    def test_active_agent_returned_unchanged(self):
        target, _ = HandoffResolver().resolve(BILLING, [result("c1", BILLING)])
        assert target.same_as(BILLING)

    def test_switch_record(self):
        record = HandoffResolver().switch_record(TRIAGE, BILLING, "call_9")
        assert record.role == "system"
        assert record.content == "Handoff: Triage -> Billing"
        assert record.is_handoff_record
        assert record.metadata["handoff"] == {
            "from": "Triage",
            "to": "Billing",
            "tool_call_id": "call_9",
        }
