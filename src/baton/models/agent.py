"""Agent descriptor and tool-choice policy.

An Agent is pure configuration: identity, model, instructions, the ordered
names of the tools it may call, and how the model should choose among them.
Agents are frozen; a handoff always names a different Agent value rather
than mutating the active one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_INSTRUCTIONS = "You are a helpful agent."


class ToolChoiceMode(str, enum.Enum):
    """Closed set of tool-choice policies."""

    AUTO = "auto"
    REQUIRED = "required"
    NONE = "none"


@dataclass(frozen=True)
class ToolChoice:
    """Tool-choice policy hinted to the model.

    ``REQUIRED`` carries the name of the tool the model must call.

    Usage::

        ToolChoice.auto()
        ToolChoice.required("transfer_to_billing")
        ToolChoice.none()
    """

    mode: ToolChoiceMode = ToolChoiceMode.AUTO
    tool_name: str | None = None

    def __post_init__(self) -> None:
        if self.mode == ToolChoiceMode.REQUIRED and not self.tool_name:
            raise ValueError("ToolChoice.required needs a tool_name")
        if self.mode != ToolChoiceMode.REQUIRED and self.tool_name is not None:
            raise ValueError(f"ToolChoice {self.mode.value!r} does not take a tool_name")

    @classmethod
    def auto(cls) -> ToolChoice:
        return cls(ToolChoiceMode.AUTO)

    @classmethod
    def required(cls, tool_name: str) -> ToolChoice:
        return cls(ToolChoiceMode.REQUIRED, tool_name)

    @classmethod
    def none(cls) -> ToolChoice:
        return cls(ToolChoiceMode.NONE)

    def to_openai(self) -> str | dict:
        """Render in Chat Completions ``tool_choice`` format."""
        if self.mode == ToolChoiceMode.REQUIRED:
            return {"type": "function", "function": {"name": self.tool_name}}
        return self.mode.value


def _tool_ref_name(ref: Any) -> str:
    if isinstance(ref, str):
        return ref
    name = getattr(ref, "name", None) or getattr(ref, "__name__", None)
    if not isinstance(name, str) or not name:
        raise TypeError(f"Cannot derive a tool name from {ref!r}")
    return name


@dataclass(frozen=True)
class Agent:
    """A named configuration of instructions, model, and allowed tools.

    Attributes:
        name: Identity of the agent. Handoff comparisons use the name.
        model: Target model identifier.
        instructions: System prompt sent ahead of the history on every call.
        tools: Ordered tool names. Accepts names, ToolDefinitions, or plain
            functions at construction; stored as a tuple of names. The order
            is advisory to the model, not an execution order.
        tool_choice: Optional policy; None lets the gateway default apply.
        parallel_tool_calls: Allow concurrent execution of multiple tool
            calls returned in one turn.
    """

    name: str = "Agent"
    model: str = DEFAULT_MODEL
    instructions: str = DEFAULT_INSTRUCTIONS
    tools: tuple[str, ...] = field(default_factory=tuple)
    tool_choice: ToolChoice | None = None
    parallel_tool_calls: bool = True

    def __post_init__(self) -> None:
        names = tuple(_tool_ref_name(t) for t in self.tools)
        if len(set(names)) != len(names):
            raise ValueError(f"Agent {self.name!r} declares a tool more than once: {names}")
        object.__setattr__(self, "tools", names)
        if (
            self.tool_choice is not None
            and self.tool_choice.mode == ToolChoiceMode.REQUIRED
            and self.tool_choice.tool_name not in names
        ):
            raise ValueError(
                f"Agent {self.name!r} requires tool {self.tool_choice.tool_name!r} "
                "which it does not declare"
            )

    def same_as(self, other: Agent | None) -> bool:
        """Whether ``other`` refers to the same agent identity."""
        return other is not None and other.name == self.name
