"""Conversation messages, tool-call requests, and tool-call results.

Frozen dataclasses only. A history is an ordered, append-only sequence of
Message values; nothing in Baton mutates a message once it is appended.
"""

from __future__ import annotations

import json as _json
import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, TypedDict

if TYPE_CHECKING:
    from baton.models.agent import Agent

Role = Literal["system", "user", "assistant", "tool"]

SYSTEM: Role = "system"
USER: Role = "user"
ASSISTANT: Role = "assistant"
TOOL: Role = "tool"

_ROLES = frozenset({SYSTEM, USER, ASSISTANT, TOOL})


class _ToolCallOpenAIFunction(TypedDict):
    """OpenAI function sub-object."""

    name: str
    arguments: str


class ToolCallOpenAIDict(TypedDict):
    """OpenAI wire format for a single tool call."""

    id: str
    type: str
    function: _ToolCallOpenAIFunction


def to_content(value: Any) -> str:
    """Render a tool payload as model-visible text.

    Strings pass through unchanged, None becomes an empty string, and
    anything else is JSON-encoded (falling back to ``str`` for values the
    encoder does not know).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return _json.dumps(value, default=str)


def _freeze(value: Any) -> Any:
    """Read-only copy of nested mappings."""
    if isinstance(value, Mapping):
        return types.MappingProxyType({k: _freeze(v) for k, v in value.items()})
    return value


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Arguments are always a parsed dict. OpenAI's JSON string is parsed at
    ingestion time; unparseable argument text is kept under ``"_raw"`` so
    schema validation can reject it instead of the parser crashing the run,
    and the original text is kept in ``raw_arguments`` so it is echoed back
    to the model unchanged.
    """

    id: str
    name: str
    arguments: dict = field(default_factory=dict)
    type: str = "function"
    raw_arguments: str | None = field(default=None, repr=False)

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.type))

    @classmethod
    def from_openai(cls, tc: dict) -> ToolCall:
        """Parse from OpenAI/compatible format."""
        raw_args = tc["function"].get("arguments") or "{}"
        raw_arguments = None
        try:
            arguments = _json.loads(raw_args) if isinstance(raw_args, str) else raw_args
        except (_json.JSONDecodeError, TypeError):
            arguments = None
        if not isinstance(arguments, dict):
            arguments = {"_raw": raw_args}
            if isinstance(raw_args, str):
                raw_arguments = raw_args
        return cls(
            id=tc["id"],
            name=tc["function"]["name"],
            arguments=arguments,
            type=tc.get("type", "function"),
            raw_arguments=raw_arguments,
        )

    @classmethod
    def from_dict(cls, d: dict) -> ToolCall:
        """Accept either the OpenAI wire shape or the flat ``to_dict`` shape."""
        if "function" in d:
            return cls.from_openai(d)
        return cls(
            id=d["id"],
            name=d["name"],
            arguments=d.get("arguments", {}),
            type=d.get("type", "function"),
        )

    def to_openai(self) -> ToolCallOpenAIDict:
        """Serialize to OpenAI wire format."""
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.name,
                "arguments": (
                    self.raw_arguments
                    if self.raw_arguments is not None
                    else _json.dumps(self.arguments)
                ),
            },
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "arguments": self.arguments,
            "type": self.type,
        }


@dataclass(frozen=True)
class Message:
    """A single entry in a conversation history.

    Attributes:
        role: One of system, user, assistant, tool.
        content: Message text, possibly empty.
        tool_calls: Tool-call requests carried by an assistant message.
        tool_call_id: For tool messages, the request this result answers.
        name: Tool name for tool messages; optional participant name otherwise.
        sender: Name of the agent that produced an assistant message.
        metadata: Out-of-band annotations (handoff records, error flags),
            stored as a read-only mapping. Never sent to the model.
    """

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_call_id: str | None = None
    name: str | None = None
    sender: str | None = None
    metadata: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.role not in _ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if self.tool_calls is not None:
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))
        if self.metadata is not None:
            object.__setattr__(self, "metadata", _freeze(self.metadata))
        if self.role == TOOL and not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")

    def __hash__(self) -> int:
        return hash((
            self.role, self.content, self.tool_calls,
            self.tool_call_id, self.name, self.sender,
        ))

    # -- constructors -----------------------------------------------------

    @classmethod
    def system(cls, content: str, **kwargs: Any) -> Message:
        return cls(role=SYSTEM, content=content, **kwargs)

    @classmethod
    def user(cls, content: str, **kwargs: Any) -> Message:
        return cls(role=USER, content=content, **kwargs)

    @classmethod
    def assistant(
        cls,
        content: str | None = "",
        *,
        tool_calls: list[ToolCall] | tuple[ToolCall, ...] | None = None,
        sender: str | None = None,
    ) -> Message:
        return cls(
            role=ASSISTANT,
            content=content or "",
            tool_calls=tuple(tool_calls) if tool_calls else None,
            sender=sender,
        )

    @classmethod
    def from_dict(cls, d: dict) -> Message:
        """Build from an OpenAI-style message dict."""
        raw_calls = d.get("tool_calls")
        return cls(
            role=d["role"],
            content=d.get("content") or "",
            tool_calls=tuple(ToolCall.from_dict(tc) for tc in raw_calls) if raw_calls else None,
            tool_call_id=d.get("tool_call_id"),
            name=d.get("name"),
            sender=d.get("sender"),
            metadata=d.get("metadata"),
        )

    @classmethod
    def coerce(cls, value: Message | dict) -> Message:
        if isinstance(value, Message):
            return value
        if isinstance(value, dict):
            return cls.from_dict(value)
        raise TypeError(f"Expected Message or dict, got {type(value).__name__}")

    # -- serialization ----------------------------------------------------

    def to_openai(self) -> dict:
        """Serialize to a Chat Completions request message."""
        d: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            d["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]
            if not self.content:
                d["content"] = None
        if self.tool_call_id is not None:
            d["tool_call_id"] = self.tool_call_id
        if self.name is not None and self.role in (USER, ASSISTANT):
            d["name"] = self.name
        return d

    @property
    def is_handoff_record(self) -> bool:
        return bool(self.metadata and "handoff" in self.metadata)


@dataclass(frozen=True)
class ToolCallResult:
    """Outcome of executing one ToolCall.

    Attributes:
        call_id: Identifier of the request this result answers.
        tool_name: Name of the tool that was requested.
        payload: Model-visible result (structured JSON or text). For errors,
            a dict ``{"error": <kind>, "message": <text>}``.
        is_error: Whether the call failed.
        handoff: Target agent when the tool requested a handoff.
        context_variables: Variables the tool asked to merge into the run.
        stop: Whether the tool asked the run to stop after this turn.
    """

    call_id: str
    tool_name: str
    payload: Any = None
    is_error: bool = False
    handoff: Agent | None = None
    context_variables: dict = field(default_factory=dict)
    stop: bool = False

    @property
    def content(self) -> str:
        return to_content(self.payload)

    def to_message(self) -> Message:
        """Build the tool-result message appended to history."""
        return Message(
            role=TOOL,
            content=self.content,
            tool_call_id=self.call_id,
            name=self.tool_name,
            metadata={"is_error": True} if self.is_error else None,
        )
