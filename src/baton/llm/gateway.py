"""Model gateway contract and the Chat Completions implementation.

A gateway takes the active agent, an immutable snapshot of the history and
the agent's tool schemas, and returns a ModelTurnResult: final text, or one
or more tool-call requests (optionally with partial text).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from baton.llm.errors import GatewayResponseError
from baton.models.messages import ToolCall

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from baton.llm.client import OpenAIClient
    from baton.models.agent import Agent
    from baton.models.messages import Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelTurnResult:
    """What the model produced for one turn.

    Attributes:
        content: Assistant text (final answer, or partial text alongside
            tool calls). None when the model sent no text.
        tool_calls: Requests in the order the model issued them.
        raw: The provider response, when there is one.
    """

    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = field(default_factory=tuple)
    raw: dict | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        calls = tuple(self.tool_calls or ())
        ids = [tc.id for tc in calls]
        if len(set(ids)) != len(ids):
            raise GatewayResponseError(f"Duplicate tool call ids in one turn: {ids}")
        object.__setattr__(self, "tool_calls", calls)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @classmethod
    def from_message(cls, message: dict, raw: dict | None = None) -> ModelTurnResult:
        """Parse an OpenAI-style assistant message dict."""
        calls: list[ToolCall] = []
        for entry in message.get("tool_calls") or []:
            try:
                if not entry.get("id"):
                    entry = {**entry, "id": f"call_{uuid.uuid4().hex[:12]}"}
                calls.append(ToolCall.from_openai(entry))
            except (KeyError, TypeError, AttributeError) as exc:
                raise GatewayResponseError(f"Malformed tool call in response: {entry!r}") from exc
        return cls(content=message.get("content"), tool_calls=tuple(calls), raw=raw)

    @classmethod
    def coerce(cls, value: Any) -> ModelTurnResult:
        """Accept a ModelTurnResult, plain text, a message dict, or a full response dict."""
        if isinstance(value, ModelTurnResult):
            return value
        if isinstance(value, str):
            return cls(content=value)
        if isinstance(value, dict):
            if "choices" in value:
                try:
                    message = value["choices"][0]["message"]
                except (KeyError, IndexError, TypeError) as exc:
                    raise GatewayResponseError(
                        f"Cannot extract message from response: {exc}"
                    ) from exc
                return cls.from_message(message, raw=value)
            return cls.from_message(value)
        raise GatewayResponseError(
            f"Gateway returned unsupported type {type(value).__name__}"
        )


@runtime_checkable
class ModelGateway(Protocol):
    """Protocol for pluggable model backends.

    Implementations must raise ``GatewayError`` (or a subclass) on
    transport, auth or rate-limit failures. They must not mutate
    ``history``.
    """

    def complete(
        self,
        agent: Agent,
        history: Sequence[Message],
        tools: list[dict],
        *,
        model: str | None = None,
    ) -> ModelTurnResult:
        """Run one model round-trip for ``agent``."""
        ...


def build_request_messages(agent: Agent, history: Sequence[Message]) -> list[dict]:
    """Agent instructions as the system message, then the history."""
    messages: list[dict] = [{"role": "system", "content": agent.instructions}]
    messages.extend(m.to_openai() for m in history)
    return messages


class OpenAIGateway:
    """ModelGateway backed by the Chat Completions protocol.

    Usage::

        gateway = OpenAIGateway(OpenAIClient(api_key="sk-..."))
        turn = gateway.complete(agent, history, registry.schemas_for(agent))
    """

    def __init__(
        self,
        client: OpenAIClient,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        extra_llm_kwargs: dict | None = None,
    ) -> None:
        self._client = client
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._extra = dict(extra_llm_kwargs or {})

    def complete(
        self,
        agent: Agent,
        history: Sequence[Message],
        tools: list[dict],
        *,
        model: str | None = None,
    ) -> ModelTurnResult:
        kwargs: dict[str, Any] = dict(self._extra)
        if tools:
            kwargs["tools"] = tools
            kwargs["parallel_tool_calls"] = agent.parallel_tool_calls
            if agent.tool_choice is not None:
                kwargs["tool_choice"] = agent.tool_choice.to_openai()
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        if self._max_tokens is not None:
            kwargs["max_tokens"] = self._max_tokens

        response = self._client.chat(
            build_request_messages(agent, history),
            model=model or agent.model,
            **kwargs,
        )
        message = self._client.extract_message(response)
        return ModelTurnResult.from_message(message, raw=response)

    def close(self) -> None:
        self._client.close()


class CallableGateway:
    """Adapts a plain function to the ModelGateway protocol.

    The function is called with keyword arguments ``agent``, ``history``,
    ``tools`` and ``model`` and may return a ModelTurnResult, a string, an
    assistant message dict, or a full Chat Completions response dict.
    """

    def __init__(self, fn: Callable[..., Any]) -> None:
        self._fn = fn

    def complete(
        self,
        agent: Agent,
        history: Sequence[Message],
        tools: list[dict],
        *,
        model: str | None = None,
    ) -> ModelTurnResult:
        return ModelTurnResult.coerce(
            self._fn(agent=agent, history=history, tools=tools, model=model)
        )


def as_gateway(obj: ModelGateway | Callable[..., Any]) -> ModelGateway:
    """Return ``obj`` if it already implements ModelGateway, else wrap it."""
    if isinstance(obj, ModelGateway):
        return obj
    if callable(obj):
        return CallableGateway(obj)
    raise TypeError(f"Expected a ModelGateway or callable, got {type(obj).__name__}")
