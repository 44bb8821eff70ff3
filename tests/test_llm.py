"""Tests for the baton.llm transport.

Tests cover:
- OpenAIClient: request formatting, retry behavior, auth errors, env config
- Error hierarchy: inheritance, error attributes
"""

from __future__ import annotations

import json

import httpx
import pytest
import tenacity

from baton.exceptions import BatonError
from baton.llm import (
    GatewayAuthError,
    GatewayConfigError,
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
    OpenAIClient,
)


# ---------------------------------------------------------------------------
# Fixtures and helpers
# ---------------------------------------------------------------------------

def _success_response(content: str = "Hello!", model: str = "gpt-4o-mini") -> dict:
    """Build a realistic chat completion response dict."""
    return {
        "id": "chatcmpl-test123",
        "object": "chat.completion",
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def _make_client(
    handler=None,
    api_key: str = "test-key",
    base_url: str = "http://test-api",
    max_retries: int = 3,
) -> OpenAIClient:
    """Create an OpenAIClient over an httpx.MockTransport, without retry sleeps."""
    client = OpenAIClient(
        api_key=api_key,
        base_url=base_url,
        max_retries=max_retries,
        retry_wait=tenacity.wait_none(),
    )
    if handler is not None:
        client._client = httpx.Client(
            transport=httpx.MockTransport(handler),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )
    return client


def _counting_handler(responses: list[tuple[int, dict]]):
    """Answer with ``(status, kwargs)`` pairs in order, repeating the last.

    ``handler.count`` holds the number of requests seen.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        status, kwargs = responses[min(handler.count, len(responses) - 1)]
        handler.count += 1
        return httpx.Response(status, **kwargs)

    handler.count = 0
    return handler


# ===========================================================================
# Error hierarchy tests
# ===========================================================================

class TestErrorHierarchy:
    @pytest.mark.parametrize(
        "error_class",
        [GatewayConfigError, GatewayRateLimitError, GatewayAuthError, GatewayResponseError],
    )
    def test_subclasses_gateway_error(self, error_class):
        assert issubclass(error_class, GatewayError)
        assert issubclass(error_class, BatonError)

    def test_rate_limit_error_has_retry_after(self):
        err = GatewayRateLimitError("rate limited", retry_after=30.0)
        assert err.retry_after == 30.0
        assert "30.0s" in str(err)

    def test_rate_limit_error_no_retry_after(self):
        assert GatewayRateLimitError("rate limited").retry_after is None

    def test_result_defaults_to_none(self):
        assert GatewayError("x").result is None


# ===========================================================================
# OpenAIClient tests
# ===========================================================================

class TestOpenAIClientChat:
    def test_chat_success(self):
        client = _make_client(lambda request: httpx.Response(200, json=_success_response()))
        response = client.chat([{"role": "user", "content": "Hello"}])
        assert response["choices"][0]["message"]["content"] == "Hello!"
        client.close()

    def test_chat_request_format(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["payload"] = json.loads(request.content)
            captured["headers"] = dict(request.headers)
            captured["url"] = str(request.url)
            return httpx.Response(200, json=_success_response())

        client = _make_client(handler)
        client.chat(
            [{"role": "user", "content": "Test"}],
            model="gpt-4o",
            temperature=0.5,
            max_tokens=100,
        )

        payload = captured["payload"]
        assert payload["model"] == "gpt-4o"
        assert payload["messages"] == [{"role": "user", "content": "Test"}]
        assert payload["temperature"] == 0.5
        assert payload["max_tokens"] == 100
        assert captured["headers"]["authorization"] == "Bearer test-key"
        assert captured["url"] == "http://test-api/chat/completions"

    def test_default_model_used(self):
        captured = {}

        def handler(request):
            captured["payload"] = json.loads(request.content)
            return httpx.Response(200, json=_success_response())

        _make_client(handler).chat([{"role": "user", "content": "x"}])
        assert captured["payload"]["model"] == "gpt-4o-mini"
        assert "temperature" not in captured["payload"]

    def test_tool_fields_only_with_tools(self):
        captured = []

        def handler(request):
            captured.append(json.loads(request.content))
            return httpx.Response(200, json=_success_response())

        client = _make_client(handler)
        client.chat([], tools=[], tool_choice="auto", parallel_tool_calls=True)
        tools = [{"type": "function", "function": {"name": "f", "parameters": {}}}]
        client.chat([], tools=tools, tool_choice="auto", parallel_tool_calls=False)

        assert "tools" not in captured[0]
        assert "tool_choice" not in captured[0]
        assert "parallel_tool_calls" not in captured[0]
        assert captured[1]["tools"] == tools
        assert captured[1]["tool_choice"] == "auto"
        assert captured[1]["parallel_tool_calls"] is False

    def test_context_manager(self):
        with _make_client(lambda r: httpx.Response(200, json=_success_response())) as client:
            assert client.chat([])["choices"]


class TestOpenAIClientRetry:
    def test_retries_on_server_error(self):
        handler = _counting_handler([
            (503, dict(text="unavailable")),
            (200, dict(json=_success_response("recovered"))),
        ])
        response = _make_client(handler).chat([])
        assert response["choices"][0]["message"]["content"] == "recovered"
        assert handler.count == 2

    def test_retries_on_rate_limit(self):
        handler = _counting_handler([
            (429, dict(text="slow down")),
            (200, dict(json=_success_response())),
        ])
        _make_client(handler).chat([])
        assert handler.count == 2

    def test_rate_limit_exhausted(self):
        handler = _counting_handler([
            (429, dict(text="slow down", headers={"Retry-After": "7"})),
        ])
        with pytest.raises(GatewayRateLimitError) as exc_info:
            _make_client(handler, max_retries=2).chat([])
        assert exc_info.value.retry_after == 7.0
        assert handler.count == 2

    def test_auth_error_not_retried(self):
        handler = _counting_handler([(401, dict(text="bad key"))])
        with pytest.raises(GatewayAuthError):
            _make_client(handler).chat([])
        assert handler.count == 1

    def test_client_error_not_retried(self):
        handler = _counting_handler([(400, dict(text="bad request"))])
        with pytest.raises(GatewayError, match="HTTP 400"):
            _make_client(handler).chat([])
        assert handler.count == 1

    def test_server_error_exhausted(self):
        handler = _counting_handler([(500, dict(text="oops"))])
        with pytest.raises(GatewayError, match="HTTP 500"):
            _make_client(handler, max_retries=3).chat([])
        assert handler.count == 3

    def test_connect_error_retried_then_wrapped(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayError, match="ConnectError"):
            _make_client(handler, max_retries=2).chat([])
        assert len(attempts) == 2


class TestOpenAIClientResponses:
    def test_missing_choices(self):
        client = _make_client(lambda r: httpx.Response(200, json={"error": "nope"}))
        with pytest.raises(GatewayResponseError, match="choices"):
            client.chat([])

    def test_non_json_body(self):
        client = _make_client(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(GatewayResponseError, match="not JSON"):
            client.chat([])

    def test_extract_message(self):
        assert OpenAIClient.extract_message(_success_response("x"))["content"] == "x"

    def test_extract_message_missing(self):
        with pytest.raises(GatewayResponseError):
            OpenAIClient.extract_message({"choices": []})

    def test_extract_usage(self):
        assert OpenAIClient.extract_usage(_success_response())["total_tokens"] == 15
        assert OpenAIClient.extract_usage({}) is None


class TestOpenAIClientConfig:
    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("BATON_OPENAI_API_KEY", raising=False)
        with pytest.raises(GatewayConfigError, match="BATON_OPENAI_API_KEY"):
            OpenAIClient()

    def test_key_and_url_from_env(self, monkeypatch):
        monkeypatch.setenv("BATON_OPENAI_API_KEY", "env-key")
        monkeypatch.setenv("BATON_OPENAI_BASE_URL", "http://env-api/v1/")
        client = OpenAIClient()
        assert client._api_key == "env-key"
        assert client._base_url == "http://env-api/v1"
        client.close()

    def test_explicit_args_win(self, monkeypatch):
        monkeypatch.setenv("BATON_OPENAI_API_KEY", "env-key")
        client = OpenAIClient(api_key="arg-key", base_url="http://arg-api")
        assert client._api_key == "arg-key"
        assert client._base_url == "http://arg-api"
        client.close()

    def test_default_base_url(self, monkeypatch):
        monkeypatch.delenv("BATON_OPENAI_BASE_URL", raising=False)
        client = OpenAIClient(api_key="k")
        assert client._base_url == "https://api.openai.com/v1"
        client.close()
