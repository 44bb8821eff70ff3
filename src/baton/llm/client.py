"""OpenAI-compatible Chat Completions transport over httpx, with tenacity retry.

This is the only place in Baton that retries: transient transport failures
(429, 5xx, connect errors) are retried with exponential backoff; auth
failures fail immediately. The orchestrator itself never retries.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
import tenacity

from baton.llm.errors import (
    GatewayAuthError,
    GatewayConfigError,
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
)

logger = logging.getLogger(__name__)

API_KEY_ENV = "BATON_OPENAI_API_KEY"
BASE_URL_ENV = "BATON_OPENAI_BASE_URL"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Retryable: 429, 500, 502, 503, 504, connection errors."""
    if isinstance(exc, GatewayAuthError):
        return False
    if isinstance(exc, GatewayRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Usage::

        with OpenAIClient(api_key="sk-...") as client:
            response = client.chat(
                [{"role": "user", "content": "Hello"}],
                tools=[...],
                tool_choice="auto",
            )
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = "gpt-4o-mini",
        timeout: float = 120.0,
        max_retries: int = 3,
        retry_wait: tenacity.wait.wait_base | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key. Falls back to BATON_OPENAI_API_KEY.
            base_url: API base URL. Falls back to BATON_OPENAI_BASE_URL,
                then to https://api.openai.com/v1.
            default_model: Model used when a request names none.
            timeout: Request timeout in seconds.
            max_retries: Maximum attempts for retryable errors.
            retry_wait: tenacity wait strategy between attempts. Defaults to
                exponential backoff (1-30s) with up to 2s of jitter.

        Raises:
            GatewayConfigError: If no API key is provided or found in environment.
        """
        self._api_key = api_key or os.environ.get(API_KEY_ENV, "")
        if not self._api_key:
            raise GatewayConfigError(
                f"No API key provided. Pass api_key= or set {API_KEY_ENV} "
                "environment variable."
            )
        self._base_url = (base_url or os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL)).rstrip("/")
        self.default_model = default_model
        self._max_retries = max_retries
        self._retry_wait = retry_wait or (
            tenacity.wait_exponential(multiplier=1, min=1, max=30) + tenacity.wait_random(0, 2)
        )
        self._client = httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        tools: list[dict] | None = None,
        tool_choice: str | dict | None = None,
        parallel_tool_calls: bool | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send a chat completion request, retrying transient failures.

        ``tools``, ``tool_choice`` and ``parallel_tool_calls`` are only put
        on the wire when ``tools`` is non-empty.

        Returns:
            Full response dict with 'choices', 'usage', 'model', etc.

        Raises:
            GatewayAuthError: On 401/403 (no retry).
            GatewayRateLimitError: On 429 after all retries exhausted.
            GatewayResponseError: On unexpected response format.
            GatewayError: On any other HTTP or transport failure.
        """
        payload: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
        }
        if tools:
            payload["tools"] = tools
            if tool_choice is not None:
                payload["tool_choice"] = tool_choice
            if parallel_tool_calls is not None:
                payload["parallel_tool_calls"] = parallel_tool_calls
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        payload.update(kwargs)

        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=self._retry_wait,
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            return retryer(self._post, payload)
        except GatewayError:
            raise
        except httpx.HTTPStatusError as exc:
            raise GatewayError(
                f"HTTP {exc.response.status_code} from model API: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"Transport error: {type(exc).__name__}: {exc}") from exc

    def _post(self, payload: dict) -> dict:
        """Execute a single request (no retry)."""
        response = self._client.post(f"{self._base_url}/chat/completions", json=payload)

        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise GatewayAuthError(
                f"Authentication failed: HTTP {response.status_code} - {response.text}"
            )

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise GatewayRateLimitError(
                f"Rate limited: HTTP 429 - {response.text}",
                retry_after=retry_after,
            )

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayResponseError(f"Response is not JSON: {response.text[:200]}") from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise GatewayResponseError(
                f"Unexpected response format: missing 'choices' key. Response: {data}"
            )
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def extract_message(response: dict) -> dict:
        """Return ``choices[0].message`` from a response dict.

        Raises:
            GatewayResponseError: If the response has no first choice message.
        """
        try:
            message = response["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GatewayResponseError(
                f"Cannot extract message from response: {exc}. Response: {response}"
            ) from exc
        if not isinstance(message, dict):
            raise GatewayResponseError(f"Malformed message in response: {message!r}")
        return message

    @staticmethod
    def extract_usage(response: dict) -> dict | None:
        return response.get("usage")
