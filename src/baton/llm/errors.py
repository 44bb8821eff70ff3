"""Model gateway error hierarchy.

All gateway errors inherit from BatonError for consistent exception handling.
A GatewayError always aborts the run that raised it; the orchestrator never
retries. Retry policy lives in the transport (see ``OpenAIClient``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from baton.exceptions import BatonError

if TYPE_CHECKING:
    from baton.orchestrator.models import RunResult


class GatewayError(BatonError):
    """Base for all model gateway errors.

    Attributes:
        result: Partial RunResult attached by the orchestrator when the
            error aborts a run, so callers can audit the history so far.
    """

    result: RunResult | None = None


class GatewayConfigError(GatewayError):
    """Missing or invalid gateway configuration (e.g., no API key)."""


class GatewayRateLimitError(GatewayError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class GatewayAuthError(GatewayError):
    """Authentication failed (401/403)."""


class GatewayResponseError(GatewayError):
    """Unexpected response format from the model API."""
