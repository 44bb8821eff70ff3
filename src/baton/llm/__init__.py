"""Model gateway infrastructure for Baton.

Provides the ModelGateway protocol, the ModelTurnResult it returns, an
OpenAI-compatible httpx client and the gateway built on top of it.
"""

from baton.llm.client import OpenAIClient
from baton.llm.errors import (
    GatewayAuthError,
    GatewayConfigError,
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
)
from baton.llm.gateway import (
    CallableGateway,
    ModelGateway,
    ModelTurnResult,
    OpenAIGateway,
    as_gateway,
)

__all__ = [
    "OpenAIClient",
    "OpenAIGateway",
    "CallableGateway",
    "ModelGateway",
    "ModelTurnResult",
    "as_gateway",
    "GatewayError",
    "GatewayConfigError",
    "GatewayRateLimitError",
    "GatewayAuthError",
    "GatewayResponseError",
]
