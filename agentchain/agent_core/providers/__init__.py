"""Provider adapter layer.

Turns ``(provider, model, prompt, credentials)`` into generated text plus token
usage, for built-in vendors and for template-driven custom providers, and
classifies every failure as retryable or not.

The main entry point is ``ProviderRouter``.
"""

from .base import ProviderAdapter, ProviderDescriptor, ProviderResponse, redact
from .builtin import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from .custom import CustomProviderAdapter
from .errors import (
    AuthenticationError,
    InvalidRequestError,
    PayloadTooLargeError,
    ProviderConfigValidationError,
    ProviderError,
    ProviderResponseError,
    ProviderServerError,
    ProviderTransportError,
    RateLimitError,
    ResponsePathError,
)
from .router import ProviderRouter

__all__ = [
    "ProviderAdapter",
    "ProviderDescriptor",
    "ProviderResponse",
    "redact",
    "AnthropicAdapter",
    "GeminiAdapter",
    "OpenAIAdapter",
    "CustomProviderAdapter",
    "ProviderRouter",
    "AuthenticationError",
    "InvalidRequestError",
    "PayloadTooLargeError",
    "ProviderConfigValidationError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderServerError",
    "ProviderTransportError",
    "RateLimitError",
    "ResponsePathError",
]
