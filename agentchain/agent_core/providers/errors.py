"""Error types for the provider adapter layer.

Purpose:
- Give every provider failure a class that tells the agent executor whether
  retrying can help (``retryable``).
- Expose HTTP-oriented context (status code, provider error body) for diagnosis.

Usage:
- Catch ``ProviderError`` for any adapter failure and inspect ``retryable``,
  ``status_code`` or ``details``.
- Use ``error_from_status`` to classify a non-2xx HTTP response.
"""

from __future__ import annotations

from typing import Any, List, Optional


class ProviderError(Exception):
    """Base error for provider call failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional structured payload from the provider (e.g., JSON body).
    """

    retryable: bool = False

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class RateLimitError(ProviderError):
    """The provider answered 429."""

    retryable = True


class ProviderTransportError(ProviderError):
    """Connection, DNS, read failure or timeout before a response arrived."""

    retryable = True


class AuthenticationError(ProviderError):
    """Credentials were rejected (401/403)."""


class PayloadTooLargeError(ProviderError):
    """The request exceeded the provider's size limit (413)."""


class InvalidRequestError(ProviderError):
    """The provider rejected the request as malformed (400 and other 4xx)."""


class ProviderServerError(ProviderError):
    """The provider failed on its side (5xx)."""


class ProviderResponseError(ProviderError):
    """A 2xx response whose body could not be understood."""


class ResponsePathError(ProviderResponseError):
    """The configured response path did not resolve against the response body."""

    def __init__(self, path: str, *, details: Optional[Any] = None) -> None:
        super().__init__(f"Could not find response at path: {path}", details=details)
        self.path = path


class ProviderConfigValidationError(ValueError):
    """Raised when a custom provider configuration is invalid.

    Args:
        errors: List of ``{"field": ..., "message": ...}`` entries.
    """

    def __init__(self, errors: List[dict[str, str]]) -> None:
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Invalid provider configuration: {summary}")
        self.errors = errors


def extract_error_message(payload: Any) -> Optional[str]:
    """Pull a human-readable message out of a provider error body.

    Looks at ``error.message``, then ``message``, then a string ``error``.
    """
    if not isinstance(payload, dict):
        return None
    err = payload.get("error")
    if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"]:
        return err["message"]
    if isinstance(payload.get("message"), str) and payload["message"]:
        return payload["message"]
    if isinstance(err, str) and err:
        return err
    return None


def error_from_status(status_code: int, reason: str = "", payload: Any = None) -> ProviderError:
    """Classify a non-2xx provider response into a ``ProviderError`` subclass.

    The message comes from the provider's own error payload when present,
    otherwise ``"Provider API error: <status> <reason>"``.
    """
    message = extract_error_message(payload) or f"Provider API error: {status_code} {reason}".rstrip()
    cls: type[ProviderError]
    if status_code == 429:
        cls = RateLimitError
    elif status_code in (401, 403):
        cls = AuthenticationError
    elif status_code == 413:
        cls = PayloadTooLargeError
    elif 400 <= status_code < 500:
        cls = InvalidRequestError
    elif status_code >= 500:
        cls = ProviderServerError
    else:
        cls = ProviderResponseError
    return cls(message, status_code=status_code, details=payload)
