"""
Completion failure taxonomy.

Backends report failures through ModelResponse.status / error_type.
raise_for_response() turns a failed response into one of three exceptions
so callers can pick the user-facing fallback.
"""

from .types import ModelResponse


class CompletionError(Exception):
    """Base class for completion failures."""

    def __init__(self, message: str, error_type: str = "backend_unavailable"):
        super().__init__(message)
        self.error_type = error_type


class ConfigError(CompletionError):
    """Credentials are missing or rejected by the provider."""


class RateLimited(CompletionError):
    """The provider throttled the request."""


class ProviderError(CompletionError):
    """Any other provider failure (timeout, bad output, outage)."""


def raise_for_response(response: ModelResponse) -> str:
    """
    Return the reply text of a successful response, raise otherwise.

    Empty output counts as a provider failure.
    """
    if response.status == "success":
        output = (response.output or "").strip()
        if output:
            return output
        raise ProviderError("Model returned empty output", error_type="invalid_output")

    error_type = response.error_type or "backend_unavailable"
    detail = (response.metadata or {}).get("error", error_type)

    if error_type == "config_error":
        raise ConfigError(f"Completion backend misconfigured: {detail}", error_type)
    if error_type == "rate_limited":
        raise RateLimited(f"Completion backend rate limited: {detail}", error_type)
    raise ProviderError(f"Completion backend failed: {detail}", error_type)
