"""
Model boundary layer for LLM inference.

This package provides a clean abstraction for model invocation,
allowing the relay to remain agnostic of the underlying backend.

Supported backends:
- OpenAIModelBackend: OpenAI Chat Completions (default)
- OllamaModelBackend: Local Ollama inference
- StubModelBackend: Deterministic fake model (CI/tests)

Example usage:
    from inference import StubModelBackend, ModelRequest

    backend = StubModelBackend()
    request = ModelRequest(prompt="Hello, world!")
    response = backend.generate(request)
"""

from .types import ModelRequest, ModelResponse, ModelStatus
from .base import ModelBackend, build_chat_messages
from .errors import CompletionError, ConfigError, ProviderError, RateLimited, raise_for_response
from .stub import StubModelBackend
from .ollama import OllamaModelBackend
from .openai_backend import OpenAIModelBackend

__all__ = [
    "ModelRequest",
    "ModelResponse",
    "ModelStatus",
    "ModelBackend",
    "build_chat_messages",
    "CompletionError",
    "ConfigError",
    "RateLimited",
    "ProviderError",
    "raise_for_response",
    "StubModelBackend",
    "OllamaModelBackend",
    "OpenAIModelBackend",
]
