from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .types import ModelRequest, ModelResponse


class ModelBackend(ABC):
    """
    Abstract completion boundary.
    The orchestrator depends ONLY on this interface.
    """

    @abstractmethod
    def generate(self, request: ModelRequest) -> ModelResponse:
        """Generate a reply. Failures are returned, never raised."""
        raise NotImplementedError


def build_chat_messages(request: ModelRequest) -> List[Dict[str, str]]:
    """Assemble [system, *history, user] for chat-style endpoints."""
    messages: List[Dict[str, str]] = []
    if request.system_prompt:
        messages.append({"role": "system", "content": request.system_prompt})
    messages.extend(request.history)
    messages.append({"role": "user", "content": request.prompt})
    return messages
