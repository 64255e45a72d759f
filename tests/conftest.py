"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agent.memory import ConversationStore, DedupCache  # noqa: E402
from inference import ModelBackend, ModelRequest, ModelResponse  # noqa: E402


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ScriptedBackend(ModelBackend):
    """
    Backend that records every request and replies from a script.

    `responses` items are ModelResponse objects or exceptions to raise;
    once exhausted it echoes the prompt.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests: list[ModelRequest] = []

    def generate(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if self.responses:
            item = self.responses.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return ModelResponse(status="success", output=f"reply:{request.prompt}")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ConversationStore(history_cap=20, clock=clock)


@pytest.fixture
def dedup(clock):
    return DedupCache(ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def make_backend():
    """Factory for ScriptedBackend with a response script."""
    return ScriptedBackend


@pytest.fixture
def backend(make_backend):
    return make_backend()
