"""Shared fixtures for panelgen tests."""

import asyncio
import os
import tempfile
from typing import List, Optional

import pytest

# Keep settings, logs and persona files out of the home directory
os.environ.setdefault("PANELGEN_DIR", tempfile.mkdtemp(prefix="panelgen-test-"))
os.environ.pop("OPENAI_API_KEY", None)

from panelgen.models import ChatMessage, Persona
from panelgen.services.llm import CompletionClient, DemoCompletionClient
from panelgen.storage import InMemoryPersonaStore


class SlowCompletionClient(CompletionClient):
    """Answers the first ``fast_calls`` calls, then hangs."""

    def __init__(self, replies: List[str], fast_calls: int, delay: float = 5.0):
        self.replies = list(replies)
        self.fast_calls = fast_calls
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        timeout: Optional[float] = None
    ) -> str:
        self.calls += 1
        if self.calls > self.fast_calls:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        return self.replies.pop(0)


@pytest.fixture
def alice() -> Persona:
    return Persona(id="p-alice", name="Alice", role="smartphone", traits="early adopter", bio="Designer")


@pytest.fixture
def bob() -> Persona:
    return Persona(id="p-bob", name="Bob", role="tablet", traits="price-sensitive", bio="Accountant")


@pytest.fixture
def carol() -> Persona:
    return Persona(id="p-carol", name="Carol", role="wearables", traits="social", bio="Student")


@pytest.fixture
def participants(alice, bob, carol) -> List[Persona]:
    return [alice, bob, carol]


@pytest.fixture
def persona_store(participants) -> InMemoryPersonaStore:
    return InMemoryPersonaStore(participants)


@pytest.fixture
def demo_client() -> DemoCompletionClient:
    return DemoCompletionClient()


@pytest.fixture
def slow_client():
    """Factory for clients that hang after a number of answered calls."""
    return SlowCompletionClient
