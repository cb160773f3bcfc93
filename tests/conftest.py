import asyncio
from types import SimpleNamespace

import pytest

import llm_wrapper
import mock_data


class FakeCompletions:
    """Stands in for client.chat.completions; records every create() call."""

    def __init__(self, reply=None, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        prompt = kwargs["messages"][-1]["content"]
        delay = self.delay(prompt) if callable(self.delay) else self.delay
        await asyncio.sleep(delay)
        content = self.reply(prompt) if callable(self.reply) else self.reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeClient:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def offline(monkeypatch):
    monkeypatch.setattr(llm_wrapper, "USE_OPENAI", False)


@pytest.fixture(autouse=True)
def fresh_mock_data(monkeypatch):
    # edits mutate the module lists; give each test its own copy
    monkeypatch.setattr(mock_data, "BEDS", [h.model_copy() for h in mock_data.BEDS])
    monkeypatch.setattr(mock_data, "INVENTORY", [m.model_copy() for m in mock_data.INVENTORY])
