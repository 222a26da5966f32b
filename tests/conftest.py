from __future__ import annotations

import pytest

from stepwise import FakeDispatcher


class StubCallable:
    def __init__(self) -> None:
        self.return_value = None
        self.side_effect = None
        self.calls = []

    def _next_effect(self):
        if isinstance(self.side_effect, list):
            if not self.side_effect:
                return None
            return self.side_effect.pop(0)
        return self.side_effect

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.side_effect is not None:
            effect = self._next_effect()
            if isinstance(effect, Exception):
                raise effect
            if callable(effect):
                return effect(*args, **kwargs)
            return effect
        return self.return_value


class StubClient:
    def __init__(self) -> None:
        self.completion = StubCallable()
        self._embedding = StubCallable()


@pytest.fixture
def stub_client(monkeypatch):
    client = StubClient()
    created = []

    def _create(provider, **kwargs):
        created.append((provider, kwargs))
        return client

    monkeypatch.setattr("stepwise.dispatch.live.AnyLLM.create", _create)
    client.created = created
    return client


@pytest.fixture
def fake_dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
