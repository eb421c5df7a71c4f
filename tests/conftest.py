# tests/conftest.py
from __future__ import annotations
import asyncio
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from textcoach.main import app
from textcoach.services.llm import CompletionResult

# --------------------------------------------------------------------
# FastAPI test client available as fixture `client`
# --------------------------------------------------------------------
@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app)

# --------------------------------------------------------------------
# Never talk to the real completion service during tests
# --------------------------------------------------------------------
@pytest.fixture(autouse=True)
def no_openai_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

# --------------------------------------------------------------------
# Scriptable stand-in for the completion capability
# --------------------------------------------------------------------
class StubCompletion:
    def __init__(self, reply: Optional[str] = None, success: bool = True,
                 error: Optional[str] = None, exc: Optional[Exception] = None,
                 delay: float = 0.0):
        self.reply = reply
        self.success = success
        self.error = error
        self.exc = exc
        self.delay = delay
        self.calls: List[list] = []

    async def __call__(self, messages):
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return CompletionResult(success=self.success, message=self.reply, error=self.error)

@pytest.fixture
def stub_completion():
    return StubCompletion
