# tests/test_llm.py
import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from textcoach.services import llm

MESSAGES = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]


class _FakeClient:
    """Replaces AsyncOpenAI; `outcome` is the reply content or an exception."""
    outcome = None
    created = []

    def __init__(self, **kwargs):
        _FakeClient.created.append(kwargs)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self.closed = False

    async def _create(self, **kwargs):
        if isinstance(_FakeClient.outcome, Exception):
            raise _FakeClient.outcome
        message = SimpleNamespace(content=_FakeClient.outcome)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_openai(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(llm, "AsyncOpenAI", _FakeClient)
    _FakeClient.created = []
    _FakeClient.outcome = None
    return _FakeClient


def _run(coro):
    return asyncio.run(coro)


def test_missing_key_fails_without_a_request(monkeypatch):
    def _boom(**kwargs):
        raise AssertionError("client must not be created without a key")
    monkeypatch.setattr(llm, "AsyncOpenAI", _boom)

    result = _run(llm.complete(MESSAGES))
    assert result.success is False
    assert "OPENAI_API_KEY" in result.error


def test_successful_completion(fake_openai):
    fake_openai.outcome = "  hello there  "
    result = _run(llm.complete(MESSAGES))
    assert result.success is True
    assert result.message == "hello there"
    assert fake_openai.created[0]["max_retries"] == 0


def test_non_2xx_surfaces_status(fake_openai):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(500, request=request)
    fake_openai.outcome = openai.APIStatusError("server error", response=response, body=None)

    result = _run(llm.complete(MESSAGES))
    assert result.success is False
    assert "500" in result.error
    assert "Internal Server Error" in result.error


def test_timeout_is_a_structured_failure(fake_openai):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    fake_openai.outcome = openai.APITimeoutError(request=request)

    result = _run(llm.complete(MESSAGES))
    assert result.success is False
    assert "timed out" in result.error


def test_empty_content_is_a_failure(fake_openai):
    fake_openai.outcome = ""
    result = _run(llm.complete(MESSAGES))
    assert result.success is False
    assert result.error == "No response from AI"


@pytest.mark.parametrize("raw,expected", [
    ('{"a": 1}', {"a": 1}),
    ('Sure! Here it is:\n{"a": {"b": [1, 2]}}\nHope that helps.', {"a": {"b": [1, 2]}}),
    ('```json\n{"text": "braces } inside { strings"}\n```', {"text": "braces } inside { strings"}),
    ('{"quote": "say \\"hi\\" {"}', {"quote": 'say "hi" {'}),
    ('{not json} then {"ok": true}', {"ok": True}),
    ('{"first": 1} {"second": 2}', {"first": 1}),
])
def test_extract_json_object(raw, expected):
    assert llm.extract_json_object(raw) == expected


@pytest.mark.parametrize("raw", ["", "no json here", "[1, 2, 3]", '{"open": ', "}{"])
def test_extract_json_object_absent(raw):
    assert llm.extract_json_object(raw) is None


@pytest.mark.parametrize("raw,expected", [
    ('[{"a": 1}]', [{"a": 1}]),
    ('Edits:\n```json\n[{"original": "x [y]", "n": [1, 2]}]\n```', [{"original": "x [y]", "n": [1, 2]}]),
    ('[not json] then ["ok"]', ["ok"]),
    ('{"wrapped": [1, 2]}', [1, 2]),
])
def test_extract_json_array(raw, expected):
    assert llm.extract_json_array(raw) == expected


@pytest.mark.parametrize("raw", ["", "no list", '{"a": 1}', "[1, 2"])
def test_extract_json_array_absent(raw):
    assert llm.extract_json_array(raw) is None
