"""Tests for the completion API wrapper."""

import json
from types import SimpleNamespace

import httpx
import pytest

from affiscope.config import Settings
from affiscope.services.llm import (
    ClaudeProvider,
    OpenAIProvider,
    get_llm_provider,
    strip_code_fence,
)


def make_provider(answer: str, captured: list[httpx.Request]) -> OpenAIProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            200, json={"choices": [{"message": {"content": answer}}]}
        )

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIProvider("sk-test", model="gpt-test", client=client)


async def test_openai_complete_sends_chat_request():
    captured: list[httpx.Request] = []
    provider = make_provider("こんにちは", captured)

    try:
        answer = await provider.complete("hello", system="be brief")
    finally:
        await provider.close()

    assert answer == "こんにちは"
    request = captured[0]
    assert str(request.url) == OpenAIProvider.API_URL
    assert request.headers["authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-test"
    assert body["messages"] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hello"},
    ]


async def test_openai_complete_json_strips_fence():
    captured: list[httpx.Request] = []
    provider = make_provider('```json\n{"score": 3}\n```', captured)

    try:
        data = await provider.complete_json("rate it")
    finally:
        await provider.close()

    assert data == {"score": 3}
    system = json.loads(captured[0].content)["messages"][0]
    assert system["role"] == "system"
    assert "valid JSON" in system["content"]


async def test_openai_http_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = OpenAIProvider("sk-test", client=client)

    with pytest.raises(httpx.HTTPStatusError):
        await provider.complete("hello")
    await provider.close()


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence("```\n[]\n```") == "[]"
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


def test_get_llm_provider_requires_openai_key():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        get_llm_provider(Settings(llm_provider="openai", openai_api_key=""))


def test_get_llm_provider_requires_anthropic_key():
    with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
        get_llm_provider(Settings(llm_provider="claude", anthropic_api_key=""))


async def test_get_llm_provider_openai():
    provider = get_llm_provider(
        Settings(llm_provider="openai", openai_api_key="sk-x", openai_model="gpt-x")
    )
    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-x"
    await provider.close()


async def test_get_llm_provider_claude():
    provider = get_llm_provider(Settings(llm_provider="claude", anthropic_api_key="sk-ant"))
    assert isinstance(provider, ClaudeProvider)
    await provider.close()


class FakeMessages:
    def __init__(self, blocks):
        self.blocks = blocks
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=self.blocks)


class FakeAnthropic:
    def __init__(self, blocks):
        self.messages = FakeMessages(blocks)
        self.closed = False

    async def close(self):
        self.closed = True


async def test_claude_complete_uses_given_client():
    client = FakeAnthropic(
        [
            SimpleNamespace(type="thinking", thinking="..."),
            SimpleNamespace(type="text", text="要約"),
            SimpleNamespace(type="text", text="です"),
        ]
    )
    provider = ClaudeProvider("sk-ant", model="claude-test", client=client)

    answer = await provider.complete("hello", system="be brief")
    await provider.close()

    assert answer == "要約です"
    assert client.closed is True
    call = client.messages.calls[0]
    assert call["model"] == "claude-test"
    assert call["system"] == "be brief"
    assert call["messages"] == [{"role": "user", "content": "hello"}]


async def test_claude_complete_without_system():
    client = FakeAnthropic([SimpleNamespace(type="text", text='{"ok": true}')])
    provider = ClaudeProvider("sk-ant", client=client)

    assert await provider.complete_json("rate it") == {"ok": True}
    assert "valid JSON" in client.messages.calls[0]["system"]

    await provider.complete("plain")
    assert "system" not in client.messages.calls[1]
