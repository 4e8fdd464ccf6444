import json

import httpx
import pytest

from llm.providers.mock_provider import MockProvider
from llm.providers.ollama_provider import OllamaProvider
from llm.providers.openai_provider import OpenAIProvider
from todo_ai.errors import ExtractionParseError, ExtractionTransportError


def _openai(handler) -> OpenAIProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIProvider(api_key="test-api-key", base_url="https://llm.test/v1", client=client)


def _chat_body(content) -> dict:
    return {"choices": [{"message": {"content": content}}]}


@pytest.mark.asyncio
async def test_openai_request_shape_and_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_chat_body('[{"title": "Buy milk"}]'))

    out = await _openai(handler).generate(system="SYS", user="buy milk")

    assert out == '[{"title": "Buy milk"}]'
    assert seen["path"] == "/v1/chat/completions"
    assert seen["auth"] == "Bearer test-api-key"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "SYS"},
        {"role": "user", "content": "buy milk"},
    ]


@pytest.mark.asyncio
async def test_openai_error_status_carries_detail():
    def handler(request):
        return httpx.Response(500, json={"error": "internal server error"})

    with pytest.raises(ExtractionTransportError) as exc_info:
        await _openai(handler).generate(system="s", user="failed API call")

    err = exc_info.value
    assert err.status_code == 500
    assert "internal server error" in err.detail
    assert "openai api error" in str(err)


@pytest.mark.asyncio
async def test_openai_network_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExtractionTransportError):
        await _openai(handler).generate(system="s", user="u")


@pytest.mark.asyncio
async def test_openai_non_json_body_is_parse_error():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(ExtractionParseError):
        await _openai(handler).generate(system="s", user="u")


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"id": "no-choices"},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        ["not", "an", "object"],
    ],
)
@pytest.mark.asyncio
async def test_openai_unexpected_envelope_is_parse_error(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(ExtractionParseError):
        await _openai(handler).generate(system="s", user="u")


@pytest.mark.asyncio
async def test_ollama_envelope():
    def handler(request):
        assert request.url.path == "/api/chat"
        assert json.loads(request.content)["stream"] is False
        return httpx.Response(200, json={"message": {"role": "assistant", "content": "[]"}})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = OllamaProvider(base_url="http://ollama.test", client=client)
    assert await provider.generate(system="s", user="u") == "[]"


@pytest.mark.asyncio
async def test_mock_provider_returns_candidate_array():
    provider = MockProvider()
    tasks = json.loads(await provider.generate(system="s", user="Buy milk, call mom"))
    assert [t["title"] for t in tasks] == ["Buy milk and eggs", "Call mom"]
    assert await provider.generate(system="s", user="   ") == "[]"
