"""Geminiクライアントのテスト（httpx.MockTransport を使用）"""

import json

import httpx
import pytest

from assistant.config import AssistantSettings
from assistant.exceptions import MalformedReply, NetworkFailure
from assistant.gemini_client import GeminiClient
from assistant.personas import Persona
from assistant.request_builder import build_answer_request
from tests.fakes import make_reply


def make_client(handler) -> GeminiClient:
    return GeminiClient(
        api_key="secret-key",
        api_url="https://gemini.test/v1beta/",
        model="gemini-test",
        transport=httpx.MockTransport(handler),
    )


def test_api_key_is_required():
    with pytest.raises(ValueError):
        GeminiClient(api_key="")


def test_defaults_match_settings():
    client = GeminiClient(api_key="secret-key")
    fields = AssistantSettings.model_fields

    assert client.api_url == fields["gemini_api_url"].default
    assert client.model == fields["gemini_model"].default


def test_endpoint():
    client = make_client(lambda request: httpx.Response(200))
    assert client.endpoint == "https://gemini.test/v1beta/models/gemini-test:generateContent"


@pytest.mark.asyncio
async def test_generate_content_posts_json_payload():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=make_reply("Hello"))

    payload = build_answer_request("Hi", Persona.PIRATE)
    reply = await make_client(handler).generate_content(payload)

    assert reply == make_reply("Hello")
    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["x-goog-api-key"] == "secret-key"
    assert "key=" not in str(request.url)
    assert json.loads(request.content) == payload


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 429, 500, 503])
async def test_non_success_status_is_network_failure(status_code):
    client = make_client(lambda request: httpx.Response(status_code, json={"error": {}}))

    with pytest.raises(NetworkFailure) as exc_info:
        await client.generate_content(build_answer_request("Hi", Persona.DEFAULT))

    assert exc_info.value.status_code == status_code
    assert "secret-key" not in exc_info.value.message


@pytest.mark.asyncio
async def test_connect_error_is_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkFailure) as exc_info:
        await make_client(handler).generate_content(build_answer_request("Hi", Persona.DEFAULT))
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_timeout_is_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NetworkFailure, match="timed out"):
        await make_client(handler).generate_content(build_answer_request("Hi", Persona.DEFAULT))


@pytest.mark.asyncio
async def test_non_json_body_is_malformed():
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedReply):
        await client.generate_content(build_answer_request("Hi", Persona.DEFAULT))
