"""OpenAI-compatible adapter tests against a recording httpx transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from core.errors import ConfigurationError, RequestError, UnauthorizedError
from core.schemas import AnalysisRequest
from core.settings import Language, Provider, ProviderConfig
from llm.prompt_engine.instructions import InstructionSet, select_instructions
from llm.providers.openai_compatible_provider import (
    OpenAICompatibleProvider,
    resolve_base_url,
)
from helpers import IMAGE_B64, RecordingTransport, completion_body


def _request(config: ProviderConfig, language: Language = Language.EN) -> AnalysisRequest:
    return AnalysisRequest(
        image_base64=IMAGE_B64, mime_type="image/png", language=language, config=config
    )


def _run(provider: OpenAICompatibleProvider, request: AnalysisRequest, instructions: InstructionSet | None = None) -> str:
    return asyncio.run(
        provider.generate(request, instructions or select_instructions(request.language))
    )


def test_qwen_uses_default_endpoint_and_drops_detail_hint(qwen_config: ProviderConfig) -> None:
    transport = RecordingTransport(json_body=completion_body("{}"))
    provider = OpenAICompatibleProvider(qwen_config, strict_json=False, http_client=transport.client())

    _run(provider, _request(qwen_config))

    assert len(transport.requests) == 1
    sent = transport.requests[0]
    assert str(sent.url) == "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
    assert sent.method == "POST"
    assert sent.headers["Authorization"] == "Bearer k"
    assert sent.headers["Content-Type"].startswith("application/json")

    body = transport.sent_json()
    image_part = body["messages"][1]["content"][1]
    assert image_part["type"] == "image_url"
    assert image_part["image_url"] == {"url": f"data:image/png;base64,{IMAGE_B64}"}
    assert "detail" not in image_part["image_url"]
    assert "response_format" not in body


def test_openai_keeps_detail_hint_and_requests_json_mode(openai_config: ProviderConfig) -> None:
    transport = RecordingTransport(json_body=completion_body("{}"))
    provider = OpenAICompatibleProvider(openai_config, strict_json=True, http_client=transport.client())

    _run(provider, _request(openai_config))

    sent = transport.requests[0]
    assert str(sent.url) == "https://api.openai.com/v1/chat/completions"
    body = transport.sent_json()
    assert body["model"] == "gpt-4o"
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 4096
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][1]["content"][1]["image_url"]["detail"] == "high"


def test_instructions_are_transmitted_unmodified(qwen_config: ProviderConfig) -> None:
    transport = RecordingTransport(json_body=completion_body("{}"))
    provider = OpenAICompatibleProvider(qwen_config, http_client=transport.client())
    custom = InstructionSet(system="Only ever answer with {\"x\": \"\\\\alpha\"}.\n  keep spacing  ", prompt="go")

    _run(provider, _request(qwen_config), custom)

    messages = transport.sent_json()["messages"]
    assert messages[0] == {"role": "system", "content": custom.system}
    assert messages[1]["role"] == "user"
    assert messages[1]["content"][0] == {"type": "text", "text": "go"}


def test_endpoint_override_wins_and_trailing_slash_is_trimmed() -> None:
    config = ProviderConfig(
        provider=Provider.QWEN,
        endpoint="https://proxy.example.com/v1/",
        credentials={"qwen": "k"},
    )
    transport = RecordingTransport(json_body=completion_body("{}"))
    provider = OpenAICompatibleProvider(config, http_client=transport.client())

    _run(provider, _request(config))

    assert resolve_base_url(config) == "https://proxy.example.com/v1"
    assert provider.completions_url == "https://proxy.example.com/v1/chat/completions"
    assert str(transport.requests[0].url) == "https://proxy.example.com/v1/chat/completions"


def test_empty_model_falls_back_to_provider_default() -> None:
    config = ProviderConfig(provider=Provider.QWEN, model="", credentials={"qwen": "k"})
    transport = RecordingTransport(json_body=completion_body("{}"))
    _run(OpenAICompatibleProvider(config, http_client=transport.client()), _request(config))
    assert transport.sent_json()["model"] == "qwen-vl-max-latest"


def test_missing_credential_fails_before_any_request() -> None:
    config = ProviderConfig(provider=Provider.OPENAI, credentials={"openai": "  ", "qwen": "other"})
    transport = RecordingTransport(json_body=completion_body("{}"))
    provider = OpenAICompatibleProvider(config, http_client=transport.client())

    with pytest.raises(ConfigurationError) as exc_info:
        _run(provider, _request(config, Language.ZH))

    assert transport.requests == []
    assert str(exc_info.value) == "未配置 API Key，请在设置中输入。"


def test_unauthorized_response_maps_to_unauthorized_error(qwen_config: ProviderConfig) -> None:
    transport = RecordingTransport(
        status_code=401, json_body={"error": {"message": "Incorrect API key provided"}}
    )
    provider = OpenAICompatibleProvider(qwen_config, http_client=transport.client())

    with pytest.raises(UnauthorizedError) as exc_info:
        _run(provider, _request(qwen_config))

    assert len(transport.requests) == 1
    assert exc_info.value.detail == "Incorrect API key provided"


def test_server_error_message_is_extracted_and_not_retried(qwen_config: ProviderConfig) -> None:
    transport = RecordingTransport(status_code=500, json_body={"error": {"message": "boom"}})
    provider = OpenAICompatibleProvider(qwen_config, http_client=transport.client())

    with pytest.raises(RequestError) as exc_info:
        _run(provider, _request(qwen_config))

    assert "boom" in str(exc_info.value)
    assert exc_info.value.status_code == 500
    assert len(transport.requests) == 1


@pytest.mark.parametrize(
    ("status_code", "json_body", "text", "expected"),
    [
        (400, {"message": "model not found"}, "", "model not found"),
        (429, {"error": "rate limited"}, "", "rate limited"),
        (502, None, "Bad gateway from upstream", "Bad gateway from upstream"),
        (503, None, "", "Status 503"),
    ],
)
def test_error_message_fallbacks(
    qwen_config: ProviderConfig, status_code: int, json_body: object, text: str, expected: str
) -> None:
    transport = RecordingTransport(status_code=status_code, json_body=json_body, text=text)
    provider = OpenAICompatibleProvider(qwen_config, http_client=transport.client())

    with pytest.raises(RequestError) as exc_info:
        _run(provider, _request(qwen_config))

    assert exc_info.value.detail == expected


@pytest.mark.parametrize(
    "body",
    [
        completion_body(None),
        {"id": "x", "object": "chat.completion", "created": 0, "model": "m", "choices": []},
    ],
)
def test_absent_content_yields_empty_string(qwen_config: ProviderConfig, body: dict) -> None:
    transport = RecordingTransport(json_body=body)
    provider = OpenAICompatibleProvider(qwen_config, http_client=transport.client())
    assert _run(provider, _request(qwen_config)) == ""


def test_connection_failure_maps_to_request_error_without_retry(qwen_config: ProviderConfig) -> None:
    attempts: list[httpx.Request] = []

    def refuse(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    provider = OpenAICompatibleProvider(qwen_config, http_client=client)

    with pytest.raises(RequestError) as exc_info:
        _run(provider, _request(qwen_config))

    assert exc_info.value.status_code is None
    assert str(exc_info.value).startswith("API Request Failed:")
    assert len(attempts) == 1
