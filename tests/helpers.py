"""Payload builders and transport doubles shared by the tests."""

from __future__ import annotations

import base64
import json
from typing import Any

import httpx

IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"
IMAGE_B64 = base64.b64encode(IMAGE_BYTES).decode("utf-8")


def result_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "explanation": "Since $a^2 + b^2 = c^2$, the hypotenuse is $5$.",
        "quiz": {
            "question": "A right triangle has legs 6 and 8. How long is the hypotenuse?",
            "options": ["7", "10", "12", "14"],
            "correctIndex": 1,
            "explanation": "$\\sqrt{36 + 64} = 10$",
        },
    }
    payload.update(overrides)
    return payload


def completion_body(content: str | None) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class RecordingTransport:
    """httpx transport double that records every request it sees."""

    def __init__(self, status_code: int = 200, json_body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body)
        return httpx.Response(self.status_code, text=self.text)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def sent_json(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


