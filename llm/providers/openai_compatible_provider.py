"""OpenAI-compatible chat-completions provider (OpenAI, Qwen/DashScope, ...).

Any backend that speaks ``POST {base_url}/chat/completions`` with the
OpenAI message schema is served here through the official ``openai`` SDK
pointed at the provider's base URL. Backends differ in small ways, and the
catalog flags cover them: only some accept ``response_format`` and only
OpenAI itself accepts the ``detail`` hint on image parts.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from core.errors import RequestError, UnauthorizedError
from core.schemas import AnalysisRequest
from core.settings import ProviderConfig
from llm.base_llm import BaseVisionLLM
from llm.prompt_engine.instructions import InstructionSet

logger = logging.getLogger("st.llm.openai_compat")

TEMPERATURE = 0.3
MAX_TOKENS = 4096
IMAGE_DETAIL = "high"


class ImageUrl(BaseModel):
    url: str
    detail: str | None = None


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str


class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: list[TextPart | ImagePart]


class ResponseFormat(BaseModel):
    type: Literal["json_object"] = "json_object"


class ChatCompletionBody(BaseModel):
    """Request body for ``/chat/completions``."""

    model: str
    messages: list[SystemMessage | UserMessage]
    temperature: float = TEMPERATURE
    max_tokens: int = MAX_TOKENS
    response_format: ResponseFormat | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def resolve_base_url(config: ProviderConfig) -> str:
    """Explicit endpoint wins, else the provider default; no trailing slash."""
    base_url = config.endpoint.strip() or config.spec.default_base_url
    return base_url.rstrip("/")


def build_messages(
    request: AnalysisRequest, instructions: InstructionSet
) -> list[SystemMessage | UserMessage]:
    return [
        SystemMessage(content=instructions.system),
        UserMessage(
            content=[
                TextPart(text=instructions.prompt),
                ImagePart(image_url=ImageUrl(url=request.data_uri, detail=IMAGE_DETAIL)),
            ]
        ),
    ]


def strip_image_detail(
    messages: list[SystemMessage | UserMessage],
) -> list[SystemMessage | UserMessage]:
    """Drop the ``detail`` hint from every image part."""
    cleaned: list[SystemMessage | UserMessage] = []
    for message in messages:
        if isinstance(message, UserMessage):
            parts = [
                part.model_copy(update={"image_url": part.image_url.model_copy(update={"detail": None})})
                if isinstance(part, ImagePart)
                else part
                for part in message.content
            ]
            message = message.model_copy(update={"content": parts})
        cleaned.append(message)
    return cleaned


def extract_error_message(response: httpx.Response) -> str:
    """Best human-readable message from an error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    text = response.text.strip()
    return text or f"Status {response.status_code}"


def extract_content(completion: Any) -> str:
    """First choice's message content, or an empty string when absent."""
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""


class OpenAICompatibleProvider(BaseVisionLLM):
    """Chat-completions adapter shared by every OpenAI-compatible backend."""

    def __init__(
        self,
        config: ProviderConfig,
        strict_json: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self.strict_json = strict_json
        self._http_client = http_client

    @property
    def base_url(self) -> str:
        return resolve_base_url(self.config)

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_body(self, request: AnalysisRequest, instructions: InstructionSet) -> ChatCompletionBody:
        messages = build_messages(request, instructions)
        if not self.config.spec.supports_image_detail:
            messages = strip_image_detail(messages)
        return ChatCompletionBody(
            model=self.model,
            messages=messages,
            response_format=ResponseFormat() if self.strict_json else None,
        )

    async def generate(self, request: AnalysisRequest, instructions: InstructionSet) -> str:
        api_key = self.require_credential(request)
        body = self.build_body(request, instructions)
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            max_retries=0,
            http_client=self._http_client,
        )
        logger.info(
            "POST %s provider=%s model=%s strict_json=%s",
            self.completions_url,
            self.config.provider.value,
            body.model,
            self.strict_json,
        )
        try:
            completion = await client.chat.completions.create(**body.to_payload())
        except openai.APIStatusError as exc:
            message = extract_error_message(exc.response)
            logger.error(
                "%s API error status=%s body=%s",
                self.config.provider.value,
                exc.status_code,
                exc.response.text,
            )
            if exc.status_code == 401:
                raise UnauthorizedError(message, language=request.language) from exc
            raise RequestError(message, status_code=exc.status_code, language=request.language) from exc
        except openai.APIConnectionError as exc:
            logger.error("%s transport failure: %s", self.config.provider.value, exc)
            raise RequestError(str(exc), language=request.language) from exc
        finally:
            # An injected http_client belongs to the caller.
            if self._http_client is None:
                await client.close()

        content = extract_content(completion)
        logger.info("%s response received (%d chars)", self.config.provider.value, len(content))
        return content
