"""Google Gemini vision provider.

Uses the google-genai SDK. The image travels as an inline part next to the
user prompt, the tutoring instruction goes in ``system_instruction`` and the
model is asked for ``application/json`` output at a low temperature.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable
from typing import Any

import httpx
from google import genai
from google.genai import errors, types

from core.errors import RequestError, UnauthorizedError
from core.schemas import AnalysisRequest
from core.settings import ProviderConfig
from llm.base_llm import BaseVisionLLM
from llm.prompt_engine.instructions import InstructionSet

logger = logging.getLogger("st.llm.gemini")

TEMPERATURE = 0.2
RESPONSE_MIME_TYPE = "application/json"


class GeminiProvider(BaseVisionLLM):
    """Google Gemini API adapter."""

    def __init__(
        self,
        config: ProviderConfig,
        client_factory: Callable[..., Any] | None = None,
    ) -> None:
        super().__init__(config)
        self._owns_client = client_factory is None
        self._client_factory = client_factory or genai.Client

    def _build_client(self, api_key: str) -> Any:
        endpoint = self.config.endpoint.strip()
        if endpoint:
            logger.info("Gemini endpoint override: %s", endpoint)
            return self._client_factory(
                api_key=api_key, http_options=types.HttpOptions(base_url=endpoint)
            )
        return self._client_factory(api_key=api_key)

    @staticmethod
    def build_contents(request: AnalysisRequest, prompt: str) -> list[types.Content]:
        """Single user turn: inline image part followed by the text prompt."""
        image_bytes = base64.b64decode(request.image_base64, validate=True)
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=image_bytes, mime_type=request.mime_type),
                    types.Part.from_text(text=prompt),
                ],
            )
        ]

    @staticmethod
    def build_config(instructions: InstructionSet) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=instructions.system,
            response_mime_type=RESPONSE_MIME_TYPE,
            temperature=TEMPERATURE,
        )

    async def generate(self, request: AnalysisRequest, instructions: InstructionSet) -> str:
        api_key = self.require_credential(request)
        try:
            contents = self.build_contents(request, instructions.prompt)
        except binascii.Error as exc:
            logger.error("Image payload is not valid base64: %s", exc)
            raise RequestError(
                f"image data is not valid base64 ({exc})", language=request.language
            ) from exc

        client = self._build_client(api_key)
        logger.info("Calling Gemini model=%s", self.model)
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=self.build_config(instructions),
            )
        except errors.APIError as exc:
            logger.error("Gemini call failed: code=%s status=%s message=%s", exc.code, exc.status, exc.message)
            if _is_bad_credential(exc):
                raise UnauthorizedError(str(exc.message or exc), language=request.language) from exc
            raise RequestError(
                str(exc.message or exc), status_code=exc.code, language=request.language
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini transport failure: %s", exc)
            raise RequestError(str(exc), language=request.language) from exc
        finally:
            # Clients from an injected factory belong to the caller.
            if self._owns_client:
                await client.aio.aclose()

        text = getattr(response, "text", None) or ""
        logger.info("Gemini response received (%d chars)", len(text))
        return text


def _is_bad_credential(exc: errors.APIError) -> bool:
    if exc.code == 401:
        return True
    message = str(exc.message or "").lower()
    return exc.code == 400 and "api key not valid" in message
