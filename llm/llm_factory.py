"""Vision provider factory."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from core.settings import ProviderConfig, ProviderFamily
from llm.base_llm import BaseVisionLLM
from llm.providers.gemini_provider import GeminiProvider
from llm.providers.openai_compatible_provider import OpenAICompatibleProvider

ProviderHandler = Callable[..., BaseVisionLLM]


def _gemini(config: ProviderConfig, **options: Any) -> BaseVisionLLM:
    return GeminiProvider(config, client_factory=options.get("gemini_client_factory"))


def _openai_compatible(config: ProviderConfig, **options: Any) -> BaseVisionLLM:
    return OpenAICompatibleProvider(
        config,
        strict_json=config.spec.supports_json_mode,
        http_client=options.get("http_client"),
    )


_HANDLERS: dict[ProviderFamily, ProviderHandler] = {
    ProviderFamily.GEMINI: _gemini,
    ProviderFamily.OPENAI_COMPATIBLE: _openai_compatible,
}


def build_llm(config: ProviderConfig, **options: Any) -> BaseVisionLLM:
    """Build the adapter for the active provider.

    ``options`` carries transport overrides: ``http_client`` for
    OpenAI-compatible backends, ``gemini_client_factory`` for Gemini.
    """
    family = config.spec.family
    handler = _HANDLERS.get(family)
    if handler is None:
        raise ValueError(f"No adapter registered for provider family: {family}")
    return handler(config, **options)
