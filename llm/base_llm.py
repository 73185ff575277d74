"""Base vision LLM interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from core.errors import ConfigurationError
from core.schemas import AnalysisRequest
from core.settings import ProviderConfig
from llm.prompt_engine.instructions import InstructionSet


class BaseVisionLLM(ABC):
    """Abstract provider adapter: one image in, raw model text out."""

    def __init__(self, config: ProviderConfig) -> None:
        self.config = config

    @property
    def model(self) -> str:
        return self.config.effective_model

    def require_credential(self, request: AnalysisRequest) -> str:
        """Return the active provider's key or fail before any network call."""
        api_key = self.config.credential
        if not api_key:
            raise ConfigurationError(
                f"{self.config.provider.value} API key missing",
                language=request.language,
            )
        return api_key

    @abstractmethod
    async def generate(self, request: AnalysisRequest, instructions: InstructionSet) -> str:
        """Send the image and instructions upstream and return the raw text reply."""
