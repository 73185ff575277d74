"""Entry point used by the UI layer: image in, explanation and quiz out."""

from __future__ import annotations

import logging
from typing import Any

from core.errors import ContractViolationError
from core.schemas import AnalysisRequest, AnalysisResult
from core.settings import Language, ProviderConfig
from llm.base_llm import BaseVisionLLM
from llm.llm_factory import build_llm
from llm.prompt_engine.instructions import select_instructions
from llm.response_normalizer import normalize

logger = logging.getLogger("st.solver")


async def solve(
    image: str,
    mime_type: str,
    language: Language | str,
    config: ProviderConfig,
    *,
    llm: BaseVisionLLM | None = None,
    **transport_options: Any,
) -> AnalysisResult:
    """Analyze one base64-encoded image with the active provider.

    Raises ConfigurationError, UnauthorizedError, RequestError or
    ContractViolationError; each carries a message localized to ``language``.
    """
    request = AnalysisRequest(
        image_base64=image,
        mime_type=mime_type,
        language=language,
        config=config.model_copy(deep=True),
    )
    instructions = select_instructions(request.language)
    adapter = llm or build_llm(request.config, **transport_options)
    logger.info(
        "Solving with provider=%s model=%s language=%s",
        request.config.provider.value,
        request.config.effective_model,
        request.language.value,
    )

    raw_text = await adapter.generate(request, instructions)

    try:
        return normalize(raw_text, language=request.language)
    except ContractViolationError as exc:
        logger.error("Model response did not conform (%s). Raw text: %r", exc.detail, exc.raw_text)
        raise
