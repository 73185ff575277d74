"""Failure taxonomy surfaced by ``solve``, with one localized message per kind."""

from __future__ import annotations

from typing import ClassVar

from core.settings import Language


class SolveError(Exception):
    """Base failure. ``detail`` is diagnostic; ``user_message`` is what the UI shows."""

    messages: ClassVar[dict[Language, str]] = {
        Language.EN: "Failed to analyze the image.",
        Language.ZH: "图片分析失败。",
    }

    def __init__(self, detail: str = "", *, language: Language | str = Language.EN) -> None:
        self.detail = detail
        self.language = Language(language)
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return self.messages[self.language].format(detail=self.detail)


class ConfigurationError(SolveError):
    """No credential stored for the active provider."""

    messages = {
        Language.EN: "API Key not configured. Please enter it in Settings.",
        Language.ZH: "未配置 API Key，请在设置中输入。",
    }


class UnauthorizedError(SolveError):
    """Provider rejected the credential."""

    messages = {
        Language.EN: "Unauthorized (401). Please check your API Key.",
        Language.ZH: "身份验证失败 (401)，请检查您的 API Key。",
    }


class RequestError(SolveError):
    """Any other provider or transport failure."""

    messages = {
        Language.EN: "API Request Failed: {detail}",
        Language.ZH: "API 请求失败：{detail}",
    }

    def __init__(
        self,
        detail: str = "",
        *,
        status_code: int | None = None,
        language: Language | str = Language.EN,
    ) -> None:
        self.status_code = status_code
        super().__init__(detail, language=language)


class ContractViolationError(SolveError):
    """Model output was not valid JSON or broke the result invariants."""

    messages = {
        Language.EN: "Failed to parse AI response (Invalid JSON).",
        Language.ZH: "AI 返回数据格式错误（JSON 解析失败）。",
    }

    def __init__(
        self,
        detail: str = "",
        *,
        raw_text: str = "",
        language: Language | str = Language.EN,
    ) -> None:
        self.raw_text = raw_text
        super().__init__(detail, language=language)
