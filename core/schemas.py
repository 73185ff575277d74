"""Pydantic contracts for analysis requests and the tutor's structured result."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.settings import Language, ProviderConfig

DEFAULT_MIME_TYPE = "image/jpeg"
QUIZ_OPTION_COUNT = 4


class AnalysisRequest(BaseModel):
    """One image plus everything needed to send it to the active provider."""

    model_config = ConfigDict(frozen=True)

    image_base64: str
    mime_type: str = DEFAULT_MIME_TYPE
    language: Language = Language.EN
    config: ProviderConfig

    @field_validator("mime_type", mode="before")
    @classmethod
    def _default_mime(cls, value: Any) -> str:
        return (str(value).strip() if value else "") or DEFAULT_MIME_TYPE

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.image_base64}"


class Quiz(BaseModel):
    """Self-contained multiple-choice practice question."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=QUIZ_OPTION_COUNT, max_length=QUIZ_OPTION_COUNT)
    correct_index: int = Field(alias="correctIndex", strict=True, ge=0, le=QUIZ_OPTION_COUNT - 1)
    explanation: str = ""
    svg: str | None = None

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("quiz question is blank")
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_numeric_options(cls, value: Any) -> Any:
        # Models sometimes emit bare numbers for numeric answers.
        if isinstance(value, list):
            return [
                str(item) if isinstance(item, (int, float)) and not isinstance(item, bool) else item
                for item in value
            ]
        return value

    @model_validator(mode="after")
    def _index_points_at_option(self) -> Quiz:
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError("correctIndex does not point at an option")
        return self


class AnalysisResult(BaseModel):
    """Worked explanation plus practice quiz, as returned to the UI layer."""

    explanation: str = Field(min_length=1)
    quiz: Quiz

    @field_validator("explanation")
    @classmethod
    def _explanation_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("explanation is blank")
        return value

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the JSON field names of the wire contract."""
        return self.model_dump(by_alias=True, exclude_none=True)
