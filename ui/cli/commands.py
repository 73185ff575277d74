"""Typer command handlers."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer

from core.errors import ConfigurationError, SolveError, UnauthorizedError
from core.schemas import AnalysisResult
from core.settings import (
    PROVIDER_CATALOG,
    Language,
    Provider,
    ProviderConfig,
    load_language,
    load_provider_config,
)
from core.solver import solve as solve_problem
from vision.image_encoder import ImageReadError, load_image

logger = logging.getLogger("st.cli")

OPTION_LETTERS = "ABCD"

_TEXT = {
    Language.EN: {
        "explanation": "Explanation",
        "quiz": "Practice quiz",
        "answer_prompt": "Your answer (A-D)",
        "correct": "Correct!",
        "incorrect": "Not quite. The correct answer is",
        "settings_hint": "Run `snaptutor config show` to check your keys, or pass --api-key.",
    },
    Language.ZH: {
        "explanation": "解析",
        "quiz": "随堂测验",
        "answer_prompt": "你的答案 (A-D)",
        "correct": "回答正确！",
        "incorrect": "回答错误。正确答案是",
        "settings_hint": "运行 `snaptutor config show` 检查 API Key，或使用 --api-key 传入。",
    },
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _effective_config(
    provider: Provider | None,
    model: str | None,
    endpoint: str | None,
    api_key: str | None,
) -> ProviderConfig:
    config = load_provider_config()
    if provider is not None and provider != config.provider:
        config = config.switch_provider(provider)
    updates: dict[str, str] = {}
    if model:
        updates["model"] = model
    if endpoint is not None:
        updates["endpoint"] = endpoint.strip()
    if updates:
        config = config.model_copy(update=updates)
    if api_key:
        config = config.with_credential(config.provider, api_key)
    return config


def render_result(result: AnalysisResult, language: Language) -> None:
    text = _TEXT[language]
    typer.echo(f"## {text['explanation']}\n")
    typer.echo(result.explanation)
    typer.echo(f"\n## {text['quiz']}\n")
    typer.echo(result.quiz.question)
    for letter, option in zip(OPTION_LETTERS, result.quiz.options):
        typer.echo(f"  {letter}. {option}")


def run_quiz(result: AnalysisResult, language: Language) -> bool:
    """Prompt for an answer; return True when it is correct."""
    text = _TEXT[language]
    while True:
        answer = typer.prompt(text["answer_prompt"]).strip().upper()
        if len(answer) == 1 and answer in OPTION_LETTERS:
            break
    correct_letter = OPTION_LETTERS[result.quiz.correct_index]
    is_correct = answer == correct_letter
    if is_correct:
        typer.echo(text["correct"])
    else:
        typer.echo(f"{text['incorrect']} {correct_letter}.")
    if result.quiz.explanation:
        typer.echo(result.quiz.explanation)
    return is_correct


def solve(
    image: Path,
    language: Language | None = None,
    provider: Provider | None = None,
    model: str | None = None,
    endpoint: str | None = None,
    api_key: str | None = None,
    quiz: bool = False,
    as_json: bool = False,
    verbose: bool = False,
) -> None:
    """Encode IMAGE, run it through the active provider and print the result."""
    _configure_logging(verbose)
    lang = language or load_language()
    config = _effective_config(provider, model, endpoint, api_key)

    try:
        encoded = asyncio.run(load_image(image))
    except ImageReadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    try:
        result = asyncio.run(solve_problem(encoded.data, encoded.mime_type, lang, config))
    except SolveError as exc:
        typer.echo(exc.user_message, err=True)
        if isinstance(exc, (ConfigurationError, UnauthorizedError)):
            typer.echo(_TEXT[lang]["settings_hint"], err=True)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(result.to_wire(), ensure_ascii=False, indent=2))
        return
    render_result(result, lang)
    if quiz:
        run_quiz(result, lang)


def config_show() -> None:
    """Show effective runtime config."""
    config = load_provider_config()
    payload = {"language": load_language().value, **config.masked()}
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def providers_list() -> None:
    """List providers with defaults and capability flags."""
    for provider, spec in PROVIDER_CATALOG.items():
        typer.echo(f"{provider.value}: {spec.display_name}")
        typer.echo(f"  default model: {spec.default_model}")
        typer.echo(f"  endpoint: {spec.default_base_url or '(SDK default)'}")
        typer.echo(f"  models: {', '.join(spec.models)}")
        typer.echo(
            f"  json mode: {'yes' if spec.supports_json_mode else 'no'}"
            f" | image detail hint: {'yes' if spec.supports_image_detail else 'no'}"
        )
        typer.echo(f"  get a key: {spec.key_url}")
