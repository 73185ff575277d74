"""CLI entrypoint for snaptutor."""

from __future__ import annotations

from pathlib import Path

import typer

from core.settings import Language, Provider
from ui.cli import commands

app = typer.Typer(help="Snap a math problem, get a worked explanation and a practice quiz")
config_app = typer.Typer(help="Configuration commands")


@app.command("solve")
def solve_cmd(
    image: Path = typer.Argument(..., help="Image file containing the math problem"),
    lang: Language = typer.Option(None, "--lang", help="Explanation language"),
    provider: Provider = typer.Option(None, "--provider", help="Override the active provider"),
    model: str = typer.Option(None, "--model", help="Override the model id"),
    endpoint: str = typer.Option(None, "--endpoint", help="Override the provider base URL"),
    api_key: str = typer.Option(None, "--api-key", help="Key for the active provider"),
    quiz: bool = typer.Option(False, "--quiz", help="Answer the practice quiz interactively"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw structured result"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Explain the problem in IMAGE and generate a practice quiz."""
    commands.solve(
        image=image,
        language=lang,
        provider=provider,
        model=model,
        endpoint=endpoint,
        api_key=api_key,
        quiz=quiz,
        as_json=as_json,
        verbose=verbose,
    )


@config_app.command("show")
def config_show_cmd() -> None:
    """Show effective configuration (keys masked)."""
    commands.config_show()


@app.command("providers")
def providers_cmd() -> None:
    """List supported providers and their defaults."""
    commands.providers_list()


app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
