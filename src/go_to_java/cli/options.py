from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from go_to_java.config import Settings, load_settings

console = Console()

ParserOption = Annotated[
    str | None, typer.Option("--parser", "-p", help="Parser strategy: 'tree-sitter' or 'scanner'.")
]
ClassNameOption = Annotated[str | None, typer.Option("--class-name", help="Name of the generated outer class.")]


def fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    return typer.Exit(code=1)


def settings_or_exit(**overrides: Any) -> Settings:
    """Environment settings with CLI overrides; invalid values end the command."""
    try:
        return load_settings(overrides)
    except ValidationError as exc:
        errors = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
        raise fail(f"invalid settings ({errors})") from exc


def print_text(text: str) -> None:
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
