import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from go_to_java.cli.convert import convert, function
from go_to_java.cli.inspect import inspect
from go_to_java.cli.serve import serve
from go_to_java.cli.watch import watch

app = typer.Typer(
    name="go-to-java",
    help="Go to Java structural translator for Java developers reading Go.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command("convert")(convert)
app.command("function")(function)
app.command("inspect")(inspect)
app.command("watch")(watch)
app.command("serve")(serve)


def main() -> None:
    app()
