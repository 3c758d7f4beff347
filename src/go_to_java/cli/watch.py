import asyncio
from pathlib import Path
from typing import Annotated

import typer

from go_to_java.cli.options import ParserOption, console, fail, settings_or_exit
from go_to_java.core.translate import TreeTranslator
from go_to_java.watcher.watchfiles_adapter import WatchfilesWatcher


def watch(
    directory: Annotated[Path, typer.Argument(help="Go source tree to translate.")],
    out: Annotated[Path, typer.Option("--out", help="Directory receiving the generated Java files.")],
    parser: ParserOption = None,
    resolve: Annotated[
        bool | None, typer.Option("--resolve/--no-resolve", help="Resolve types declared in other files.")
    ] = None,
    once: Annotated[bool, typer.Option("--once", help="Translate the tree once and exit.")] = False,
) -> None:
    """Translate a Go tree and re-translate it whenever a Go file changes."""
    if not directory.is_dir():
        raise fail(f"directory not found: {directory}")
    settings = settings_or_exit(parser=parser, use_resolver=resolve)
    translator = TreeTranslator(directory, out, settings)

    async def _run() -> None:
        results = await translator.translate_all()
        failed = [path for path, result in results.items() if not result.ok]
        console.print(f"[green]Translated[/green] {len(results)} file(s) into {out}")
        for path in failed:
            console.print(f"[yellow]No declarations[/yellow] in {path}", highlight=False)
        if once:
            return

        watcher = WatchfilesWatcher(directory, translator.on_change, translator.on_delete)
        await watcher.start()
        console.print(f"[green]Watching[/green] {directory} (Ctrl+C to stop)")
        try:
            await asyncio.Event().wait()
        finally:
            await watcher.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Stopped.")
