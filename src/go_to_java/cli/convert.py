import asyncio
from pathlib import Path
from typing import Annotated

import typer

from go_to_java.cli.options import ClassNameOption, ParserOption, console, fail, print_text, settings_or_exit
from go_to_java.core.documents import FileDocumentSource, snippet_id
from go_to_java.core.translate import (
    TranslationResult,
    create_resolver,
    run_translation,
    translate_file,
    translate_function,
)


def _emit(result: TranslationResult, output: Path | None) -> None:
    if output is None and result.java:
        print_text(result.java)
    elif output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.java, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output}")
    if not result.ok:
        raise fail(result.error or "translation failed")


def convert(
    path: Annotated[Path | None, typer.Argument(help="Go file to translate.")] = None,
    code: Annotated[str | None, typer.Option(help="Go source string to translate instead of a file.")] = None,
    parser: ParserOption = None,
    class_name: ClassNameOption = None,
    workspace: Annotated[
        Path | None, typer.Option(help="Go workspace used to resolve types (default: the file's directory).")
    ] = None,
    resolve: Annotated[
        bool | None, typer.Option("--resolve/--no-resolve", help="Resolve types declared in other files.")
    ] = None,
    max_depth: Annotated[int | None, typer.Option(help="Maximum dependency resolution depth.")] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write Java here instead of stdout.")] = None,
    no_constructors: Annotated[bool, typer.Option("--no-constructors", help="Omit constructors.")] = False,
    no_accessors: Annotated[bool, typer.Option("--no-accessors", help="Omit getters and setters.")] = False,
    no_docs: Annotated[bool, typer.Option("--no-docs", help="Omit JavaDoc comments.")] = False,
    notes: Annotated[bool, typer.Option("--notes", help="Add Go to Java learning notes.")] = False,
) -> None:
    """Translate a Go file or snippet into a Java class."""
    if path is None and code is None:
        raise fail("either a PATH or --code must be given")
    if path is not None and code is None and not path.is_file():
        raise fail(f"file not found: {path}")

    settings = settings_or_exit(
        parser=parser,
        use_resolver=resolve,
        max_depth=max_depth,
        emit_constructors=False if no_constructors else None,
        emit_getters_setters=False if no_accessors else None,
        emit_doc_comments=False if no_docs else None,
        emit_learning_notes=True if notes else None,
    )

    async def _run() -> TranslationResult:
        if code is None:
            assert path is not None
            return await translate_file(path, settings, workspace=workspace, class_name=class_name)
        if workspace is None or not settings.use_resolver:
            return await run_translation(code, settings, class_name=class_name)
        # the snippet is served from memory so the workspace oracle can look inside it
        documents = FileDocumentSource()
        document = snippet_id()
        documents.open(document, code)
        resolver = await create_resolver(workspace, settings, documents)
        return await run_translation(code, settings, document, resolver, class_name)

    _emit(asyncio.run(_run()), output)


def function(
    text: Annotated[str | None, typer.Argument(help="Go function declaration to translate.")] = None,
    file: Annotated[Path | None, typer.Option(help="Read the declaration from this file.")] = None,
    method_only: Annotated[bool, typer.Option("--method-only", help="Emit only the Java method.")] = False,
    parser: ParserOption = None,
    class_name: ClassNameOption = None,
    notes: Annotated[bool, typer.Option("--notes", help="Add Go to Java learning notes.")] = False,
) -> None:
    """Translate a single Go function declaration."""
    if text is None and file is None:
        raise fail("either TEXT or --file must be given")
    if text is None:
        assert file is not None
        if not file.is_file():
            raise fail(f"file not found: {file}")
        text = file.read_text(encoding="utf-8")

    settings = settings_or_exit(parser=parser, emit_learning_notes=True if notes else None)
    _emit(translate_function(text, settings, method_only=method_only, class_name=class_name), None)
