from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table
from rich.text import Text

from go_to_java.cli.options import ParserOption, console, fail, print_text, settings_or_exit
from go_to_java.core.parsing import parse_unit
from go_to_java.models import MethodSignature, SourceUnit


def _signature(signature: MethodSignature) -> str:
    params = ", ".join(f"{p.name} {p.type.qualified_name}".strip() for p in signature.parameters)
    results = ", ".join(r.qualified_name for r in signature.results)
    return f"({params}) ({results})" if len(signature.results) > 1 else f"({params}) {results}".rstrip()


def _rows(unit: SourceUnit) -> list[tuple[str, str, str]]:
    rows = [("import", i.alias or i.path.rsplit("/", 1)[-1], i.path) for i in unit.imports]
    for struct in unit.structs:
        fields = ", ".join(f"{f.name} {f.type.qualified_name}" for f in struct.fields)
        rows.append(("struct", struct.name, f"{{{fields}}}"))
        rows.extend(("method", f"{struct.name}.{m.name}", _signature(m)) for m in struct.methods)
    for iface in unit.interfaces:
        members = [*iface.embedded, *(f"{m.name}{_signature(m)}" for m in iface.methods)]
        rows.append(("interface", iface.name, "; ".join(members)))
    for definition in unit.type_definitions:
        kind = "alias" if definition.is_alias else "type"
        rows.append((kind, definition.name, definition.underlying.qualified_name))
    for fn in unit.functions:
        rows.append(("method" if fn.is_method else "func", fn.name, _signature(fn)))
    for constant in unit.constants:
        rows.append(("const", constant.name, constant.value or ""))
    for variable in unit.variables:
        rows.append(("var", variable.name, variable.type.qualified_name if variable.type else ""))
    rows.extend(("failure", f"line {f.line + 1}", f.reason) for f in unit.failures)
    return rows


def inspect(
    path: Annotated[Path, typer.Argument(help="Go file to parse.")],
    parser: ParserOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the parsed model as JSON.")] = False,
) -> None:
    """Print the declarations recognised in a Go file."""
    if not path.is_file():
        raise fail(f"file not found: {path}")
    settings = settings_or_exit(parser=parser)
    unit = parse_unit(path.read_text(encoding="utf-8"), settings.parser)

    if as_json:
        print_text(unit.model_dump_json(indent=2))
        return

    table = Table(title=f"package {unit.package or '?'} ({settings.parser})", show_lines=False)
    for header in ("kind", "name", "detail"):
        table.add_column(header)
    rows = _rows(unit)
    for row in rows:
        table.add_row(*(Text(value) for value in row))
    console.print(table)
    console.print(f"({len(rows)} declarations)")
