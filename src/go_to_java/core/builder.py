import logging
from dataclasses import dataclass, field

from go_to_java.models import (
    Function,
    Import,
    Interface,
    ParseFailure,
    SourceUnit,
    Struct,
    TypeDefinition,
    Variable,
)

logger = logging.getLogger(__name__)


@dataclass
class UnitBuilder:
    """Collects declarations during a parse and freezes them into a ``SourceUnit``."""

    package: str = ""
    imports: list[Import] = field(default_factory=list)
    structs: list[Struct] = field(default_factory=list)
    interfaces: list[Interface] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    constants: list[Variable] = field(default_factory=list)
    type_definitions: list[TypeDefinition] = field(default_factory=list)
    failures: list[ParseFailure] = field(default_factory=list)

    def add_variable(self, variable: Variable) -> None:
        if variable.is_const:
            self.constants.append(variable)
        else:
            self.variables.append(variable)

    def fail(self, line: int, text: str, reason: str) -> None:
        logger.debug("Skipping declaration at line %d: %s", line + 1, reason)
        self.failures.append(ParseFailure(line=line, text=text.strip()[:120], reason=reason))

    def build(self) -> SourceUnit:
        structs, functions = attach_methods(self.structs, self.functions)
        return SourceUnit(
            package=self.package,
            imports=self.imports,
            structs=structs,
            interfaces=self.interfaces,
            functions=functions,
            variables=self.variables,
            constants=self.constants,
            type_definitions=self.type_definitions,
            failures=self.failures,
        )


def attach_methods(structs: list[Struct], functions: list[Function]) -> tuple[list[Struct], list[Function]]:
    """Move methods onto the struct named by their receiver; the rest stay free functions."""
    methods: dict[str, list[Function]] = {s.name: [] for s in structs}
    free: list[Function] = []
    for fn in functions:
        receiver = fn.receiver_type_name if fn.is_method else None
        if receiver is not None and receiver in methods:
            methods[receiver].append(fn)
        else:
            free.append(fn)
    attached = [
        s.model_copy(update={"methods": [*s.methods, *methods[s.name]]}) if methods[s.name] else s for s in structs
    ]
    return attached, free
