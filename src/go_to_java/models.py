from typing import Annotated, Literal, Union

import pydantic
from pydantic import BaseModel, ConfigDict


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Position(_Frozen):
    row: int
    column: int


class SourceRange(_Frozen):
    start: Position
    end: Position


# ---------------------------------------------------------------------------
# Type references
# ---------------------------------------------------------------------------


class Resolution(_Frozen):
    """Semantic facts attached by the dependency resolver, never by a parser."""

    is_interface: bool = False
    is_struct: bool = False
    package_path: str | None = None


class _TypeBase(_Frozen):
    @property
    def is_pointer(self) -> bool:
        return False

    @property
    def is_slice(self) -> bool:
        return False

    @property
    def is_map(self) -> bool:
        return False

    @property
    def is_variadic(self) -> bool:
        return False

    @property
    def base(self) -> "TypeRef":
        """Innermost type once pointer and slice wrappers are stripped."""
        return self  # type: ignore[return-value]

    @property
    def base_name(self) -> str:
        base = self.base
        if isinstance(base, MapType):
            return "map"
        return base.name  # type: ignore[union-attr]


class PrimitiveType(_TypeBase):
    kind: Literal["primitive"] = "primitive"
    name: str

    @property
    def qualified_name(self) -> str:
        return self.name


class NamedType(_TypeBase):
    kind: Literal["named"] = "named"
    name: str
    package: str | None = None
    resolution: Resolution | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


class PointerType(_TypeBase):
    kind: Literal["pointer"] = "pointer"
    elem: "TypeRef"

    @property
    def is_pointer(self) -> bool:
        return True

    @property
    def base(self) -> "TypeRef":
        return self.elem.base

    @property
    def qualified_name(self) -> str:
        return "*" + self.elem.qualified_name


class SliceType(_TypeBase):
    kind: Literal["slice"] = "slice"
    elem: "TypeRef"
    variadic: bool = False

    @property
    def is_slice(self) -> bool:
        return True

    @property
    def is_variadic(self) -> bool:
        return self.variadic

    @property
    def base(self) -> "TypeRef":
        return self.elem.base

    @property
    def qualified_name(self) -> str:
        return ("..." if self.variadic else "[]") + self.elem.qualified_name


class MapType(_TypeBase):
    kind: Literal["map"] = "map"
    key: "TypeRef"
    value: "TypeRef"

    @property
    def is_map(self) -> bool:
        return True

    @property
    def qualified_name(self) -> str:
        return f"map[{self.key.qualified_name}]{self.value.qualified_name}"


TypeRef = Annotated[
    Union[PrimitiveType, NamedType, PointerType, SliceType, MapType],
    pydantic.Field(discriminator="kind"),
]

PointerType.model_rebuild()  # necessary for recursive types
SliceType.model_rebuild()
MapType.model_rebuild()


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class Import(_Frozen):
    path: str
    alias: str | None = None
    line: int | None = None


class Parameter(_Frozen):
    name: str
    type: TypeRef
    type_position: Position | None = None


class MethodSignature(_Frozen):
    name: str
    parameters: list[Parameter] = []
    results: list[TypeRef] = []
    result_names: list[str] = []
    name_position: Position | None = None

    @property
    def has_error_return(self) -> bool:
        return any(isinstance(r, PrimitiveType) and r.name == "error" for r in self.results)

    @property
    def value_results(self) -> list[TypeRef]:
        """Results with the canonical error type removed."""
        return [r for r in self.results if not (isinstance(r, PrimitiveType) and r.name == "error")]


class Function(MethodSignature):
    is_method: bool = False
    receiver: Parameter | None = None

    @property
    def receiver_type_name(self) -> str | None:
        if self.receiver is None:
            return None
        return self.receiver.type.base_name


class Field(_Frozen):
    name: str
    type: TypeRef
    tag: str | None = None
    exported: bool = False
    embedded: bool = False
    name_position: Position | None = None
    type_position: Position | None = None


class Struct(_Frozen):
    name: str
    fields: list[Field] = []
    methods: list[Function] = []
    embedded: list[TypeRef] = []
    name_position: Position | None = None
    range: SourceRange | None = None


class Interface(_Frozen):
    name: str
    methods: list[MethodSignature] = []
    embedded: list[str] = []
    name_position: Position | None = None
    range: SourceRange | None = None


class TypeDefinition(_Frozen):
    """A defined type or alias whose underlying type is neither struct nor interface."""

    name: str
    underlying: TypeRef
    is_alias: bool = False
    name_position: Position | None = None


class Variable(_Frozen):
    name: str
    type: TypeRef | None = None
    is_const: bool = False
    exported: bool = False
    value: str | None = None
    name_position: Position | None = None
    type_position: Position | None = None


class ParseFailure(_Frozen):
    line: int
    text: str
    reason: str


class SourceUnit(_Frozen):
    package: str = ""
    imports: list[Import] = []
    structs: list[Struct] = []
    interfaces: list[Interface] = []
    functions: list[Function] = []
    variables: list[Variable] = []
    constants: list[Variable] = []
    type_definitions: list[TypeDefinition] = []
    failures: list[ParseFailure] = []

    @property
    def is_empty(self) -> bool:
        return not (
            self.imports
            or self.structs
            or self.interfaces
            or self.functions
            or self.variables
            or self.constants
            or self.type_definitions
        )

    def declared_type_names(self) -> set[str]:
        names = {s.name for s in self.structs}
        names.update(i.name for i in self.interfaces)
        names.update(t.name for t in self.type_definitions)
        return names


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class Location(_Frozen):
    document: str
    position: Position


class ResolvedNode(BaseModel):
    type: TypeRef
    struct: Struct | None = None
    interface: Interface | None = None
    document: str | None = None
    import_path: str | None = None
    external: bool = False
    dependencies: list["ResolvedNode"] = []


ResolvedNode.model_rebuild()


class DependencyGraph(BaseModel):
    nodes: list[ResolvedNode] = []
    external_structs: list[Struct] = []
    external_interfaces: list[Interface] = []

    def external_type_names(self) -> set[str]:
        names = {s.name for s in self.external_structs}
        names.update(i.name for i in self.external_interfaces)
        return names

    def resolved_package_paths(self) -> dict[str, str]:
        """Package path of every unqualified name the walk resolved, e.g. through a dot import."""
        paths: dict[str, str] = {}
        pending = list(self.nodes)
        while pending:
            node = pending.pop(0)
            ref = node.type
            if isinstance(ref, NamedType) and ref.package is None and ref.resolution is not None:
                if ref.resolution.package_path:
                    paths.setdefault(ref.name, ref.resolution.package_path)
            pending.extend(node.dependencies)
        return paths
