"""Cross-file type dependency resolution.

Walks every type reference reachable from a unit, asks the semantic oracle
where each named type is defined, parses the defining document (through the
cache) and collects structs and interfaces declared outside the origin
document. The walk is sequential depth first, bounded by ``max_depth`` and
guarded by a visited set, so cyclic type graphs terminate.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from go_to_java.core.cache import ResolutionCache
from go_to_java.core.oracle import DEFAULT_TIMEOUT_SECONDS, HoverInfo, OracleClient, extract_type_name
from go_to_java.core.parsing import get_strategy
from go_to_java.core.ports.oracle import DocumentSource, SemanticOracle
from go_to_java.core.typeref import GO_BUILTIN_TYPES, parse_type_ref
from go_to_java.core.typemap import build_import_alias_map
from go_to_java.models import (
    DependencyGraph,
    Interface,
    Location,
    MapType,
    MethodSignature,
    NamedType,
    Position,
    ResolvedNode,
    Resolution,
    SourceUnit,
    Struct,
    TypeRef,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

STDLIB_PACKAGES = frozenset(
    {
        "fmt", "io", "os", "net", "http", "context", "sync", "time",
        "strings", "bytes", "bufio", "encoding", "json", "xml",
        "errors", "log", "path", "filepath", "regexp", "sort",
        "strconv", "unicode", "crypto", "hash", "math", "reflect",
    }
)  # fmt: skip

_IDENTIFIER = re.compile(r"^[A-Za-z_]\w*$")

TypeSite = tuple[TypeRef, Position | None]


def resolve_qualified_type(type_ref: NamedType, aliases: Mapping[str, str]) -> str | None:
    """Import path behind ``pkg.Type``, or ``None`` for unqualified names."""
    if type_ref.package is None:
        return None
    return aliases.get(type_ref.package, type_ref.package)


def is_stdlib_package(alias: str, import_path: str | None) -> bool:
    if alias in STDLIB_PACKAGES:
        return True
    return import_path is not None and "." not in import_path.split("/", 1)[0]


def _signature_sites(signature: MethodSignature) -> list[TypeSite]:
    sites: list[TypeSite] = [(p.type, p.type_position) for p in signature.parameters]
    sites.extend((r, None) for r in signature.results)
    return sites


def collect_type_sites(unit: SourceUnit) -> list[TypeSite]:
    """Every type reference in ``unit`` with the position the parser recorded, if any."""
    sites: list[TypeSite] = []
    for struct in unit.structs:
        sites.extend((f.type, f.type_position) for f in struct.fields)
        for method in struct.methods:
            sites.extend(_signature_sites(method))
    for iface in unit.interfaces:
        sites.extend((parse_type_ref(name), None) for name in iface.embedded)
        for method in iface.methods:
            sites.extend(_signature_sites(method))
    for fn in unit.functions:
        sites.extend(_signature_sites(fn))
    for variable in [*unit.variables, *unit.constants]:
        if variable.type is not None:
            sites.append((variable.type, variable.type_position))
    sites.extend((t.underlying, None) for t in unit.type_definitions)
    return sites


def _find_struct(unit: SourceUnit, name: str) -> Struct | None:
    return next((s for s in unit.structs if s.name == name), None)


def _find_interface(unit: SourceUnit, name: str) -> Interface | None:
    return next((i for i in unit.interfaces if i.name == name), None)


@dataclass
class _Walk:
    origin: str
    max_depth: int
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    visited: set[tuple[str, str]] = field(default_factory=set)
    external_keys: set[tuple[str, str]] = field(default_factory=set)
    definitions: dict[Location, ResolvedNode] = field(default_factory=dict)

    def add_external(self, document: str, declaration: Struct | Interface) -> None:
        key = (document, declaration.name)
        if key in self.external_keys:
            return
        self.external_keys.add(key)
        if isinstance(declaration, Struct):
            self.graph.external_structs.append(declaration)
        else:
            self.graph.external_interfaces.append(declaration)


class DependencyResolver:
    """Resolves the external declarations a unit depends on.

    The cache is owned by the caller so its lifetime can span many
    resolutions; edits are reported through ``invalidate``.
    """

    def __init__(
        self,
        oracle: SemanticOracle,
        documents: DocumentSource,
        cache: ResolutionCache | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        resolve_stdlib: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        parser: str = "tree-sitter",
    ) -> None:
        self.client = OracleClient(oracle, documents, timeout)
        self.cache = cache if cache is not None else ResolutionCache()
        self.max_depth = max_depth
        self.resolve_stdlib = resolve_stdlib
        self._parse = get_strategy(parser).parse_unit

    def invalidate(self, document: str) -> int:
        return self.cache.invalidate(document)

    async def resolve(
        self, unit: SourceUnit, origin_document: str, max_depth: int | None = None
    ) -> DependencyGraph:
        walk = _Walk(origin=origin_document, max_depth=self.max_depth if max_depth is None else max_depth)
        aliases = build_import_alias_map(unit.imports)
        for type_ref, position in collect_type_sites(unit):
            node = await self._resolve(type_ref, origin_document, position, 0, aliases, walk)
            if node is not None:
                walk.graph.nodes.append(node)
        logger.debug(
            "Resolved %d external struct(s) and %d external interface(s) for %s",
            len(walk.graph.external_structs),
            len(walk.graph.external_interfaces),
            origin_document,
        )
        return walk.graph

    async def resolve_type(
        self,
        type_ref: TypeRef,
        document: str,
        position: Position | None = None,
        max_depth: int | None = None,
    ) -> ResolvedNode | None:
        """Deep-resolve a single reference that appears in ``document``."""
        walk = _Walk(origin=document, max_depth=self.max_depth if max_depth is None else max_depth)
        unit = await self.load_document(document)
        aliases = build_import_alias_map(unit.imports) if unit is not None else {}
        return await self._resolve(type_ref, document, position, 0, aliases, walk)

    async def load_document(self, document: str) -> SourceUnit | None:
        cached = self.cache.get_document(document)
        if cached is not None:
            return cached
        text = await self.client.read_text(document)
        if text is None:
            return None
        unit = self._parse(text)
        self.cache.set_document(document, unit)
        return unit

    # -- oracle lookups -------------------------------------------------------

    async def _definition(self, document: str, position: Position) -> Location | None:
        key = self.cache.definition_key(document, position)
        cached = self.cache.get_query(key)
        if cached is not None:
            return cached
        location = await self.client.definition(document, position)
        self.cache.set_query(key, location)
        return location

    async def _hover(self, document: str, position: Position, type_name: str) -> HoverInfo | None:
        key = self.cache.hover_key(document, type_name)
        cached = self.cache.get_query(key)
        if cached is not None:
            return cached
        info = await self.client.hover(document, position)
        self.cache.set_query(key, info)
        return info

    async def _find_position(self, document: str, type_ref: NamedType) -> Position | None:
        """First whole-word occurrence of the type name, pointing at the unqualified name."""
        text = await self.client.read_text(document)
        if text is None:
            return None
        if type_ref.package:
            pattern = re.compile(rf"(?<![\w.]){re.escape(type_ref.package)}\.({re.escape(type_ref.name)})\b")
        else:
            pattern = re.compile(rf"(?<![\w.])({re.escape(type_ref.name)})\b")
        for row, line in enumerate(text.splitlines()):
            match = pattern.search(line)
            if match:
                return Position(row=row, column=match.start(1))
        return None

    # -- walk -----------------------------------------------------------------

    async def _resolve(
        self,
        type_ref: TypeRef,
        document: str,
        position: Position | None,
        depth: int,
        aliases: Mapping[str, str],
        walk: _Walk,
    ) -> ResolvedNode | None:
        if depth > walk.max_depth:
            return None
        base = type_ref.base
        if isinstance(base, MapType):
            node = ResolvedNode(type=base, document=document)
            for part in (base.key, base.value):
                child = await self._resolve(part, document, None, depth + 1, aliases, walk)
                if child is not None:
                    node.dependencies.append(child)
            return node
        if not isinstance(base, NamedType) or base.name in GO_BUILTIN_TYPES or not _IDENTIFIER.match(base.name):
            return None

        import_path = resolve_qualified_type(base, aliases)
        visit_key = (base.name, import_path or document)
        if visit_key in walk.visited:
            return None
        walk.visited.add(visit_key)

        if base.package and not self.resolve_stdlib and is_stdlib_package(base.package, import_path):
            return None

        node = ResolvedNode(type=base, import_path=import_path, external=import_path is not None)
        try:
            await self._attach_definition(node, base, document, position, depth, walk)
        except Exception:
            logger.warning("Failed to resolve type %s in %s", base.qualified_name, document, exc_info=True)
        return node

    async def _attach_definition(
        self,
        node: ResolvedNode,
        base: NamedType,
        document: str,
        position: Position | None,
        depth: int,
        walk: _Walk,
    ) -> None:
        if position is not None and base.package:
            # parsers record the start of ``pkg.Name``; oracles answer for ``Name``
            position = Position(row=position.row, column=position.column + len(base.package) + 1)
        if position is None:
            position = await self._find_position(document, base)
        if position is None:
            return

        location = await self._definition(document, position)
        if location is None:
            return
        seen = walk.definitions.get(location)
        if seen is not None:
            # reached again under another spelling, e.g. ``models.User`` and ``User``
            node.document = seen.document
            node.struct = seen.struct
            node.interface = seen.interface
            if isinstance(seen.type, NamedType):
                node.type = base.model_copy(update={"resolution": seen.type.resolution})
            node.external = seen.external
            return
        walk.definitions[location] = node
        defining = await self.load_document(location.document)
        if defining is None:
            return

        name = base.name
        hover = await self._hover(document, position, base.qualified_name)
        if hover is not None and hover.signature.startswith("type "):
            name = extract_type_name(hover.signature) or name

        struct = _find_struct(defining, name)
        iface = _find_interface(defining, name) if struct is None else None
        node.document = location.document
        node.struct = struct
        node.interface = iface
        node.type = base.model_copy(
            update={
                "resolution": Resolution(
                    is_struct=struct is not None,
                    is_interface=iface is not None,
                    package_path=node.import_path or defining.package or None,
                )
            }
        )
        declaration = struct or iface
        if declaration is None:
            return

        node.external = location.document != walk.origin
        if node.external:
            walk.add_external(location.document, declaration)

        aliases = build_import_alias_map(defining.imports)
        for type_ref, type_position in _declaration_sites(declaration):
            child = await self._resolve(type_ref, location.document, type_position, depth + 1, aliases, walk)
            if child is not None:
                node.dependencies.append(child)


def _declaration_sites(declaration: Struct | Interface) -> Iterable[TypeSite]:
    if isinstance(declaration, Struct):
        return [(f.type, f.type_position) for f in declaration.fields]
    sites: list[TypeSite] = []
    for method in declaration.methods:
        sites.extend(_signature_sites(method))
    return sites
