"""Go → Java type mapping.

Rules are applied in priority order: standard-library cross reference,
maps, slices, pointers, caller-requested boxing, then the primitive table.
Unknown names pass through unchanged and are reported as unresolved.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from go_to_java.models import Import, MapType, NamedType, PointerType, PrimitiveType, SliceType, TypeRef


@dataclass(frozen=True)
class StdlibMapping:
    java_type: str
    note: str
    java_import: str | None = None
    is_interface: bool = False


@dataclass(frozen=True)
class JavaType:
    """A rendered Java type plus what the generator needs to know about it."""

    text: str
    imports: frozenset[str] = frozenset()
    notes: tuple[str, ...] = ()
    unresolved: tuple[str, ...] = ()
    has_error: bool = False

    def __str__(self) -> str:
        return self.text


PRIMITIVE_TYPES: dict[str, str] = {
    "int": "int",
    "int8": "byte",
    "int16": "short",
    "int32": "int",
    "int64": "long",
    "uint": "int",
    "uint8": "byte",
    "uint16": "int",
    "uint32": "long",
    "uint64": "long",
    "uintptr": "long",
    "float32": "float",
    "float64": "double",
    "complex64": "Object",
    "complex128": "Object",
    "bool": "boolean",
    "string": "String",
    "rune": "char",
    "byte": "byte",
    "error": "Exception",
    "interface{}": "Object",
    "any": "Object",
}

BOXED_TYPES: dict[str, str] = {
    "int": "Integer",
    "byte": "Byte",
    "short": "Short",
    "long": "Long",
    "float": "Float",
    "double": "Double",
    "boolean": "Boolean",
    "char": "Character",
}

STDLIB_TYPE_MAPPINGS: dict[str, StdlibMapping] = {
    "io.Reader": StdlibMapping(
        "InputStream", "Go io.Reader maps to Java InputStream for byte reading", "java.io.InputStream", True
    ),
    "io.Writer": StdlibMapping(
        "OutputStream", "Go io.Writer maps to Java OutputStream for byte writing", "java.io.OutputStream", True
    ),
    "io.Closer": StdlibMapping("Closeable", "Go io.Closer maps to Java Closeable interface", "java.io.Closeable", True),
    "io.ReadWriter": StdlibMapping(
        "Object", "Go io.ReadWriter has no direct Java equivalent - consider separate streams"
    ),
    "io.ReadCloser": StdlibMapping(
        "InputStream", "Go io.ReadCloser maps to InputStream (which is Closeable)", "java.io.InputStream", True
    ),
    "io.WriteCloser": StdlibMapping(
        "OutputStream", "Go io.WriteCloser maps to OutputStream (which is Closeable)", "java.io.OutputStream", True
    ),
    "context.Context": StdlibMapping(
        "Object",
        "Go context.Context has no direct Java equivalent - consider custom Context class or thread-local storage",
    ),
    "time.Time": StdlibMapping(
        "Instant", "Go time.Time maps to Java Instant for point-in-time representation", "java.time.Instant"
    ),
    "time.Duration": StdlibMapping("Duration", "Go time.Duration maps to Java Duration", "java.time.Duration"),
    "http.Request": StdlibMapping(
        "HttpServletRequest",
        "Go http.Request maps to HttpServletRequest in servlet-based apps",
        "javax.servlet.http.HttpServletRequest",
        True,
    ),
    "http.ResponseWriter": StdlibMapping(
        "HttpServletResponse",
        "Go http.ResponseWriter maps to HttpServletResponse in servlet-based apps",
        "javax.servlet.http.HttpServletResponse",
        True,
    ),
    "http.Handler": StdlibMapping(
        "Object", "Go http.Handler can be implemented as a functional interface or servlet", is_interface=True
    ),
    "http.Client": StdlibMapping("HttpClient", "Go http.Client maps to Java 11+ HttpClient", "java.net.http.HttpClient"),
    "sync.Mutex": StdlibMapping(
        "ReentrantLock", "Go sync.Mutex maps to Java ReentrantLock", "java.util.concurrent.locks.ReentrantLock"
    ),
    "sync.RWMutex": StdlibMapping(
        "ReentrantReadWriteLock",
        "Go sync.RWMutex maps to Java ReentrantReadWriteLock",
        "java.util.concurrent.locks.ReentrantReadWriteLock",
    ),
    "sync.WaitGroup": StdlibMapping(
        "CountDownLatch",
        "Go sync.WaitGroup maps to Java CountDownLatch (note: different usage pattern)",
        "java.util.concurrent.CountDownLatch",
    ),
    "sync.Once": StdlibMapping(
        "Object", "Go sync.Once can be implemented with double-checked locking or AtomicReference"
    ),
    "sync.Map": StdlibMapping(
        "ConcurrentHashMap", "Go sync.Map maps to Java ConcurrentHashMap", "java.util.concurrent.ConcurrentHashMap"
    ),
    "bytes.Buffer": StdlibMapping(
        "ByteArrayOutputStream",
        "Go bytes.Buffer maps to ByteArrayOutputStream for writing, ByteArrayInputStream for reading",
        "java.io.ByteArrayOutputStream",
    ),
    "bytes.Reader": StdlibMapping(
        "ByteArrayInputStream", "Go bytes.Reader maps to Java ByteArrayInputStream", "java.io.ByteArrayInputStream"
    ),
    "strings.Builder": StdlibMapping("StringBuilder", "Go strings.Builder maps directly to Java StringBuilder"),
    "strings.Reader": StdlibMapping(
        "StringReader", "Go strings.Reader maps to Java StringReader", "java.io.StringReader"
    ),
    "bufio.Reader": StdlibMapping(
        "BufferedReader", "Go bufio.Reader maps to Java BufferedReader", "java.io.BufferedReader"
    ),
    "bufio.Writer": StdlibMapping(
        "BufferedWriter", "Go bufio.Writer maps to Java BufferedWriter", "java.io.BufferedWriter"
    ),
    "bufio.Scanner": StdlibMapping("Scanner", "Go bufio.Scanner maps to Java Scanner", "java.util.Scanner"),
    "os.File": StdlibMapping(
        "RandomAccessFile",
        "Go os.File maps to RandomAccessFile for read/write, or FileInputStream/FileOutputStream",
        "java.io.RandomAccessFile",
    ),
    "regexp.Regexp": StdlibMapping(
        "Pattern", "Go regexp.Regexp maps to Java Pattern (note: different regex syntax)", "java.util.regex.Pattern"
    ),
    "json.Decoder": StdlibMapping(
        "ObjectMapper",
        "Go json.Decoder typically maps to Jackson ObjectMapper in Java",
        "com.fasterxml.jackson.databind.ObjectMapper",
    ),
    "json.Encoder": StdlibMapping(
        "ObjectMapper",
        "Go json.Encoder typically maps to Jackson ObjectMapper in Java",
        "com.fasterxml.jackson.databind.ObjectMapper",
    ),
    "errors.error": StdlibMapping("Exception", "Go error interface maps to Java Exception hierarchy"),
    "fmt.Stringer": StdlibMapping(
        "Object", "Go fmt.Stringer is equivalent to overriding toString() in Java", is_interface=True
    ),
}

_IDENTIFIER = re.compile(r"^[A-Za-z_]\w*$")


def lookup_stdlib(type_name: str, package_path: str | None = None) -> StdlibMapping | None:
    """Look up ``pkg.Type``, or ``Type`` qualified by ``package_path``'s last segment."""
    if "." in type_name:
        return STDLIB_TYPE_MAPPINGS.get(type_name)
    if package_path:
        return STDLIB_TYPE_MAPPINGS.get(f"{package_path.rsplit('/', 1)[-1]}.{type_name}")
    return None


def _combine(text: str, *parts: JavaType, notes: Iterable[str] = ()) -> JavaType:
    return JavaType(
        text=text,
        imports=frozenset().union(*(p.imports for p in parts)),
        notes=tuple(dict.fromkeys([*(n for p in parts for n in p.notes), *notes])),
        unresolved=tuple(dict.fromkeys(u for p in parts for u in p.unresolved)),
        has_error=any(p.has_error for p in parts),
    )


class TypeMapper:
    """Maps TypeRefs to Java types in the context of one translation unit.

    ``known_types`` are names declared locally or resolved from other
    documents; ``type_definitions`` expand defined types such as
    ``type Celsius float64``; ``import_aliases`` maps import aliases to paths
    so renamed standard-library imports still hit the cross-reference table.
    ``package_paths`` gives the package of unqualified names the resolver
    traced to another package.
    """

    def __init__(
        self,
        known_types: Iterable[str] = (),
        type_definitions: Mapping[str, TypeRef] | None = None,
        import_aliases: Mapping[str, str] | None = None,
        package_paths: Mapping[str, str] | None = None,
    ) -> None:
        self._known = set(known_types)
        self._definitions = dict(type_definitions or {})
        self._aliases = dict(import_aliases or {})
        self._package_paths = dict(package_paths or {})
        self._known.update(self._definitions)

    def map(self, type_ref: TypeRef, needs_boxing: bool = False) -> JavaType:
        return self._map(type_ref, needs_boxing, frozenset())

    def _stdlib(self, type_ref: NamedType) -> StdlibMapping | None:
        if type_ref.package:
            path = self._aliases.get(type_ref.package)
            package = path.rsplit("/", 1)[-1] if path else type_ref.package
            return lookup_stdlib(f"{package}.{type_ref.name}")
        package_path = self._package_paths.get(type_ref.name)
        if package_path is None and type_ref.resolution is not None:
            package_path = type_ref.resolution.package_path
        return lookup_stdlib(type_ref.name, package_path) if package_path else None

    def _map(self, type_ref: TypeRef, boxing: bool, expanding: frozenset[str]) -> JavaType:
        if isinstance(type_ref, NamedType):
            mapping = self._stdlib(type_ref)
            if mapping is not None:
                return JavaType(
                    text=mapping.java_type,
                    imports=frozenset({mapping.java_import}) if mapping.java_import else frozenset(),
                    notes=(mapping.note,),
                )
        if isinstance(type_ref, MapType):
            key = self._map(type_ref.key, True, expanding)
            value = self._map(type_ref.value, True, expanding)
            return _combine(f"Map<{key.text}, {value.text}>", key, value)
        if isinstance(type_ref, SliceType):
            elem = self._map(type_ref.elem, True, expanding)
            return _combine(f"List<{elem.text}>", elem)
        if isinstance(type_ref, PointerType):
            return self._map(type_ref.elem, True, expanding)
        if isinstance(type_ref, PrimitiveType):
            java = PRIMITIVE_TYPES.get(type_ref.name, type_ref.name)
            if boxing:
                java = BOXED_TYPES.get(java, java)
            return JavaType(text=java, has_error=type_ref.name == "error")
        return self._map_named(type_ref, boxing, expanding)

    def _map_named(self, type_ref: NamedType, boxing: bool, expanding: frozenset[str]) -> JavaType:
        name = type_ref.name
        if not _IDENTIFIER.match(name):
            return JavaType(text="Object", notes=(f"Go type {name} has no direct Java equivalent",))
        if type_ref.package is None and name in self._definitions and name not in expanding:
            underlying = self._definitions[name]
            expanded = self._map(underlying, boxing, expanding | {name})
            note = f"Go type {name} is defined as {underlying.qualified_name}"
            return _combine(expanded.text, expanded, notes=[note])
        if name in self._known:
            return JavaType(text=name)
        return JavaType(text=name, unresolved=(type_ref.qualified_name,))


def map_type(type_ref: TypeRef, needs_boxing: bool = False) -> JavaType:
    """Map a TypeRef with no unit context."""
    return TypeMapper().map(type_ref, needs_boxing)


def default_value(java_type: str) -> str:
    if java_type in ("int", "long", "short", "byte"):
        return "0"
    if java_type in ("float", "double"):
        return "0.0"
    if java_type == "boolean":
        return "false"
    if java_type == "char":
        return "'\\0'"
    if java_type == "String":
        return '""'
    if java_type.startswith("List<"):
        return "new ArrayList<>()"
    if java_type.startswith("Map<"):
        return "new HashMap<>()"
    return "null"


def build_import_alias_map(imports: Iterable[Import]) -> dict[str, str]:
    """Map each import's alias (default: last path segment) to its path."""
    aliases: dict[str, str] = {}
    for imp in imports:
        if imp.alias in ("_", "."):
            continue
        aliases[imp.alias or imp.path.rsplit("/", 1)[-1]] = imp.path
    return aliases
