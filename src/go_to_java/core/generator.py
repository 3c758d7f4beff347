"""Java skeleton generation from a parsed (and optionally enriched) SourceUnit."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from go_to_java.core.naming import accessor_suffix, constant_case, escape_identifier, lower_camel, upper_camel
from go_to_java.core.typeref import is_literal_value
from go_to_java.core.typemap import JavaType, TypeMapper, build_import_alias_map, default_value, lookup_stdlib
from go_to_java.models import (
    DependencyGraph,
    Field,
    Function,
    Interface,
    MapType,
    MethodSignature,
    Parameter,
    PointerType,
    PrimitiveType,
    SliceType,
    SourceUnit,
    Struct,
    TypeRef,
    Variable,
)

logger = logging.getLogger(__name__)

INDENT = "    "
MARKER = "// [go-to-java]"
EMPTY_UNIT_MARKER = f"{MARKER} error: no recognizable Go declarations found"
DEFAULT_CLASS_NAME = "GoConverter"

_FILE_NOTES = [
    "Go structs → Java inner classes with private fields",
    "Go interfaces → Java interfaces",
    "Package-level functions → Static methods",
    "Package-level variables → Static fields",
    "Function bodies → TODO stubs (manual implementation needed)",
]

_HINT_MULTIPLE_RESULTS = "Go supports multiple return values; Java uses a Result class to achieve this"
_HINT_ERROR = "Go's error type is mapped to Java exceptions (throws Exception)"
_HINT_SLICE = "Go slices are mapped to Java List<T> (dynamic arrays)"
_HINT_MAP = "Go maps are mapped to Java Map<K,V>"
_HINT_VARIADIC = "Go variadic parameters (...T) are mapped to Java varargs (T...)"
_HINT_POINTER = "Go pointers (*T) are mapped to Java objects (all objects are references)"
_HINT_EMBEDDING = "Go struct embedding is rendered as a composed private field, never as inheritance"


@dataclass(frozen=True)
class GenerationOptions:
    class_name: str | None = None
    emit_constructors: bool = True
    emit_getters_setters: bool = True
    emit_doc_comments: bool = True
    emit_external_types: bool = True
    emit_learning_notes: bool = False
    errors_as_exceptions: bool = True
    static_functions: bool = True


def indent(lines: Iterable[str], levels: int = 1) -> list[str]:
    prefix = INDENT * levels
    return [prefix + line if line else "" for line in lines]


def _walk_types(type_ref: TypeRef) -> Iterable[TypeRef]:
    yield type_ref
    if isinstance(type_ref, (PointerType, SliceType)):
        yield from _walk_types(type_ref.elem)
    elif isinstance(type_ref, MapType):
        yield from _walk_types(type_ref.key)
        yield from _walk_types(type_ref.value)


def _signature_types(signature: MethodSignature) -> list[TypeRef]:
    return [p.type for p in signature.parameters] + list(signature.results)


def _go_description(type_ref: TypeRef) -> str:
    if isinstance(type_ref, SliceType):
        return f"list of {type_ref.elem.qualified_name} values"
    if isinstance(type_ref, MapType):
        return f"map with {type_ref.key.qualified_name} keys and {type_ref.value.qualified_name} values"
    if isinstance(type_ref, PointerType):
        return f"{type_ref.elem.qualified_name} reference"
    return f"{type_ref.qualified_name} value"


def _java_literal(value: str, java_type: str) -> str:
    text = value.strip()
    if text == "nil":
        return "null"
    if text.startswith("`"):
        body = text[1:-1].replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{body}"'
    if java_type in ("long", "Long") and text.lstrip("-").isdigit():
        return f"{text}L"
    if java_type in ("float", "Float") and text[:1] in "-.0123456789" and not text.startswith("0x"):
        return f"{text}f"
    return text


def result_class_name(signature: MethodSignature) -> str:
    return f"{upper_camel(signature.name)}Result"


def result_fields(signature: MethodSignature) -> list[tuple[str, TypeRef]]:
    """Field name and type for each non-error result.

    Go result names are kept when every value result is named; otherwise the
    fields are numbered ``value1..valueK``.
    """
    names = list(signature.result_names) + [""] * (len(signature.results) - len(signature.result_names))
    pairs = [
        (name, result)
        for name, result in zip(names, signature.results)
        if not (isinstance(result, PrimitiveType) and result.name == "error")
    ]
    field_names = [lower_camel(name) for name, _ in pairs]
    if not all(name for name, _ in pairs) or len(set(field_names)) != len(field_names):
        field_names = [f"value{i}" for i in range(1, len(pairs) + 1)]
    return [(field_name, result) for field_name, (_, result) in zip(field_names, pairs)]


class JavaGenerator:
    """Renders one unit; collects imports and notes while rendering."""

    def __init__(self, mapper: TypeMapper, options: GenerationOptions) -> None:
        self.mapper = mapper
        self.options = options
        self.imports: set[str] = set()
        self.notes: dict[str, None] = {}
        self.hints: dict[str, None] = {}

    # -- types ----------------------------------------------------------------

    def java(self, type_ref: TypeRef, needs_boxing: bool = False) -> JavaType:
        mapped = self.mapper.map(type_ref, needs_boxing)
        self.imports.update(mapped.imports)
        self.notes.update(dict.fromkeys(mapped.notes))
        for part in _walk_types(type_ref):
            if isinstance(part, SliceType):
                self.hints[_HINT_VARIADIC if part.variadic else _HINT_SLICE] = None
            elif isinstance(part, MapType):
                self.hints[_HINT_MAP] = None
            elif isinstance(part, PointerType):
                self.hints[_HINT_POINTER] = None
        return mapped

    def guard(self, kind: str, name: str, render: Callable[[], list[str]]) -> list[str]:
        try:
            return render()
        except Exception as exc:
            logger.warning("Skipping %s %s: %s", kind, name, exc)
            return [f"{MARKER} skipped {kind} {name}: {exc}"]

    # -- methods --------------------------------------------------------------

    def parameters(self, params: list[Parameter]) -> tuple[str, list[str]]:
        rendered: list[str] = []
        unresolved: list[str] = []
        for index, param in enumerate(params):
            name = lower_camel(param.name) if param.name and param.name != "_" else f"arg{index}"
            if isinstance(param.type, SliceType) and param.type.variadic and index == len(params) - 1:
                self.java(param.type)
                mapped = self.java(param.type.elem)
                rendered.append(f"{mapped.text}... {name}")
            else:
                mapped = self.java(param.type)
                rendered.append(f"{mapped.text} {name}")
            unresolved.extend(mapped.unresolved)
        return ", ".join(rendered), unresolved

    def return_type(self, signature: MethodSignature) -> JavaType:
        values = signature.value_results
        if not values:
            return JavaType(text="void")
        if len(values) == 1:
            return self.java(values[0])
        self.hints[_HINT_MULTIPLE_RESULTS] = None
        for value in values:
            self.java(value)
        return JavaType(text=result_class_name(signature))

    def javadoc(self, signature: MethodSignature, summary: str, return_type: str) -> list[str]:
        lines = ["/**", f" * {summary}"]
        notes = [note for t in _signature_types(signature) for note in self.mapper.map(t).notes]
        if notes:
            lines.append(" *")
            lines.extend(f" * Note: {note}" for note in dict.fromkeys(notes))
        if signature.parameters:
            lines.append(" *")
            for index, param in enumerate(signature.parameters):
                name = lower_camel(param.name) if param.name and param.name != "_" else f"arg{index}"
                lines.append(f" * @param {name} {_go_description(param.type)}")
        values = signature.value_results
        if values or signature.has_error_return:
            lines.append(" *")
        if len(values) == 1:
            lines.append(f" * @return {return_type} value")
        elif len(values) > 1:
            lines.append(" * @return Result object containing multiple return values")
        if signature.has_error_return and self.options.errors_as_exceptions:
            lines.append(" * @throws Exception if operation fails")
        lines.append(" */")
        return lines

    def method(self, signature: MethodSignature, static: bool = False, abstract: bool = False) -> list[str]:
        """Render a concrete method, or an abstract one for interfaces."""
        return_type = self.return_type(signature)
        params, unresolved = self.parameters(signature.parameters)
        for result in signature.results:
            unresolved.extend(self.mapper.map(result).unresolved)
        if signature.has_error_return:
            self.hints[_HINT_ERROR] = None
        throws = " throws Exception" if signature.has_error_return and self.options.errors_as_exceptions else ""
        name = lower_camel(signature.name)

        lines: list[str] = []
        if self.options.emit_doc_comments:
            if isinstance(signature, Function) and signature.is_method:
                summary = f"Converted from Go method: {signature.receiver_type_name}.{signature.name}"
            elif isinstance(signature, Function):
                summary = f"Converted from Go function: {signature.name}"
            else:
                summary = signature.name
            lines.extend(self.javadoc(signature, summary, return_type.text))
        flags = [f"unresolved Go type: {u}" for u in dict.fromkeys(unresolved)]
        if abstract:
            lines.extend(f"// {flag}" for flag in flags)
            lines.append(f"{return_type.text} {name}({params}){throws};")
            return lines

        modifiers = "public static" if static else "public"
        lines.append(f"{modifiers} {return_type.text} {name}({params}){throws} {{")
        body = [f"// {flag}" for flag in flags]
        body.append("// TODO: Implement method logic")
        values = signature.value_results
        if len(values) > 1:
            body.append(f"return new {return_type.text}();")
        elif len(values) == 1:
            body.append(f"return {default_value(return_type.text)};")
        elif signature.has_error_return and self.options.errors_as_exceptions:
            body.append('throw new UnsupportedOperationException("Not implemented");')
        lines.extend(indent(body))
        lines.append("}")
        return lines

    def result_class(self, signature: MethodSignature) -> list[str]:
        """Render the Result wrapper for a signature with more than one value result."""
        fields = result_fields(signature)
        if len(fields) <= 1:
            return []
        name = result_class_name(signature)
        typed = [(field_name, self.java(result).text) for field_name, result in fields]
        lines: list[str] = []
        if self.options.emit_doc_comments:
            lines.extend(["/**", f" * Result of Go function {signature.name} (multiple return values)", " */"])
        lines.append(f"public static class {name} {{")
        lines.extend(indent(f"private {java} {field_name};" for field_name, java in typed))
        for field_name, java in typed:
            lines.append("")
            lines.extend(indent(self.accessors(field_name, field_name, java)))
        lines.append("}")
        return lines

    def accessors(self, go_name: str, field_name: str, java: str) -> list[str]:
        suffix = accessor_suffix(go_name)
        return [
            f"public {java} get{suffix}() {{",
            f"{INDENT}return {field_name};",
            "}",
            "",
            f"public void set{suffix}({java} {field_name}) {{",
            f"{INDENT}this.{field_name} = {field_name};",
            "}",
        ]

    # -- declarations ---------------------------------------------------------

    def struct(self, struct: Struct) -> list[str]:
        embedded = [f for f in struct.fields if f.embedded]
        named = [f for f in struct.fields if not f.embedded]
        if embedded:
            self.hints[_HINT_EMBEDDING] = None
        lines: list[str] = []
        if self.options.emit_doc_comments:
            lines.extend(["/**", f" * Converted from Go struct: {struct.name}"])
            if struct.fields:
                lines.extend([" *", " * Fields:"])
                for f in struct.fields:
                    tag = f" (tag: {f.tag})" if f.tag else ""
                    kind = " (embedded)" if f.embedded else ""
                    lines.append(f" * - {f.name}: {self.mapper.map(f.type).text}{kind}{tag}")
            lines.append(" */")
        lines.append(f"public static class {struct.name} {{")

        body: list[str] = []
        for f in embedded:
            java = self.java(f.type)
            comments = [f"embedded Go type {f.type.qualified_name}"]
            comments.extend(f"unresolved Go type: {u}" for u in java.unresolved)
            body.append(f"private {java.text} {lower_camel(f.name)};  // {'; '.join(comments)}")
        for f in named:
            body.extend(self.field(f))
        if self.options.emit_constructors:
            body.append("")
            if self.options.emit_doc_comments:
                body.extend(["/**", " * Default constructor", " */"])
            body.append(f"public {struct.name}() {{}}")
        if self.options.emit_getters_setters:
            for f in named:
                body.append("")
                body.extend(self.accessors(f.name, lower_camel(f.name), self.mapper.map(f.type).text))
        if struct.methods:
            body.extend(["", "// Methods"])
            for fn in struct.methods:
                body.extend(self.guard("method", f"{struct.name}.{fn.name}", lambda fn=fn: ["", *self.method(fn)]))
            for fn in struct.methods:
                wrapper = self.result_class(fn)
                if wrapper:
                    body.extend(["", *wrapper])
        lines.extend(indent(body))
        lines.append("}")
        return lines

    def field(self, f: Field) -> list[str]:
        java = self.java(f.type)
        comments = [f"Go tag: {f.tag}"] if f.tag else []
        comments.extend(f"unresolved Go type: {u}" for u in java.unresolved)
        trailing = f"  // {'; '.join(comments)}" if comments else ""
        return [f"private {java.text} {lower_camel(f.name)};{trailing}"]

    def interface(self, iface: Interface) -> list[str]:
        extends: list[str] = []
        embedded_notes: list[str] = []
        for name in iface.embedded:
            mapping = lookup_stdlib(name)
            if mapping is not None:
                embedded_notes.append(f"// embeds Go {name} ({mapping.java_type}): {mapping.note}")
            else:
                extends.append(name.rsplit(".", 1)[-1])
        lines: list[str] = []
        if self.options.emit_doc_comments:
            lines.extend(["/**", f" * Converted from Go interface: {iface.name}", " */"])
        extends_clause = f" extends {', '.join(extends)}" if extends else ""
        lines.append(f"public interface {iface.name}{extends_clause} {{")
        body: list[str] = list(embedded_notes)
        for signature in iface.methods:
            body.append("")
            body.extend(
                self.guard(
                    "method", f"{iface.name}.{signature.name}", lambda s=signature: self.method(s, abstract=True)
                )
            )
        for signature in iface.methods:
            wrapper = self.result_class(signature)
            if wrapper:
                body.extend(["", *wrapper])
        lines.extend(indent(body))
        lines.append("}")
        return lines

    def static_field(self, variable: Variable) -> list[str]:
        mapped = self.java(variable.type) if variable.type is not None else JavaType(text="Object")
        java = mapped.text
        if variable.is_const:
            modifiers, name = "public static final", constant_case(variable.name)
        else:
            modifiers, name = "public static", lower_camel(variable.name)
        if variable.value is None:
            initializer = " /* TODO: initialize */"
        elif is_literal_value(variable.value):
            initializer = f" = {_java_literal(variable.value, java)}"
        else:
            expression = " ".join(variable.value.split()).replace("*/", "* /")
            initializer = f" /* TODO: initialize from Go expression: {expression} */"
        flags = "; ".join(f"unresolved Go type: {u}" for u in mapped.unresolved)
        trailing = f"  // {flags}" if flags else ""
        return [f"{modifiers} {java} {escape_identifier(name)}{initializer};{trailing}"]

    def function(self, fn: Function) -> list[str]:
        return self.method(fn, static=self.options.static_functions)


def _mapper_for(unit: SourceUnit, enrichment: DependencyGraph | None) -> TypeMapper:
    known = unit.declared_type_names()
    if enrichment is not None:
        known |= enrichment.external_type_names()
    return TypeMapper(
        known_types=known,
        type_definitions={t.name: t.underlying for t in unit.type_definitions},
        import_aliases=build_import_alias_map(unit.imports),
        package_paths=enrichment.resolved_package_paths() if enrichment is not None else None,
    )


def _header(imports: set[str]) -> list[str]:
    lines = ["import java.util.*;"]
    lines.extend(f"import {name};" for name in sorted(imports))
    lines.append("")
    return lines


def _learning_notes(hints: Iterable[str], notes: Iterable[str]) -> list[str]:
    lines = ["/**", " * Go to Java Conversion Notes:"]
    lines.extend(f" * - {hint}" for hint in hints)
    lines.extend(f" * - {note}" for note in notes)
    lines.append(" */")
    return lines


def unit_class_name(
    unit: SourceUnit,
    options: GenerationOptions,
    enrichment: DependencyGraph | None = None,
) -> str:
    """Outer class name, suffixed with ``Go`` while a nested type already uses it."""
    if options.class_name:
        name = options.class_name
    elif unit.package:
        name = upper_camel(unit.package)
    else:
        name = DEFAULT_CLASS_NAME
    taken = unit.declared_type_names()
    if enrichment is not None and options.emit_external_types:
        taken |= enrichment.external_type_names()
    while name in taken:
        name += "Go"
    return name


def generate_unit(
    unit: SourceUnit,
    enrichment: DependencyGraph | None = None,
    options: GenerationOptions | None = None,
) -> str:
    """Render a whole Go file as one outer Java class.

    Declarations that fail to render are replaced by a skip marker; an empty
    unit produces ``EMPTY_UNIT_MARKER`` followed by an empty class stub.
    """
    options = options or GenerationOptions()
    class_name = unit_class_name(unit, options, enrichment)
    failures = [f"{MARKER} skipped declaration at line {f.line + 1}: {f.reason}" for f in unit.failures]
    if unit.is_empty:
        return "\n".join([EMPTY_UNIT_MARKER, *failures, f"public class {class_name} {{", "}", ""])

    gen = JavaGenerator(_mapper_for(unit, enrichment), options)
    body: list[str] = list(failures)
    if failures:
        body.append("")

    if unit.constants or unit.variables:
        body.append("// Package-level variables and constants")
        for constant in unit.constants:
            body.extend(gen.guard("constant", constant.name, lambda c=constant: gen.static_field(c)))
        for variable in unit.variables:
            body.extend(gen.guard("variable", variable.name, lambda v=variable: gen.static_field(v)))
        body.append("")

    for struct in unit.structs:
        body.extend(gen.guard("struct", struct.name, lambda s=struct: gen.struct(s)))
        body.append("")
    for iface in unit.interfaces:
        body.extend(gen.guard("interface", iface.name, lambda i=iface: gen.interface(i)))
        body.append("")

    if enrichment is not None and options.emit_external_types:
        local = unit.declared_type_names()
        external_structs = [s for s in enrichment.external_structs if s.name not in local]
        external_interfaces = [i for i in enrichment.external_interfaces if i.name not in local]
        if external_structs or external_interfaces:
            body.append("// External types resolved from other Go files")
            for struct in external_structs:
                body.extend(gen.guard("struct", struct.name, lambda s=struct: gen.struct(s)))
                body.append("")
            for iface in external_interfaces:
                body.extend(gen.guard("interface", iface.name, lambda i=iface: gen.interface(i)))
                body.append("")

    if unit.functions:
        body.append("// Package-level functions")
        for fn in unit.functions:
            body.extend(gen.guard("function", fn.name, lambda f=fn: gen.function(f)))
            body.append("")
        for fn in unit.functions:
            wrapper = gen.guard("result class", result_class_name(fn), lambda f=fn: gen.result_class(f))
            if wrapper:
                body.extend([*wrapper, ""])

    while body and not body[-1]:
        body.pop()

    lines = _header(gen.imports)
    if options.emit_doc_comments:
        lines.extend(["/**", f" * Converted from Go package: {unit.package or 'main'}", " *", " * Conversion Notes:"])
        lines.extend(f" * - {note}" for note in _FILE_NOTES)
        lines.extend(
            [
                " *",
                " * This is an educational tool to help Java developers understand Go code.",
                " * The generated Java is a structural equivalent, not a direct translation.",
                " */",
            ]
        )
    if options.emit_learning_notes:
        lines.extend(_learning_notes(gen.hints, gen.notes))
    lines.append(f"public class {class_name} {{")
    lines.append("")
    lines.extend(indent(body))
    lines.append("}")
    lines.append("")
    return "\n".join(lines)


def generate_method(
    function: Function,
    options: GenerationOptions | None = None,
    mapper: TypeMapper | None = None,
) -> str:
    """Render one function as a Java method (no enclosing class)."""
    options = options or GenerationOptions()
    gen = JavaGenerator(mapper or TypeMapper(), options)
    static = options.static_functions and not function.is_method
    return "\n".join(gen.method(function, static=static))


def generate_result_class(function: MethodSignature, options: GenerationOptions | None = None) -> str:
    """Render the Result wrapper for ``function``, or an empty string when none is needed."""
    gen = JavaGenerator(TypeMapper(), options or GenerationOptions())
    return "\n".join(gen.result_class(function))


def generate_function_class(function: Function, options: GenerationOptions | None = None) -> str:
    """Render a single function inside a standalone class, with its Result wrapper."""
    options = options or GenerationOptions()
    gen = JavaGenerator(TypeMapper(), options)
    method = gen.method(function, static=options.static_functions and not function.is_method)
    wrapper = gen.result_class(function)

    lines = _header(gen.imports)
    if options.emit_learning_notes:
        lines.extend(_learning_notes(gen.hints, gen.notes))
    lines.append(f"public class {options.class_name or DEFAULT_CLASS_NAME} {{")
    lines.append("")
    lines.extend(indent(method))
    if wrapper:
        lines.append("")
        lines.extend(indent(wrapper))
    lines.append("}")
    lines.append("")
    return "\n".join(lines)
