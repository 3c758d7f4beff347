from collections.abc import Iterator
from pathlib import Path
from typing import cast

from tree_sitter import Node, Query
from tree_sitter_language_pack import SupportedLanguage, get_language, get_parser

from go_to_java.core.builder import UnitBuilder
from go_to_java.core.typeref import GO_BUILTIN_TYPES, infer_type_from_value, is_exported, parse_type_ref
from go_to_java.models import (
    Field,
    Function,
    Import,
    Interface,
    MapType,
    MethodSignature,
    NamedType,
    Parameter,
    PointerType,
    Position,
    PrimitiveType,
    SliceType,
    SourceRange,
    SourceUnit,
    Struct,
    TypeDefinition,
    TypeRef,
    Variable,
)

_LANGUAGE = cast(SupportedLanguage, "go")
_WRAPPER_TYPES = frozenset({"pointer_type", "slice_type", "array_type", "parenthesized_type"})


def load_query(query_type: str) -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"go_{query_type}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(_LANGUAGE), query_text)


def parse_tree(source: str) -> Node:
    parser = get_parser(_LANGUAGE)
    return parser.parse(source.encode("utf-8")).root_node


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _position(node: Node) -> Position:
    return Position(row=node.start_point[0], column=node.start_point[1])


def _range(node: Node) -> SourceRange:
    return SourceRange(
        start=_position(node),
        end=Position(row=node.end_point[0], column=node.end_point[1]),
    )


def _innermost(node: Node) -> Node:
    while node.type in _WRAPPER_TYPES and node.named_children:
        node = node.child_by_field_name("element") or node.named_children[-1]
    return node


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "`\"":
        return text[1:-1]
    return text


def type_ref_from_node(node: Node) -> TypeRef:
    """Build a TypeRef from a type node; literal types fall back to the text parser."""
    kind = node.type
    if kind == "pointer_type":
        return PointerType(elem=type_ref_from_node(node.named_children[0]))
    if kind in ("slice_type", "array_type"):
        element = node.child_by_field_name("element")
        if element is not None:
            return SliceType(elem=type_ref_from_node(element))
    if kind == "map_type":
        key = node.child_by_field_name("key")
        value = node.child_by_field_name("value")
        if key is not None and value is not None:
            return MapType(key=type_ref_from_node(key), value=type_ref_from_node(value))
    if kind == "qualified_type":
        return NamedType(
            package=_text(node.child_by_field_name("package")),
            name=_text(node.child_by_field_name("name")),
        )
    if kind == "parenthesized_type" and node.named_children:
        return type_ref_from_node(node.named_children[0])
    if kind == "generic_type":
        base = node.child_by_field_name("type")
        if base is not None:
            return type_ref_from_node(base)
    if kind == "type_identifier":
        name = _text(node)
        return PrimitiveType(name=name) if name in GO_BUILTIN_TYPES else NamedType(name=name)
    return parse_type_ref(_text(node))


def _parameters(node: Node | None) -> list[Parameter]:
    if node is None:
        return []
    params: list[Parameter] = []
    for child in node.named_children:
        type_node = child.child_by_field_name("type")
        if type_node is None:
            continue
        type_position = _position(_innermost(type_node))
        if child.type == "parameter_declaration":
            type_ref = type_ref_from_node(type_node)
            names = child.children_by_field_name("name")
            if names:
                params.extend(Parameter(name=_text(n), type=type_ref, type_position=type_position) for n in names)
            else:
                params.append(Parameter(name="", type=type_ref, type_position=type_position))
        elif child.type == "variadic_parameter_declaration":
            params.append(
                Parameter(
                    name=_text(child.child_by_field_name("name")),
                    type=SliceType(elem=type_ref_from_node(type_node), variadic=True),
                    type_position=type_position,
                )
            )
    return params


def _results(node: Node | None) -> tuple[list[TypeRef], list[str]]:
    if node is None:
        return [], []
    if node.type == "parameter_list":
        params = _parameters(node)
        return [p.type for p in params], [p.name for p in params]
    return [type_ref_from_node(node)], [""]


def _function(node: Node) -> Function:
    name_node = node.child_by_field_name("name")
    receiver: Parameter | None = None
    if node.type == "method_declaration":
        receivers = _parameters(node.child_by_field_name("receiver"))
        receiver = receivers[0] if receivers else None
    results, result_names = _results(node.child_by_field_name("result"))
    return Function(
        name=_text(name_node),
        parameters=_parameters(node.child_by_field_name("parameters")),
        results=results,
        result_names=result_names,
        is_method=receiver is not None,
        receiver=receiver,
        name_position=_position(name_node) if name_node is not None else None,
    )


def _fields(declaration: Node) -> list[Field]:
    type_node = declaration.child_by_field_name("type")
    if type_node is None:
        return []
    tag_node = declaration.child_by_field_name("tag")
    tag = _unquote(_text(tag_node)) if tag_node is not None else None
    type_ref = type_ref_from_node(type_node)
    type_position = _position(_innermost(type_node))

    names = declaration.children_by_field_name("name")
    if not names:
        if any(child.type == "*" for child in declaration.children):
            type_ref = PointerType(elem=type_ref)
        short = type_ref.base_name
        return [
            Field(
                name=short,
                type=type_ref,
                tag=tag,
                exported=is_exported(short),
                embedded=True,
                name_position=type_position,
                type_position=type_position,
            )
        ]
    return [
        Field(
            name=_text(n),
            type=type_ref,
            tag=tag,
            exported=is_exported(_text(n)),
            name_position=_position(n),
            type_position=type_position,
        )
        for n in names
    ]


def _struct(spec: Node, type_node: Node) -> Struct:
    name_node = spec.child_by_field_name("name")
    fields: list[Field] = []
    for child in type_node.named_children:
        if child.type != "field_declaration_list":
            continue
        for declaration in child.named_children:
            if declaration.type == "field_declaration":
                fields.extend(_fields(declaration))
    return Struct(
        name=_text(name_node),
        fields=fields,
        embedded=[f.type for f in fields if f.embedded],
        name_position=_position(name_node) if name_node is not None else None,
        range=_range(spec),
    )


def _interface(spec: Node, type_node: Node) -> Interface:
    name_node = spec.child_by_field_name("name")
    methods: list[MethodSignature] = []
    embedded: list[str] = []
    for child in type_node.named_children:
        if child.type in ("method_elem", "method_spec"):
            method_name = child.child_by_field_name("name")
            results, result_names = _results(child.child_by_field_name("result"))
            methods.append(
                MethodSignature(
                    name=_text(method_name),
                    parameters=_parameters(child.child_by_field_name("parameters")),
                    results=results,
                    result_names=result_names,
                    name_position=_position(method_name) if method_name is not None else None,
                )
            )
        elif child.type in ("type_elem", "constraint_elem", "interface_type_name"):
            # unions and approximations are constraints, not embeddings
            if len(child.named_children) == 1 and child.named_children[0].type in ("type_identifier", "qualified_type"):
                embedded.append(_text(child.named_children[0]))
        elif child.type in ("type_identifier", "qualified_type"):
            embedded.append(_text(child))
    return Interface(
        name=_text(name_node),
        methods=methods,
        embedded=embedded,
        name_position=_position(name_node) if name_node is not None else None,
        range=_range(spec),
    )


def _specs(node: Node, kinds: frozenset[str]) -> Iterator[Node]:
    for child in node.named_children:
        if child.type in kinds:
            yield child
        elif child.type.endswith("_spec_list"):
            yield from _specs(child, kinds)


def _type_declaration(node: Node, out: UnitBuilder) -> None:
    for spec in _specs(node, frozenset({"type_spec", "type_alias"})):
        type_node = spec.child_by_field_name("type")
        name_node = spec.child_by_field_name("name")
        if type_node is None or name_node is None:
            out.fail(spec.start_point[0], _text(spec), "incomplete type declaration")
            continue
        if type_node.type == "struct_type":
            out.structs.append(_struct(spec, type_node))
        elif type_node.type == "interface_type":
            out.interfaces.append(_interface(spec, type_node))
        else:
            out.type_definitions.append(
                TypeDefinition(
                    name=_text(name_node),
                    underlying=type_ref_from_node(type_node),
                    is_alias=spec.type == "type_alias",
                    name_position=_position(name_node),
                )
            )


def _value_declaration(node: Node, out: UnitBuilder, is_const: bool) -> None:
    for spec in _specs(node, frozenset({"var_spec", "const_spec"})):
        names = spec.children_by_field_name("name")
        type_node = spec.child_by_field_name("type")
        value_node = spec.child_by_field_name("value")
        values = [_text(v) for v in value_node.named_children] if value_node is not None else []
        value_text = _text(value_node) or None
        declared = type_ref_from_node(type_node) if type_node is not None else None
        for index, name_node in enumerate(names):
            value = values[index] if len(values) == len(names) else value_text
            out.add_variable(
                Variable(
                    name=_text(name_node),
                    type=declared if declared is not None else infer_type_from_value(value),
                    is_const=is_const,
                    exported=is_exported(_text(name_node)),
                    value=value,
                    name_position=_position(name_node),
                    type_position=_position(_innermost(type_node)) if type_node is not None else None,
                )
            )


def _import_declaration(node: Node, out: UnitBuilder) -> None:
    for spec in _specs(node, frozenset({"import_spec"})):
        alias = spec.child_by_field_name("name")
        out.imports.append(
            Import(
                path=_unquote(_text(spec.child_by_field_name("path"))),
                alias=_text(alias) if alias is not None else None,
                line=spec.start_point[0],
            )
        )


def _visit(node: Node, out: UnitBuilder) -> None:
    kind = node.type
    if kind == "package_clause":
        if node.named_children:
            out.package = _text(node.named_children[0])
    elif kind == "import_declaration":
        _import_declaration(node, out)
    elif kind == "type_declaration":
        _type_declaration(node, out)
    elif kind in ("function_declaration", "method_declaration"):
        if node.child_by_field_name("name") is None:
            out.fail(node.start_point[0], _text(node), "function without a name")
            return
        out.functions.append(_function(node))
    elif kind in ("var_declaration", "const_declaration"):
        _value_declaration(node, out, is_const=kind == "const_declaration")
    elif kind == "ERROR":
        out.fail(node.start_point[0], _text(node), "syntax error")


def parse_unit(text: str) -> SourceUnit:
    """Parse a whole Go file from its tree-sitter syntax tree. Never raises."""
    out = UnitBuilder()
    for node in parse_tree(text).named_children:
        try:
            _visit(node, out)
        except Exception as exc:
            out.fail(node.start_point[0], _text(node), f"syntax tree error: {exc}")
    return out.build()


def parse_declaration(text: str) -> Function | None:
    for node in parse_tree(text).named_children:
        if node.type in ("function_declaration", "method_declaration") and node.child_by_field_name("name"):
            return _function(node)
    return None
