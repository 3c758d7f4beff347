import re

from go_to_java.models import MapType, NamedType, PointerType, PrimitiveType, SliceType, TypeRef

GO_BUILTIN_TYPES = frozenset(
    {
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "float32",
        "float64",
        "complex64",
        "complex128",
        "bool",
        "string",
        "rune",
        "byte",
        "error",
        "any",
        "interface{}",
    }
)

_QUALIFIED = re.compile(r"^([A-Za-z_]\w*)\.([A-Za-z_]\w*)$")
_ARRAY_PREFIX = re.compile(r"^\[[^\]]+\]")

_STRING_LITERAL = re.compile(r'^(?:"(?:[^"\\]|\\.)*"|`[^`]*`)$', re.DOTALL)
_RUNE_LITERAL = re.compile(r"^'(?:[^'\\]|\\.[^']*)'$")
_INT_LITERAL = re.compile(r"^-?(?:0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO]?[0-7_]+|[0-9][0-9_]*)$")
_FLOAT_LITERAL = re.compile(r"^-?(?:[0-9][0-9_]*\.[0-9_]*(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+|\.[0-9]+)$")


def normalize_type_text(text: str) -> str:
    collapsed = " ".join(text.split())
    return collapsed.replace("interface {}", "interface{}").replace("struct {}", "struct{}")


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` outside of brackets, parentheses, braces and literals."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    current: list[str] = []
    escaped = False
    for ch in text:
        if quote:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\" and quote != "`":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'`":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def take_group(text: str, open_ch: str = "(", close_ch: str = ")") -> tuple[str, str] | None:
    """Return (inner, rest) for a balanced group at the start of ``text``."""
    if not text.startswith(open_ch):
        return None
    depth = 0
    for index, ch in enumerate(text):
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[1:index], text[index + 1 :]
    return None


def parse_type_ref(text: str) -> TypeRef:
    """Parse a Go type expression.

    Prefixes are stripped in a fixed order (variadic, pointer, slice/array)
    before the map pattern is inspected, so ``...[]T`` is a variadic slice of
    slices and ``*map[K]V`` a pointer to a map.
    """
    trimmed = normalize_type_text(text)
    if not trimmed:
        return PrimitiveType(name="interface{}")

    if trimmed.startswith("..."):
        return SliceType(elem=parse_type_ref(trimmed[3:]), variadic=True)
    if trimmed.startswith("*"):
        return PointerType(elem=parse_type_ref(trimmed[1:]))
    if trimmed.startswith("[]"):
        return SliceType(elem=parse_type_ref(trimmed[2:]))
    array = _ARRAY_PREFIX.match(trimmed)
    if array:
        return SliceType(elem=parse_type_ref(trimmed[array.end() :]))
    if trimmed.startswith("map["):
        group = take_group(trimmed[3:], "[", "]")
        if group and group[0].strip() and group[1].strip():
            key_text, value_text = group
            return MapType(key=parse_type_ref(key_text), value=parse_type_ref(value_text))
        return NamedType(name=trimmed)
    if trimmed.startswith("(") and trimmed.endswith(")"):
        return parse_type_ref(trimmed[1:-1])

    if trimmed in GO_BUILTIN_TYPES:
        return PrimitiveType(name=trimmed)
    qualified = _QUALIFIED.match(trimmed)
    if qualified:
        return NamedType(package=qualified.group(1), name=qualified.group(2))
    return NamedType(name=trimmed)


def is_literal_value(value: str) -> bool:
    text = value.strip()
    return bool(
        text in ("true", "false", "nil")
        or _STRING_LITERAL.match(text)
        or _RUNE_LITERAL.match(text)
        or _INT_LITERAL.match(text)
        or _FLOAT_LITERAL.match(text)
    )


def infer_type_from_value(value: str | None) -> TypeRef | None:
    """Infer the Go type of an untyped literal, or ``None`` for expressions."""
    if value is None:
        return None
    text = value.strip()
    if _STRING_LITERAL.match(text):
        return PrimitiveType(name="string")
    if text in ("true", "false"):
        return PrimitiveType(name="bool")
    if _RUNE_LITERAL.match(text):
        return PrimitiveType(name="rune")
    if _INT_LITERAL.match(text):
        return PrimitiveType(name="int")
    if _FLOAT_LITERAL.match(text):
        return PrimitiveType(name="float64")
    return None


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()
