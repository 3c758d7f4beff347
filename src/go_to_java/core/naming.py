import re

JAVA_KEYWORDS = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
        "class", "const", "continue", "default", "do", "double", "else", "enum",
        "extends", "final", "finally", "float", "for", "goto", "if", "implements",
        "import", "instanceof", "int", "interface", "long", "native", "new",
        "package", "private", "protected", "public", "return", "short", "static",
        "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
        "transient", "try", "void", "volatile", "while", "true", "false", "null",
        "var", "record", "yield",
    }
)  # fmt: skip

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def escape_identifier(name: str) -> str:
    """Make a Go identifier legal in Java."""
    if not name or name == "_":
        return "unused"
    if name in JAVA_KEYWORDS:
        return f"{name}_"
    return name


def lower_camel(name: str) -> str:
    """``Name`` → ``name``, ``ID`` → ``id``, ``URLPath`` → ``urlPath``."""
    if not name or not name[0].isupper():
        return escape_identifier(name)
    run = len(name) - len(name.lstrip("ABCDEFGHIJKLMNOPQRSTUVWXYZ"))
    if run == len(name):
        converted = name.lower()
    elif run > 1 and name[run].islower():
        converted = name[: run - 1].lower() + name[run - 1 :]
    else:
        converted = name[:run].lower() + name[run:]
    return escape_identifier(converted)


def upper_camel(name: str) -> str:
    """``my_type`` → ``MyType``, ``person`` → ``Person``."""
    parts = [p for p in name.split("_") if p]
    return "".join(p[0].upper() + p[1:] for p in parts) or "Unnamed"


# getClass() is final on java.lang.Object
RESERVED_ACCESSOR_SUFFIXES = frozenset({"Class"})


def accessor_suffix(name: str) -> str:
    suffix = name[:1].upper() + name[1:]
    if suffix in RESERVED_ACCESSOR_SUFFIXES:
        return f"{suffix}_"
    return suffix


def constant_case(name: str) -> str:
    """``HTTPTimeout`` → ``HTTP_TIMEOUT``, ``maxRetries`` → ``MAX_RETRIES``."""
    spaced = _WORD_BOUNDARY.sub(r"\1_\2", _ACRONYM_BOUNDARY.sub(r"\1_\2", name))
    return re.sub(r"_+", "_", spaced).upper()
