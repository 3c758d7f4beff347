"""Line/brace-scanning parser.

Each top-level line is classified by its leading keyword and handed to a
declaration scanner. Compound declarations are delimited by counting braces
on a copy of the text whose comments and literal contents are blanked out,
so positions stay aligned with the original lines.
"""

import logging
import re

from go_to_java.core.builder import UnitBuilder
from go_to_java.core.typeref import (
    infer_type_from_value,
    is_exported,
    parse_type_ref,
    split_top_level,
    take_group,
)
from go_to_java.models import (
    Field,
    Function,
    Import,
    Interface,
    MapType,
    MethodSignature,
    Parameter,
    Position,
    SourceRange,
    SourceUnit,
    Struct,
    TypeDefinition,
    TypeRef,
    Variable,
)

logger = logging.getLogger(__name__)

_TOP_LEVEL = re.compile(r"^(package|import|type|func|var|const)\b")
_PACKAGE = re.compile(r"^package\s+([A-Za-z_]\w*)")
_IMPORT_SPEC = re.compile(r'^(?:([A-Za-z_]\w*|\.)\s+)?"([^"]+)"')
_TYPE_SPEC = re.compile(r"^([A-Za-z_]\w*)(\[[A-Za-z_][^\]]*\])?\s*(=)?\s*(.*)$")
_VALUE_SPEC = re.compile(r"^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s*(.*)$")
_EMBEDDED_FIELD = re.compile(r"^(\*?)((?:[A-Za-z_]\w*\.)?[A-Z]\w*)\s*(?:`([^`]*)`)?$")
_NAMED_FIELD = re.compile(r"^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+([^`]+?)\s*(?:`([^`]*)`)?$")
_NAME_AND_TYPE = re.compile(r"^([A-Za-z_]\w*)\s+(.+)$", re.DOTALL)
_BARE_NAME = re.compile(r"^[A-Za-z_]\w*$")
_INTERFACE_EMBED = re.compile(r"^~?(?:[A-Za-z_]\w*\.)?[A-Za-z_]\w*$")
_INTERFACE_METHOD = re.compile(r"^([A-Za-z_]\w*)\s*(\(.*)$", re.DOTALL)
_FUNC_KEYWORD = re.compile(r"^func\b\s*")
_IDENTIFIER = re.compile(r"^([A-Za-z_]\w*)\s*")
_TYPE_LITERAL_TAIL = re.compile(r"\b(?:interface|struct)\s*$")
_WHOLE_RESULT = re.compile(r"^(?:func\b|chan\b|<-|interface\b|struct\b)")

# Identifiers that begin a type expression and therefore never name a parameter.
_TYPE_KEYWORDS = frozenset({"chan", "func", "map", "struct", "interface"})


# ---------------------------------------------------------------------------
# Text preparation
# ---------------------------------------------------------------------------


def sanitize(lines: list[str]) -> tuple[list[str], list[str]]:
    """Return (code, masked) copies of ``lines``.

    ``code`` has comments replaced by spaces; ``masked`` additionally blanks
    the contents of string and rune literals so braces inside them are not
    counted. Both keep every character at its original column.
    """
    code_lines: list[str] = []
    masked_lines: list[str] = []
    in_block = False
    in_raw = False
    for line in lines:
        code: list[str] = []
        masked: list[str] = []
        quote: str | None = None
        i = 0
        while i < len(line):
            ch = line[i]
            if in_block:
                if line.startswith("*/", i):
                    in_block = False
                    code.append("  ")
                    masked.append("  ")
                    i += 2
                    continue
                code.append(" ")
                masked.append(" ")
                i += 1
                continue
            if in_raw:
                code.append(ch)
                masked.append("`" if ch == "`" else " ")
                in_raw = ch != "`"
                i += 1
                continue
            if quote:
                if ch == "\\" and i + 1 < len(line):
                    code.append(line[i : i + 2])
                    masked.append("  ")
                    i += 2
                    continue
                code.append(ch)
                if ch == quote:
                    quote = None
                    masked.append(ch)
                else:
                    masked.append(" ")
                i += 1
                continue
            if line.startswith("//", i):
                break
            if line.startswith("/*", i):
                in_block = True
                code.append("  ")
                masked.append("  ")
                i += 2
                continue
            if ch == "`":
                in_raw = True
            elif ch in "\"'":
                quote = ch
            code.append(ch)
            masked.append(ch)
            i += 1
        code_text = "".join(code).rstrip()
        code_lines.append(code_text)
        masked_lines.append("".join(masked)[: len(code_text)])
    return code_lines, masked_lines


def _brace_delta(masked: str) -> int:
    return masked.count("{") - masked.count("}")


def _paren_balance(masked: str) -> int:
    return masked.count("(") - masked.count(")") + masked.count("[") - masked.count("]")


def _find_body_brace(masked: str) -> int:
    """Index of the ``{`` opening a function body, or -1.

    Braces inside parentheses or following ``interface``/``struct`` belong to
    type literals in the signature and are skipped.
    """
    depth = 0
    literal_depth = 0
    for index, ch in enumerate(masked):
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == "{":
            if literal_depth or depth > 0 or _TYPE_LITERAL_TAIL.search(masked[:index]):
                literal_depth += 1
            else:
                return index
        elif ch == "}" and literal_depth:
            literal_depth -= 1
    return -1


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


def _split_name_type(segment: str) -> tuple[str | None, str]:
    match = _NAME_AND_TYPE.match(segment)
    if match and match.group(1) not in _TYPE_KEYWORDS:
        return match.group(1), match.group(2)
    return None, segment


def parse_parameters(text: str) -> list[Parameter]:
    """Parse a parameter list body, honouring Go's all-named/all-unnamed rule."""
    segments = [s for s in split_top_level(text) if s]
    if not segments:
        return []
    split = [_split_name_type(s) for s in segments]
    if all(name is None for name, _ in split):
        return [Parameter(name="", type=parse_type_ref(s)) for s in segments]

    params: list[Parameter] = []
    pending: list[str] = []
    for segment, (name, type_text) in zip(segments, split):
        if name is None:
            if _BARE_NAME.match(segment):
                pending.append(segment)
            else:
                logger.debug("Ignoring unnamed parameter %r in a named list", segment)
            continue
        type_ref = parse_type_ref(type_text)
        params.extend(Parameter(name=n, type=type_ref) for n in [*pending, name])
        pending = []
    return params


def _parse_results(text: str) -> tuple[list[TypeRef], list[str]]:
    text = text.strip()
    if not text:
        return [], []
    if text.startswith("("):
        group = take_group(text)
        if group is None:
            return [], []
        params = parse_parameters(group[0])
        return [p.type for p in params], [p.name for p in params]
    if not _WHOLE_RESULT.match(text):
        text = text.split()[0]
    return [parse_type_ref(text)], [""]


def _parse_signature(signature: str) -> Function | None:
    text = " ".join(signature.split())
    head = _FUNC_KEYWORD.match(text)
    if head is None:
        return None
    rest = text[head.end() :]

    receiver: Parameter | None = None
    if rest.startswith("("):
        group = take_group(rest)
        if group is None:
            return None
        receivers = parse_parameters(group[0])
        if not receivers:
            return None
        receiver = receivers[0]
        rest = group[1].lstrip()

    ident = _IDENTIFIER.match(rest)
    if ident is None:
        return None
    name = ident.group(1)
    rest = rest[ident.end() :]
    if rest.startswith("["):
        type_params = take_group(rest, "[", "]")
        if type_params is not None:
            rest = type_params[1].lstrip()

    params = take_group(rest)
    if params is None:
        return None
    results, result_names = _parse_results(params[1])
    return Function(
        name=name,
        parameters=parse_parameters(params[0]),
        results=results,
        result_names=result_names,
        is_method=receiver is not None,
        receiver=receiver,
    )


def parse_declaration(text: str) -> Function | None:
    """Parse a single ``func`` declaration; anything after the body brace is ignored."""
    code_lines, masked_lines = sanitize(text.splitlines())
    code = "\n".join(code_lines)
    masked = "\n".join(masked_lines)
    start = re.search(r"\bfunc\b", masked)
    if start is None:
        return None
    body = _find_body_brace(masked[start.start() :])
    end = start.start() + body if body >= 0 else len(code)
    try:
        return _parse_signature(code[start.start() : end])
    except Exception:
        logger.debug("Could not parse declaration %r", text[:80], exc_info=True)
        return None


# ---------------------------------------------------------------------------
# Whole-unit scanning
# ---------------------------------------------------------------------------


def _anchor(type_ref: TypeRef) -> str:
    base = type_ref.base
    if isinstance(base, MapType):
        return "map"
    return base.qualified_name.split("[")[0]


class _UnitScanner:
    def __init__(self, text: str) -> None:
        self._raw = text.splitlines()
        self._code, self._masked = sanitize(self._raw)
        self._out = UnitBuilder()

    def scan(self) -> SourceUnit:
        handlers = {
            "package": self._package,
            "import": self._import,
            "type": self._type,
            "func": self._func,
            "var": self._values,
            "const": self._values,
        }
        i = 0
        while i < len(self._code):
            line = self._code[i].strip()
            match = _TOP_LEVEL.match(line) if line else None
            if match is None:
                i += 1
                continue
            try:
                i = max(handlers[match.group(1)](i), i + 1)
            except Exception as exc:
                self._out.fail(i, line, f"scanner error: {exc}")
                i += 1
        return self._out.build()

    # -- helpers --------------------------------------------------------------

    def _column(self, row: int, word: str, start: int = 0) -> int:
        found = re.compile(rf"(?<![\w.]){re.escape(word)}(?!\w)").search(self._raw[row], start)
        return found.start() if found else 0

    def _position(self, row: int, word: str, start: int = 0) -> Position:
        return Position(row=row, column=self._column(row, word, start))

    def _spec_start(self, row: int, keyword: str) -> int:
        raw = self._raw[row]
        indent = len(raw) - len(raw.lstrip())
        return indent + len(keyword) if raw.lstrip().startswith(keyword) else indent

    def _skip_block(self, row: int, depth: int) -> int:
        """Skip lines after ``row`` until ``depth`` open braces are closed."""
        j = row + 1
        while j < len(self._masked) and depth > 0:
            depth += _brace_delta(self._masked[j])
            j += 1
        return j

    def _grouped(self, row: int, rest: str, keyword: str, spec) -> int:
        """Walk a ``keyword (...)`` group, calling ``spec(row, text)`` per spec."""
        inline = rest[1:].strip()
        if inline.endswith(")") and _paren_balance(inline) < 0:
            for piece in split_top_level(inline[:-1], ";"):
                if piece:
                    spec(row, piece)
            return row + 1
        j = row + 1
        while j < len(self._code):
            text = self._code[j].strip()
            if not text:
                j += 1
                continue
            if text.startswith(")"):
                return j + 1
            j = max(spec(j, text), j + 1)
        self._out.fail(row, self._code[row], f"unterminated {keyword} group")
        return j

    # -- package / import -----------------------------------------------------

    def _package(self, row: int) -> int:
        match = _PACKAGE.match(self._code[row].strip())
        if match:
            self._out.package = match.group(1)
        return row + 1

    def _import(self, row: int) -> int:
        rest = self._code[row].strip()[len("import") :].strip()
        if not rest.startswith("("):
            self._import_spec(row, rest)
            return row + 1
        inner = rest[1:]
        j = row
        while True:
            close = inner.find(")")
            for piece in (inner if close < 0 else inner[:close]).split(";"):
                self._import_spec(j, piece)
            if close >= 0 or j + 1 >= len(self._code):
                return j + 1
            j += 1
            inner = self._code[j].strip()

    def _import_spec(self, row: int, text: str) -> None:
        match = _IMPORT_SPEC.match(text.strip())
        if match:
            self._out.imports.append(Import(path=match.group(2), alias=match.group(1), line=row))

    # -- types ----------------------------------------------------------------

    def _type(self, row: int) -> int:
        rest = self._code[row].strip()[len("type") :].strip()
        if rest.startswith("("):
            return self._grouped(row, rest, "type", self._type_spec)
        return self._type_spec(row, rest)

    def _type_spec(self, row: int, text: str) -> int:
        match = _TYPE_SPEC.match(text)
        if match is None:
            self._out.fail(row, text, "unrecognized type declaration")
            return row + 1
        name, _, alias, body = match.groups()
        name_position = self._position(row, name, self._spec_start(row, "type"))
        if re.match(r"^struct\b", body):
            return self._struct(row, name, name_position)
        if re.match(r"^interface\b", body):
            return self._interface(row, name, name_position)

        depth = _brace_delta(self._masked[row])
        end = self._skip_block(row, depth) if depth > 0 else row + 1
        if not body:
            self._out.fail(row, text, f"type {name} has no underlying type")
            return end
        self._out.type_definitions.append(
            TypeDefinition(
                name=name,
                underlying=parse_type_ref(body),
                is_alias=alias is not None,
                name_position=name_position,
            )
        )
        return end

    def _struct(self, row: int, name: str, name_position: Position) -> int:
        masked = self._masked[row]
        open_at = masked.find("{")
        if open_at < 0:
            self._out.fail(row, self._code[row], f"struct {name} has no body")
            return row + 1

        fields: list[Field] = []
        depth = _brace_delta(masked)
        end = row
        if depth <= 0:
            close_at = masked.rfind("}")
            for piece in split_top_level(self._code[row][open_at + 1 : close_at], ";"):
                fields.extend(self._fields(row, piece))
        else:
            j = row + 1
            end = len(self._code) - 1
            while j < len(self._code):
                delta = _brace_delta(self._masked[j])
                text = self._code[j].strip()
                if depth + delta <= 0:
                    end = j
                    fields.extend(self._fields(j, text[: text.rfind("}")]))
                    break
                if delta > 0:
                    # field whose type is an inline struct or interface literal
                    start, parts, level = j, [text], depth + delta
                    j += 1
                    while j < len(self._code) and level > depth:
                        parts.append(self._code[j].strip())
                        level += _brace_delta(self._masked[j])
                        j += 1
                    fields.extend(self._fields(start, " ".join(parts)))
                    continue
                fields.extend(self._fields(j, text))
                j += 1

        self._out.structs.append(
            Struct(
                name=name,
                fields=fields,
                embedded=[f.type for f in fields if f.embedded],
                name_position=name_position,
                range=SourceRange(
                    start=Position(row=row, column=0),
                    end=Position(row=end, column=len(self._raw[end])),
                ),
            )
        )
        return end + 1

    def _fields(self, row: int, text: str) -> list[Field]:
        text = text.strip().rstrip(";").strip()
        if not text:
            return []
        embedded = _EMBEDDED_FIELD.match(text)
        if embedded:
            pointer, type_text, tag = embedded.groups()
            short = type_text.split(".")[-1]
            position = self._position(row, type_text)
            return [
                Field(
                    name=short,
                    type=parse_type_ref(pointer + type_text),
                    tag=tag,
                    exported=is_exported(short),
                    embedded=True,
                    name_position=position,
                    type_position=position,
                )
            ]
        named = _NAMED_FIELD.match(text)
        if named is None:
            logger.debug("Unrecognized struct field at line %d: %r", row + 1, text)
            return []
        names_text, type_text, tag = named.groups()
        type_ref = parse_type_ref(type_text)
        fields = []
        for field_name in (n.strip() for n in names_text.split(",")):
            name_position = self._position(row, field_name)
            type_start = name_position.column + len(field_name)
            fields.append(
                Field(
                    name=field_name,
                    type=type_ref,
                    tag=tag,
                    exported=is_exported(field_name),
                    name_position=name_position,
                    type_position=self._position(row, _anchor(type_ref), type_start),
                )
            )
        return fields

    def _interface(self, row: int, name: str, name_position: Position) -> int:
        masked = self._masked[row]
        open_at = masked.find("{")
        if open_at < 0:
            self._out.fail(row, self._code[row], f"interface {name} has no body")
            return row + 1

        methods: list[MethodSignature] = []
        embedded: list[str] = []
        depth = _brace_delta(masked)
        end = row
        if depth <= 0:
            close_at = masked.rfind("}")
            for piece in split_top_level(self._code[row][open_at + 1 : close_at], ";"):
                self._interface_element(row, piece, methods, embedded)
        else:
            buffer, buffer_row = "", row
            j = row + 1
            end = len(self._code) - 1
            while j < len(self._code):
                delta = _brace_delta(self._masked[j])
                text = self._code[j].strip()
                if depth + delta <= 0 and text.startswith("}"):
                    end = j
                    break
                if text:
                    if not buffer:
                        buffer_row = j
                    buffer = f"{buffer} {text}".strip()
                    if _paren_balance(buffer) <= 0:
                        self._interface_element(buffer_row, buffer, methods, embedded)
                        buffer = ""
                depth += delta
                j += 1

        self._out.interfaces.append(
            Interface(
                name=name,
                methods=methods,
                embedded=embedded,
                name_position=name_position,
                range=SourceRange(
                    start=Position(row=row, column=0),
                    end=Position(row=end, column=len(self._raw[end])),
                ),
            )
        )
        return end + 1

    def _interface_element(
        self, row: int, text: str, methods: list[MethodSignature], embedded: list[str]
    ) -> None:
        text = text.strip().rstrip(";").strip()
        if not text:
            return
        if _INTERFACE_EMBED.match(text):
            embedded.append(text.lstrip("~"))
            return
        match = _INTERFACE_METHOD.match(text)
        fn = _parse_signature(f"func {text}") if match else None
        if fn is None:
            logger.debug("Skipping interface element at line %d: %r", row + 1, text)
            return
        methods.append(
            MethodSignature(
                name=fn.name,
                parameters=fn.parameters,
                results=fn.results,
                result_names=fn.result_names,
                name_position=self._position(row, fn.name),
            )
        )

    # -- functions ------------------------------------------------------------

    def _func(self, row: int) -> int:
        code_parts: list[str] = []
        masked_parts: list[str] = []
        j = row
        while j < len(self._code):
            code_parts.append(self._code[j])
            masked_parts.append(self._masked[j])
            masked = "\n".join(masked_parts)
            body = _find_body_brace(masked)
            if body >= 0:
                signature = "\n".join(code_parts)[:body]
                depth = 1 + _brace_delta(masked[body + 1 :])
                end = self._skip_block(j, depth) if depth > 0 else j + 1
                break
            if _paren_balance(masked) <= 0 and not masked.rstrip().endswith(","):
                signature = "\n".join(code_parts)
                end = j + 1
                break
            j += 1
        else:
            self._out.fail(row, self._code[row], "unterminated function signature")
            return len(self._code)

        fn = _parse_signature(signature)
        if fn is None:
            self._out.fail(row, self._code[row], "unrecognized function declaration")
            return end
        self._out.functions.append(fn.model_copy(update={"name_position": self._position(row, fn.name, 4)}))
        return end

    # -- var / const ----------------------------------------------------------

    def _values(self, row: int) -> int:
        line = self._code[row].strip()
        keyword = "const" if line.startswith("const") else "var"
        rest = line[len(keyword) :].strip()
        is_const = keyword == "const"

        def spec(spec_row: int, text: str) -> int:
            return self._value_spec(spec_row, text, is_const)

        if rest.startswith("("):
            return self._grouped(row, rest, keyword, spec)
        return spec(row, rest)

    def _value_spec(self, row: int, text: str, is_const: bool) -> int:
        end = row + 1
        masked = self._masked[row]
        if _brace_delta(masked) > 0 or _paren_balance(masked) > 0:
            parts = [text]
            depth = _brace_delta(masked) + _paren_balance(masked)
            while end < len(self._code) and depth > 0:
                parts.append(self._code[end].strip())
                depth += _brace_delta(self._masked[end]) + _paren_balance(self._masked[end])
                end += 1
            text = " ".join(parts)

        match = _VALUE_SPEC.match(text)
        if match is None:
            self._out.fail(row, text, "unrecognized value declaration")
            return end
        names = [n.strip() for n in match.group(1).split(",")]
        remainder = match.group(2).strip()
        type_text, value_text = remainder, ""
        if "=" in remainder:
            type_text, value_text = (part.strip() for part in remainder.split("=", 1))
        values = split_top_level(value_text) if value_text else []
        declared = parse_type_ref(type_text) if type_text else None

        spec_start = self._spec_start(row, "const" if is_const else "var")
        for index, name in enumerate(names):
            if len(values) == len(names):
                value: str | None = values[index]
            else:
                value = value_text or None
            name_position = self._position(row, name, spec_start)
            self._out.add_variable(
                Variable(
                    name=name,
                    type=declared if declared is not None else infer_type_from_value(value),
                    is_const=is_const,
                    exported=is_exported(name),
                    value=value,
                    name_position=name_position,
                    type_position=(
                        self._position(row, _anchor(declared), name_position.column + len(name))
                        if declared is not None
                        else None
                    ),
                )
            )
        return end


def parse_unit(text: str) -> SourceUnit:
    """Parse a whole Go file with the line/brace scanner. Never raises."""
    return _UnitScanner(text).scan()
