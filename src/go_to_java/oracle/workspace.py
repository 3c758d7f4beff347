"""Offline semantic oracle backed by a tree-sitter index of a Go workspace.

Answers the two questions the resolver asks (hover and type definition) for
type names, without a running language server. Qualified identifiers are
resolved through the document's imports and the ``go.mod`` module path.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node, QueryCursor

from go_to_java.core.documents import FileDocumentSource, document_id, document_path, iter_go_files
from go_to_java.core.ports.oracle import DocumentSource
from go_to_java.core.syntax_tree import load_query, parse_tree
from go_to_java.core.syntax_tree import parse_unit as parse_syntax_tree
from go_to_java.core.typemap import build_import_alias_map
from go_to_java.models import Location, Position

logger = logging.getLogger(__name__)

_MODULE_LINE = re.compile(r"^module\s+(\S+)", re.MULTILINE)
_WORD = re.compile(r"\w")


@dataclass(frozen=True)
class TypeEntry:
    name: str
    kind: str
    document: str
    package: str
    position: Position
    signature: str

    @property
    def directory(self) -> Path | None:
        path = document_path(self.document)
        return path.parent if path is not None else None


def _token_at(text: str, position: Position) -> tuple[str | None, str] | None:
    """``(package, name)`` of the identifier under ``position``.

    The cursor may sit on either half of ``pkg.Name``.
    """
    lines = text.splitlines()
    if position.row >= len(lines):
        return None
    line = lines[position.row]
    column = min(position.column, len(line) - 1)
    if column < 0 or not _WORD.match(line[column]):
        return None
    start = column
    while start > 0 and _WORD.match(line[start - 1]):
        start -= 1
    end = column
    while end < len(line) and _WORD.match(line[end]):
        end += 1
    word = line[start:end]

    if start > 1 and line[start - 1] == ".":
        before = start - 1
        pkg_start = before
        while pkg_start > 0 and _WORD.match(line[pkg_start - 1]):
            pkg_start -= 1
        if pkg_start < before:
            return line[pkg_start:before], word
    if end < len(line) and line[end] == ".":
        follow = re.match(r"\w+", line[end + 1 :])
        if follow:
            return word, follow.group(0)
    return None, word


class WorkspaceOracle:
    """Implements the ``SemanticOracle`` protocol over a directory of Go files."""

    def __init__(self, root: str | Path, documents: DocumentSource | None = None) -> None:
        self.root = Path(root).resolve()
        self.documents = documents if documents is not None else FileDocumentSource()
        self._query = load_query("types")
        self._entries: dict[str, list[TypeEntry]] = {}
        self._stale: set[str] = set()
        self._indexed = False
        self.module_path = self._read_module_path()

    def _read_module_path(self) -> str | None:
        go_mod = self.root / "go.mod"
        if not go_mod.exists():
            return None
        match = _MODULE_LINE.search(go_mod.read_text(encoding="utf-8"))
        return match.group(1) if match else None

    # -- indexing -------------------------------------------------------------

    async def index(self) -> int:
        """Index every Go file under the root. Returns the number of types found."""
        for path in iter_go_files(self.root):
            await self.index_document(document_id(path))
        self._indexed = True
        return sum(len(entries) for entries in self._entries.values())

    async def index_document(self, document: str) -> list[TypeEntry]:
        try:
            text = await self.documents.read_text(document)
        except (OSError, UnicodeDecodeError):
            logger.debug("Could not read %s for indexing", document, exc_info=True)
            self._entries.pop(document, None)
            return []
        entries = self.extract(document, text)
        self._entries[document] = entries
        self._stale.discard(document)
        return entries

    def extract(self, document: str, text: str) -> list[TypeEntry]:
        source = text.encode("utf-8")
        root = parse_tree(text)
        package = ""
        found: dict[int, tuple[str, Node, Node]] = {}
        for _, captures in QueryCursor(self._query).matches(root):
            if "def.package.name" in captures:
                node = captures["def.package.name"][0]
                package = source[node.start_byte : node.end_byte].decode("utf-8")
                continue
            name_node = captures["def.type.name"][0]
            kind = next(k for k in ("def.struct", "def.interface", "def.type") if k in captures)
            # struct/interface matches also satisfy the generic pattern; keep the specific one
            if name_node.start_byte in found and kind == "def.type":
                continue
            found[name_node.start_byte] = (kind.removeprefix("def."), name_node, captures[kind][0])

        return [
            TypeEntry(
                name=source[name_node.start_byte : name_node.end_byte].decode("utf-8"),
                kind=kind,
                document=document,
                package=package,
                position=Position(row=name_node.start_point[0], column=name_node.start_point[1]),
                signature="type " + source[spec.start_byte : spec.end_byte].decode("utf-8"),
            )
            for kind, name_node, spec in found.values()
        ]

    def invalidate(self, document: str) -> None:
        """Forget a document; it is re-read on the next lookup if it still exists."""
        self._entries.pop(document, None)
        self._stale.add(document)

    async def _ensure_index(self) -> None:
        if not self._indexed:
            await self.index()
        for document in list(self._stale):
            path = document_path(document)
            if path is None or path.exists() or self._is_open(document):
                await self.index_document(document)
            else:
                self._stale.discard(document)

    def _is_open(self, document: str) -> bool:
        is_open = getattr(self.documents, "is_open", None)
        return bool(is_open and is_open(document))

    def entries(self) -> list[TypeEntry]:
        return [entry for entries in self._entries.values() for entry in entries]

    # -- lookups --------------------------------------------------------------

    def _package_directory(self, import_path: str) -> Path | None:
        if self.module_path is None:
            return None
        if import_path == self.module_path:
            return self.root
        prefix = self.module_path + "/"
        if import_path.startswith(prefix):
            return self.root / import_path[len(prefix) :]
        return None

    async def lookup(self, document: str, position: Position) -> TypeEntry | None:
        await self._ensure_index()
        text = await self.documents.read_text(document)
        token = _token_at(text, position)
        if token is None:
            return None
        package, name = token
        candidates = [e for e in self.entries() if e.name == name]
        if not candidates:
            return None

        if package is None:
            same_document = [e for e in candidates if e.document == document]
            if same_document:
                return same_document[0]
            path = document_path(document)
            if path is None:
                # snippets belong to no package
                return candidates[0]
            same_package = [e for e in candidates if e.directory == path.parent]
            return same_package[0] if same_package else None

        aliases = build_import_alias_map(parse_syntax_tree(text).imports)
        import_path = aliases.get(package)
        directory = self._package_directory(import_path) if import_path else None
        if directory is not None:
            in_directory = [e for e in candidates if e.directory == directory.resolve()]
            if in_directory:
                return in_directory[0]
        by_package = [e for e in candidates if e.package == package]
        return by_package[0] if by_package else None

    async def type_definition_location(self, document: str, position: Position) -> Location | None:
        entry = await self.lookup(document, position)
        if entry is None:
            return None
        return Location(document=entry.document, position=entry.position)

    async def hover_info(self, document: str, position: Position) -> str | None:
        entry = await self.lookup(document, position)
        if entry is None:
            return None
        return f"```go\n{entry.signature}\n```"
