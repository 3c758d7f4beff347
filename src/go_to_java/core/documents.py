import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

GO_SUFFIX = ".go"
SNIPPET_SCHEME = "untitled"

_SKIPPED_DIRECTORIES = frozenset({"vendor", "testdata", "node_modules"})


def document_id(path: str | Path) -> str:
    """Stable identifier for a file: its absolute ``file://`` URI."""
    return Path(path).resolve().as_uri()


def snippet_id(name: str = "snippet") -> str:
    return f"{SNIPPET_SCHEME}:{name}{GO_SUFFIX}"


def document_path(document: str) -> Path | None:
    """Filesystem path behind a ``file://`` identifier, ``None`` for other schemes."""
    parsed = urlparse(document)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def is_go_file(path: Path) -> bool:
    return path.suffix == GO_SUFFIX


def iter_go_files(root: Path) -> Iterator[Path]:
    for path in sorted(root.rglob(f"*{GO_SUFFIX}")):
        relative = path.relative_to(root).parts[:-1]
        if any(part.startswith(".") or part in _SKIPPED_DIRECTORIES for part in relative):
            continue
        if path.is_file():
            yield path


class FileDocumentSource:
    """Reads documents from open in-memory buffers, falling back to disk.

    Implements the ``DocumentSource`` protocol.
    """

    def __init__(self) -> None:
        self._buffers: dict[str, str] = {}

    def open(self, document: str, text: str) -> None:
        self._buffers[document] = text

    def close(self, document: str) -> None:
        self._buffers.pop(document, None)

    def is_open(self, document: str) -> bool:
        return document in self._buffers

    async def read_text(self, document: str) -> str:
        if document in self._buffers:
            return self._buffers[document]
        path = document_path(document)
        if path is None:
            raise FileNotFoundError(f"Document not open and not on disk: {document}")
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
