import asyncio
import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

from go_to_java.core.ports.oracle import DocumentSource, SemanticOracle
from go_to_java.models import Location, Position

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 1.0

_CODE_BLOCK = re.compile(r"```go\n(.*?)```", re.DOTALL)
_INTERFACE_SIGNATURE = re.compile(r"^type\s+\w+\s+interface\s*\{")
_STRUCT_SIGNATURE = re.compile(r"^type\s+\w+\s+struct\s*\{")
_FUNCTION_SIGNATURE = re.compile(r"^func\s")
_PACKAGE_QUALIFIER = re.compile(r"([a-z][a-z0-9_]*)\.\w+", re.IGNORECASE)
_TYPE_DECLARATION = re.compile(r"^type\s+(\w+)")
_QUALIFIED_NAME = re.compile(r"(\w+)\.(\w+)")
_LEADING_NAME = re.compile(r"^(\w+)")


@dataclass(frozen=True)
class HoverInfo:
    signature: str
    is_interface: bool = False
    is_struct: bool = False
    is_function: bool = False
    package_path: str | None = None
    documentation: str | None = None


def parse_hover_content(content: str) -> HoverInfo:
    """Parse gopls-style hover markdown: a fenced ``go`` block plus documentation."""
    block = _CODE_BLOCK.search(content)
    lines = content.strip().splitlines()
    signature = block.group(1).strip() if block else (lines[0].strip() if lines else "")

    qualifier = _PACKAGE_QUALIFIER.search(signature)
    documentation = None
    if block:
        tail = content.split("```")[-1].strip()
        if tail and not tail.startswith("go"):
            documentation = tail

    return HoverInfo(
        signature=signature,
        is_interface=bool(_INTERFACE_SIGNATURE.match(signature)) or "interface {" in signature,
        is_struct=bool(_STRUCT_SIGNATURE.match(signature)) or "struct {" in signature,
        is_function=bool(_FUNCTION_SIGNATURE.match(signature)),
        package_path=qualifier.group(1) if qualifier else None,
        documentation=documentation,
    )


def extract_type_name(signature: str) -> str | None:
    """``type Foo struct {...}`` → ``Foo``; ``field r io.Reader`` → ``Reader``."""
    declared = _TYPE_DECLARATION.match(signature)
    if declared:
        return declared.group(1)
    qualified = _QUALIFIED_NAME.search(signature)
    if qualified:
        return qualified.group(2)
    leading = _LEADING_NAME.match(signature)
    return leading.group(1) if leading else None


async def with_deadline(awaitable: Awaitable[T], timeout: float, description: str) -> T | None:
    """Await with a deadline; timeouts and failures become ``None``.

    A timed-out call is cancelled and its late result discarded. Nothing is
    retried.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except TimeoutError:
        logger.debug("%s timed out after %.2fs", description, timeout)
    except Exception as exc:
        logger.debug("%s failed: %s", description, exc)
    return None


class OracleClient:
    """Deadline-bounded access to an oracle and a document source."""

    def __init__(
        self,
        oracle: SemanticOracle,
        documents: DocumentSource,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.oracle = oracle
        self.documents = documents
        self.timeout = timeout

    async def hover(self, document: str, position: Position) -> HoverInfo | None:
        content = await with_deadline(
            self.oracle.hover_info(document, position), self.timeout, f"hover {document}:{position.row}"
        )
        return parse_hover_content(content) if content else None

    async def definition(self, document: str, position: Position) -> Location | None:
        return await with_deadline(
            self.oracle.type_definition_location(document, position),
            self.timeout,
            f"type definition {document}:{position.row}",
        )

    async def read_text(self, document: str) -> str | None:
        return await with_deadline(self.documents.read_text(document), self.timeout, f"read {document}")
