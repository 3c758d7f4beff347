from typing import Protocol

from go_to_java.models import Location, Position


class SemanticOracle(Protocol):
    """Answers "what is at this position" questions, e.g. a gopls client.

    Implementations may be slow or absent; callers bound every call with a
    deadline and treat ``None`` as "no information".
    """

    async def hover_info(self, document: str, position: Position) -> str | None: ...

    async def type_definition_location(self, document: str, position: Position) -> Location | None: ...


class DocumentSource(Protocol):
    async def read_text(self, document: str) -> str: ...
