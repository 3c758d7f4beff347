from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, Protocol

ChangeHandler = Callable[[set[Path]], Coroutine[Any, Any, None]]


class FileWatcherPort(Protocol):
    @property
    def running(self) -> bool: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
