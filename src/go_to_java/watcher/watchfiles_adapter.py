import asyncio
import contextlib
import logging
from pathlib import Path

from watchfiles import Change, DefaultFilter, awatch

from go_to_java.core.documents import GO_SUFFIX
from go_to_java.core.ports.watcher import ChangeHandler

logger = logging.getLogger(__name__)


class GoFileFilter(DefaultFilter):
    """Accepts ``.go`` files outside vendored and test-data directories."""

    ignore_dirs = (*DefaultFilter.ignore_dirs, "vendor", "testdata")

    def __call__(self, change: Change, path: str) -> bool:
        return path.endswith(GO_SUFFIX) and super().__call__(change, path)


class WatchfilesWatcher:
    """Watch a directory for Go source changes and trigger callbacks.

    ``on_change`` receives added or modified files, ``on_delete`` removed ones.
    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: ChangeHandler,
        on_delete: ChangeHandler | None = None,
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._on_delete = on_delete
        self._filter = GoFileFilter()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watcher started for %s", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Watcher stopped for %s", self._directory)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory, watch_filter=self._filter):
            await self.dispatch(changes)

    async def dispatch(self, changes: set[tuple[Change, str]]) -> None:
        relevant = {(change, p) for change, p in changes if self._filter(change, p)}
        deleted = {Path(p) for change, p in relevant if change == Change.deleted}
        changed = {Path(p) for change, p in relevant if change != Change.deleted} - deleted
        if changed:
            logger.info("Detected changes in %d Go file(s)", len(changed))
            await self._notify(self._on_change, changed)
        if deleted and self._on_delete is not None:
            logger.info("Detected %d deleted Go file(s)", len(deleted))
            await self._notify(self._on_delete, deleted)

    @staticmethod
    async def _notify(handler: ChangeHandler, paths: set[Path]) -> None:
        try:
            await handler(paths)
        except Exception:
            logger.exception("Error in watcher callback")
