import logging
from dataclasses import dataclass
from pathlib import Path

from go_to_java.config import Settings, load_settings
from go_to_java.core.cache import ResolutionCache
from go_to_java.core.documents import FileDocumentSource, document_id, iter_go_files
from go_to_java.core.generator import (
    DEFAULT_CLASS_NAME,
    generate_function_class,
    generate_method,
    generate_unit,
    unit_class_name,
)
from go_to_java.core.naming import upper_camel
from go_to_java.core.parsing import parse_declaration, parse_unit
from go_to_java.core.resolver import DependencyResolver
from go_to_java.models import DependencyGraph, SourceUnit
from go_to_java.oracle.workspace import WorkspaceOracle

logger = logging.getLogger(__name__)

NO_DECLARATIONS = "no recognizable Go declarations found"
NO_FUNCTION = "no Go function declaration found"


@dataclass
class TranslationResult:
    java: str
    unit: SourceUnit
    class_name: str = DEFAULT_CLASS_NAME
    graph: DependencyGraph | None = None
    ok: bool = True
    error: str | None = None


def _build_resolver(
    oracle: WorkspaceOracle,
    documents: FileDocumentSource,
    cache: ResolutionCache,
    settings: Settings,
) -> DependencyResolver:
    return DependencyResolver(
        oracle,
        documents,
        cache,
        max_depth=settings.max_depth,
        resolve_stdlib=settings.resolve_stdlib,
        timeout=settings.oracle_timeout,
        parser=settings.parser,
    )


async def create_resolver(
    root: str | Path,
    settings: Settings,
    documents: FileDocumentSource | None = None,
    cache: ResolutionCache | None = None,
) -> DependencyResolver:
    """Resolver over the workspace oracle for ``root``, with its index built.

    The index is built up front so no oracle call pays for it under the
    per-call deadline.
    """
    documents = documents if documents is not None else FileDocumentSource()
    oracle = WorkspaceOracle(root, documents)
    count = await oracle.index()
    logger.debug("Indexed %d Go type(s) under %s", count, oracle.root)
    return _build_resolver(oracle, documents, cache or ResolutionCache(settings.cache_ttl), settings)


async def run_translation(
    code: str,
    settings: Settings | None = None,
    document: str | None = None,
    resolver: DependencyResolver | None = None,
    class_name: str | None = None,
) -> TranslationResult:
    """Parse Go source, optionally resolve its dependencies, and render Java.

    Resolution runs only when a resolver and the document the code belongs
    to are both given and ``use_resolver`` is on.
    """
    settings = settings or load_settings()
    options = settings.generation_options(class_name)
    unit = parse_unit(code, settings.parser)
    if unit.is_empty:
        logger.warning("Translation produced no declarations (%d parse failure(s))", len(unit.failures))
        return TranslationResult(
            java=generate_unit(unit, options=options),
            unit=unit,
            class_name=unit_class_name(unit, options),
            ok=False,
            error=NO_DECLARATIONS,
        )

    graph = None
    if resolver is not None and document is not None and settings.use_resolver:
        graph = await resolver.resolve(unit, document, settings.max_depth)
    return TranslationResult(
        java=generate_unit(unit, graph, options),
        unit=unit,
        class_name=unit_class_name(unit, options, graph),
        graph=graph,
    )


async def translate_file(
    path: str | Path,
    settings: Settings | None = None,
    workspace: str | Path | None = None,
    class_name: str | None = None,
    resolver: DependencyResolver | None = None,
) -> TranslationResult:
    """Translate a Go file, resolving types against ``workspace`` (default: its directory)."""
    settings = settings or load_settings()
    file_path = Path(path)
    code = file_path.read_text(encoding="utf-8")
    if resolver is None and settings.use_resolver:
        resolver = await create_resolver(workspace or file_path.parent, settings)
    return await run_translation(code, settings, document_id(file_path), resolver, class_name)


def translate_function(
    code: str,
    settings: Settings | None = None,
    method_only: bool = False,
    class_name: str | None = None,
) -> TranslationResult:
    """Translate a single ``func`` declaration, as a bare method or a standalone class."""
    settings = settings or load_settings()
    options = settings.generation_options(class_name)
    function = parse_declaration(code, settings.parser)
    if function is None:
        return TranslationResult(java="", unit=SourceUnit(), ok=False, error=NO_FUNCTION)
    unit = SourceUnit(functions=[function])
    java = generate_method(function, options) if method_only else generate_function_class(function, options)
    return TranslationResult(java=java, unit=unit, class_name=class_name or DEFAULT_CLASS_NAME)


class TreeTranslator:
    """Mirrors every Go file under ``root`` as a Java file under ``out``.

    One document source, cache and workspace index are shared by all files so
    re-translating after an edit only re-reads what changed.
    """

    def __init__(self, root: str | Path, out: str | Path, settings: Settings | None = None) -> None:
        self.root = Path(root).resolve()
        self.out = Path(out)
        self.settings = settings or load_settings()
        self.documents = FileDocumentSource()
        self.cache = ResolutionCache(self.settings.cache_ttl)
        self.oracle = WorkspaceOracle(self.root, self.documents)
        self.resolver = _build_resolver(self.oracle, self.documents, self.cache, self.settings)
        self.outputs: dict[Path, Path] = {}

    def output_path(self, path: Path, class_name: str | None = None) -> Path:
        """``out`` mirror of ``path``; the file is named after its public class."""
        relative = path.resolve().relative_to(self.root)
        return self.out / relative.parent / f"{class_name or upper_camel(path.stem)}.java"

    async def translate_all(self) -> dict[Path, TranslationResult]:
        await self.oracle.index()
        return {path: await self.translate(path) for path in iter_go_files(self.root)}

    async def translate(self, path: Path) -> TranslationResult:
        document = document_id(path)
        code = await self.documents.read_text(document)
        resolver = self.resolver if self.settings.use_resolver else None
        result = await run_translation(code, self.settings, document, resolver, upper_camel(path.stem))
        target = self.output_path(path, result.class_name)
        previous = self.outputs.get(path.resolve())
        if previous is not None and previous != target:
            previous.unlink(missing_ok=True)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.java, encoding="utf-8")
        self.outputs[path.resolve()] = target
        logger.info("Translated %s -> %s", path, target)
        return result

    def invalidate(self, path: Path) -> None:
        document = document_id(path)
        self.oracle.invalidate(document)
        self.resolver.invalidate(document)

    async def on_change(self, paths: set[Path]) -> None:
        """Invalidate edited files, then re-translate the whole tree.

        Other files may embed types declared in the edited ones.
        """
        for path in paths:
            self.invalidate(path)
        # definition answers cached for other documents may point into the edited ones
        self.cache.queries.clear()
        for path in iter_go_files(self.root):
            await self.translate(path)

    async def on_delete(self, paths: set[Path]) -> None:
        for path in paths:
            self.invalidate(path)
            target = self.outputs.pop(path.resolve(), None) or self.output_path(path)
            target.unlink(missing_ok=True)
        self.cache.queries.clear()
        for path in iter_go_files(self.root):
            await self.translate(path)
