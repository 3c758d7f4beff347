"""Unit tests for cross-file dependency resolution."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from go_to_java.core.cache import ResolutionCache
from go_to_java.core.documents import FileDocumentSource, document_id
from go_to_java.core.parsing import parse_unit
from go_to_java.core.resolver import (
    DependencyResolver,
    collect_type_sites,
    is_stdlib_package,
    resolve_qualified_type,
)
from go_to_java.models import Location, NamedType, Position
from go_to_java.oracle.workspace import WorkspaceOracle


class CountingOracle:
    """Delegates to a real oracle and counts every call."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner
        self.calls = 0
        self.hovers = 0

    async def hover_info(self, document: str, position: Position) -> str | None:
        self.calls += 1
        self.hovers += 1
        return await self.inner.hover_info(document, position)

    async def type_definition_location(self, document: str, position: Position) -> Location | None:
        self.calls += 1
        return await self.inner.type_definition_location(document, position)


class SilentOracle:
    async def hover_info(self, document: str, position: Position) -> str | None:
        await asyncio.sleep(10)
        return None

    async def type_definition_location(self, document: str, position: Position) -> Location | None:
        await asyncio.sleep(10)
        return None


async def _resolver(root: Path, **kwargs: Any) -> tuple[DependencyResolver, CountingOracle]:
    documents = FileDocumentSource()
    workspace = WorkspaceOracle(root, documents)
    await workspace.index()
    oracle = CountingOracle(workspace)
    return DependencyResolver(oracle, documents, ResolutionCache(), **kwargs), oracle


async def _resolve_file(resolver: DependencyResolver, path: Path) -> Any:
    return await resolver.resolve(parse_unit(path.read_text()), document_id(path))


class TestHelpers:
    def test_resolve_qualified_type(self) -> None:
        aliases = {"m": "example.com/app/models"}
        assert resolve_qualified_type(NamedType(package="m", name="User"), aliases) == "example.com/app/models"
        assert resolve_qualified_type(NamedType(package="time", name="Time"), aliases) == "time"
        assert resolve_qualified_type(NamedType(name="User"), aliases) is None

    @pytest.mark.parametrize(
        ("alias", "path", "expected"),
        [
            ("time", "time", True),
            ("json", "encoding/json", True),
            ("yaml", "golang.org/x/yaml", False),
            ("models", "example.com/app/models", False),
            ("models", None, False),
        ],
    )
    def test_is_stdlib_package(self, alias: str, path: str | None, expected: bool) -> None:
        assert is_stdlib_package(alias, path) is expected

    def test_collect_type_sites(self, user_service_source: str) -> None:
        sites = collect_type_sites(parse_unit(user_service_source))
        names = {type_ref.base_name for type_ref, _ in sites}
        assert {"int64", "Time", "Context", "User", "Writer", "Reader", "Duration"} <= names


class TestResolve:
    """Tests for the dependency walk against an indexed workspace."""

    @pytest.mark.asyncio
    async def test_resolves_transitive_external_structs(self, go_workspace: Path) -> None:
        resolver, _ = await _resolver(go_workspace)
        graph = await _resolve_file(resolver, go_workspace / "main.go")

        assert [s.name for s in graph.external_structs] == ["User", "Address"]
        assert graph.external_interfaces == []
        owner = next(n for n in graph.nodes if n.type.base_name == "User")
        assert owner.external
        assert owner.import_path == "example.com/app/models"
        assert owner.struct is not None
        assert [d.type.base_name for d in owner.dependencies] == ["Address"]

    @pytest.mark.asyncio
    async def test_local_types_are_not_external(self, go_workspace: Path) -> None:
        resolver, _ = await _resolver(go_workspace)
        graph = await _resolve_file(resolver, go_workspace / "main.go")
        assert "Client" not in graph.external_type_names()

    @pytest.mark.asyncio
    async def test_max_depth_bounds_the_walk(self, go_workspace: Path) -> None:
        resolver, _ = await _resolver(go_workspace, max_depth=0)
        graph = await _resolve_file(resolver, go_workspace / "main.go")
        assert [s.name for s in graph.external_structs] == ["User"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_depth", [2, 3])
    async def test_cycles_terminate(self, make_workspace: Any, max_depth: int) -> None:
        root = make_workspace(
            {
                "a.go": "package p\n\ntype Node struct {\n    Next *Node\n    Peer Other\n}\n",
                "b.go": "package p\n\ntype Other struct {\n    Back Node\n}\n",
            }
        )
        resolver, _ = await _resolver(root, max_depth=max_depth)
        graph = await _resolve_file(resolver, root / "a.go")
        assert [s.name for s in graph.external_structs] == ["Other"]

    @pytest.mark.asyncio
    async def test_type_reached_under_two_spellings_resolves_once(self, make_workspace: Any) -> None:
        root = make_workspace(
            {
                "main.go": 'package main\n\nimport "example.com/app/models"\n\ntype Server struct {\n'
                "    Owner models.User\n    Team  models.Group\n}\n",
                "models/user.go": "package models\n\ntype User struct {\n    Home Address\n}\n",
                "models/address.go": "package models\n\ntype Address struct {\n    City string\n}\n",
                "models/group.go": "package models\n\ntype Group struct {\n    Lead User\n}\n",
            }
        )
        resolver, oracle = await _resolver(root)
        graph = await _resolve_file(resolver, root / "main.go")

        assert [s.name for s in graph.external_structs] == ["User", "Address", "Group"]
        assert oracle.hovers == 3
        team = next(n for n in graph.nodes if n.type.base_name == "Group")
        (lead,) = team.dependencies
        assert lead.struct is not None
        assert lead.struct.name == "User"
        assert lead.dependencies == []

    @pytest.mark.asyncio
    async def test_stdlib_types_are_skipped(self, make_workspace: Any) -> None:
        root = make_workspace({"main.go": 'package main\n\nimport "time"\n\ntype Job struct {\n    When time.Time\n}\n'})
        resolver, oracle = await _resolver(root)
        graph = await _resolve_file(resolver, root / "main.go")
        assert oracle.calls == 0
        assert graph.nodes == []

    @pytest.mark.asyncio
    async def test_slow_oracle_leaves_types_unresolved(self, go_workspace: Path) -> None:
        resolver = DependencyResolver(SilentOracle(), FileDocumentSource(), timeout=0.01)
        graph = await _resolve_file(resolver, go_workspace / "main.go")
        assert graph.external_structs == []
        assert any(n.type.base_name == "User" and n.struct is None for n in graph.nodes)


class TestCaching:
    @pytest.mark.asyncio
    async def test_repeated_resolution_hits_cache(self, make_workspace: Any) -> None:
        root = make_workspace(
            {
                "main.go": 'package main\n\nimport "example.com/app/models"\n\ntype Server struct {\n'
                "    Owner models.User\n}\n",
                "models/user.go": "package models\n\ntype User struct {\n    Name string\n}\n",
            }
        )
        resolver, oracle = await _resolver(root)
        await _resolve_file(resolver, root / "main.go")
        first = oracle.calls
        assert first > 0

        await _resolve_file(resolver, root / "main.go")
        assert oracle.calls == first

        resolver.invalidate(document_id(root / "main.go"))
        await _resolve_file(resolver, root / "main.go")
        assert oracle.calls > first

    @pytest.mark.asyncio
    async def test_resolve_type_finds_position(self, go_workspace: Path) -> None:
        resolver, _ = await _resolver(go_workspace)
        node = await resolver.resolve_type(
            NamedType(package="models", name="User"), document_id(go_workspace / "main.go")
        )
        assert node is not None
        assert node.struct is not None
        assert node.type.resolution is not None
        assert node.type.resolution.is_struct
        assert node.document == document_id(go_workspace / "models" / "user.go")
