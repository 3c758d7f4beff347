"""Shared fixtures and helpers for tests."""

from pathlib import Path
from typing import Any

import pytest
from tree_sitter import Language, Parser, Query
from tree_sitter_language_pack import get_language, get_parser

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Go sources
# ---------------------------------------------------------------------------

USER_SERVICE_SOURCE = """\
package service

import (
    "context"
    "io"
    "time"
)

const MaxRetries = 3

var DefaultTimeout time.Duration

type User struct {
    ID        int64             `json:"id"`
    Name      string            `json:"name"`
    Tags      []string
    Meta      map[string]int
    CreatedAt time.Time
}

type Store interface {
    Get(ctx context.Context, id int64) (*User, error)
    Save(u *User) error
}

func (u *User) Validate() error {
    return nil
}

func Divide(a, b float64) (float64, error) {
    if b == 0 {
        return 0, nil
    }
    return a / b, nil
}

func Copy(dst io.Writer, src io.Reader) (written int64, err error) {
    return 0, nil
}
"""


def _write_workspace(root: Path, files: dict[str, str], module: str | None = "example.com/app") -> Path:
    """Lay out a Go module under ``root``; returns ``root``."""
    if module is not None:
        (root / "go.mod").write_text(f"module {module}\n\ngo 1.22\n", encoding="utf-8")
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def queries_dir() -> Path:
    """Return the path to the queries directory."""
    return _REPO_ROOT / "src" / "go_to_java" / "queries"


@pytest.fixture
def go_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return get_parser("go")


@pytest.fixture
def go_language() -> Language:
    """Return the tree-sitter Go language."""
    return get_language("go")


@pytest.fixture
def go_types_query(queries_dir: Path, go_language: Any) -> Query:
    """Load the Go type index query."""
    query_text = (queries_dir / "go_types.scm").read_text()
    return Query(go_language, query_text)


@pytest.fixture
def user_service_source() -> str:
    return USER_SERVICE_SOURCE


@pytest.fixture
def go_workspace(tmp_path: Path) -> Path:
    """A module with a root package importing a sibling ``models`` package."""
    return _write_workspace(
        tmp_path,
        {
            "main.go": """\
package main

import "example.com/app/models"

type Server struct {
    Owner   models.User
    Clients []*Client
}

type Client struct {
    Addr string
}
""",
            "models/user.go": """\
package models

type User struct {
    Name    string
    Address Address
}
""",
            "models/address.go": """\
package models

type Address struct {
    Street string
    City   string
}

type Locator interface {
    Locate(a Address) (float64, float64, error)
}
""",
        },
    )


@pytest.fixture
def make_workspace(tmp_path: Path) -> Any:
    """Factory writing ``{relative path: source}`` files (plus ``go.mod``) under ``tmp_path``."""

    def _make(files: dict[str, str], module: str | None = "example.com/app") -> Path:
        return _write_workspace(tmp_path, files, module)

    return _make
