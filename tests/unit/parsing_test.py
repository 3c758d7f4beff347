"""Unit tests for parser strategy selection and cross-strategy agreement."""

from typing import Any

import pytest

from go_to_java.core.parsing import get_strategy, normalize_parser, parse_declaration, parse_unit
from go_to_java.models import MethodSignature, SourceUnit


def _signature_shape(signature: MethodSignature) -> tuple[Any, ...]:
    return (
        signature.name,
        [(p.name, p.type) for p in signature.parameters],
        signature.results,
        signature.result_names,
    )


def _shape(unit: SourceUnit) -> dict[str, Any]:
    """Everything both strategies must agree on; positions are strategy specific."""
    return {
        "package": unit.package,
        "imports": [(i.alias, i.path) for i in unit.imports],
        "structs": [
            (
                s.name,
                [(f.name, f.type, f.tag, f.embedded, f.exported) for f in s.fields],
                [_signature_shape(m) for m in s.methods],
            )
            for s in unit.structs
        ],
        "interfaces": [(i.name, i.embedded, [_signature_shape(m) for m in i.methods]) for i in unit.interfaces],
        "functions": [(_signature_shape(f), f.is_method) for f in unit.functions],
        "variables": [(v.name, v.type, v.value) for v in unit.variables],
        "constants": [(c.name, c.type, c.value) for c in unit.constants],
        "type_definitions": [(t.name, t.underlying, t.is_alias) for t in unit.type_definitions],
    }


class TestNormalizeParser:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("scanner", "scanner"), ("Tree-Sitter", "tree-sitter"), ("treesitter", "tree-sitter"), ("regex", "scanner")],
    )
    def test_aliases(self, name: str, expected: str) -> None:
        assert normalize_parser(name) == expected

    def test_unknown_parser_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported parser"):
            normalize_parser("antlr")

    def test_get_strategy(self) -> None:
        assert get_strategy("scanner").name == "scanner"


class TestStrategiesAgree:
    """Both strategies produce the same Source Model for well-formed Go."""

    def test_user_service(self, user_service_source: str) -> None:
        assert _shape(parse_unit(user_service_source, "scanner")) == _shape(
            parse_unit(user_service_source, "tree-sitter")
        )

    def test_grouped_declarations(self) -> None:
        source = """package geo

import (
    "fmt"
    m "example.com/app/models"
)

type (
    Celsius float64
    Span = time.Duration
)

const (
    Pi     = 3.14159
    Prefix = "geo"
)

type Shape interface {
    fmt.Stringer
    Area() float64
    Owner() (m.User, bool)
}

type Circle struct {
    Radius, Scale float64
    *m.User
}

func (c Circle) Area() float64 { return 0 }
"""
        assert _shape(parse_unit(source, "scanner")) == _shape(parse_unit(source, "tree-sitter"))

    def test_single_declaration(self) -> None:
        text = "func Fetch(ctx context.Context, ids ...int64) (map[int64]*User, error)"
        scanned = parse_declaration(text, "scanner")
        tree = parse_declaration(text, "tree-sitter")
        assert scanned is not None
        assert tree is not None
        assert _signature_shape(scanned) == _signature_shape(tree)


class TestIdempotence:
    """Parsing the same text twice yields equal units."""

    @pytest.mark.parametrize("parser", ["scanner", "tree-sitter"])
    def test_parse_unit_twice(self, parser: str, user_service_source: str) -> None:
        assert parse_unit(user_service_source, parser) == parse_unit(user_service_source, parser)

    @pytest.mark.parametrize("parser", ["scanner", "tree-sitter"])
    def test_parse_declaration_twice(self, parser: str) -> None:
        text = "func Split(s string, sep ...rune) ([]string, error)"
        assert parse_declaration(text, parser) == parse_declaration(text, parser)
