from collections.abc import Callable
from typing import Literal, NamedTuple, cast

from go_to_java.core import scanner, syntax_tree
from go_to_java.models import Function, SourceUnit

ParserName = Literal["scanner", "tree-sitter"]


class ParserStrategy(NamedTuple):
    name: ParserName
    parse_unit: Callable[[str], SourceUnit]
    parse_declaration: Callable[[str], Function | None]


_STRATEGIES: dict[str, ParserStrategy] = {
    "scanner": ParserStrategy("scanner", scanner.parse_unit, scanner.parse_declaration),
    "tree-sitter": ParserStrategy("tree-sitter", syntax_tree.parse_unit, syntax_tree.parse_declaration),
}

_ALIASES = {
    "line": "scanner",
    "regex": "scanner",
    "scanner": "scanner",
    "grammar": "tree-sitter",
    "tree-sitter": "tree-sitter",
    "treesitter": "tree-sitter",
    "tree_sitter": "tree-sitter",
}


def normalize_parser(name: str) -> ParserName:
    normalized = name.strip().lower()
    resolved = _ALIASES.get(normalized)
    if resolved is None:
        raise ValueError(f"Unsupported parser '{name}'. Supported: {sorted(_STRATEGIES)}")
    return cast(ParserName, resolved)


def get_strategy(name: str) -> ParserStrategy:
    return _STRATEGIES[normalize_parser(name)]


def parse_unit(text: str, parser: str = "tree-sitter") -> SourceUnit:
    return get_strategy(parser).parse_unit(text)


def parse_declaration(text: str, parser: str = "scanner") -> Function | None:
    return get_strategy(parser).parse_declaration(text)
