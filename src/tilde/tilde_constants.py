"""
Lexical grammar table for the Tilde language.

The scanner walks `TOKEN_SPECS` top to bottom and takes the FIRST pattern that
matches at the cursor. Order is therefore part of the grammar:

    - discarded lexemes (line ends, tabs, whitespace, comments) come first
    - `==` precedes `=` so equality is never lexed as two assignments
    - keywords and boolean literals precede the identifier pattern

Patterns compile with `re.ASCII` (digits, word boundaries); only the
whitespace pattern keeps Unicode `\s`.

Exports:
    - TokenSpec
    - TOKEN_SPECS
    - LITERAL_SUBKINDS, ADDITIVE_OPERATORS, MULTIPLICATIVE_OPERATORS, DECLARATORS
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


def _identity(raw: str) -> Any:
    return raw


def _strip_quotes(raw: str) -> str:
    return raw[1:-1]


@dataclass(frozen=True)
class TokenSpec:
    """One entry of the lexical grammar table.

    Attributes:
        category (str): Broad token class, e.g. "Literal", "Operator", "Keyword".
        subkind (str): Concrete discriminator the parser dispatches on, e.g. "Add".
        pattern (re.Pattern[str]): Matcher applied at the current cursor.
        discard (bool): Recognized but never handed to the parser.
        formatter (Callable[[str], Any]): Raw lexeme -> typed token value.
    """

    category: str
    subkind: str
    pattern: re.Pattern[str]
    discard: bool = False
    formatter: Callable[[str], Any] = field(default=_identity, repr=False)

    def format(self, raw: str) -> Any:
        return self.formatter(raw)


def _spec(
    category: str,
    subkind: str,
    regex: str,
    discard: bool = False,
    formatter: Callable[[str], Any] = _identity,
    flags: int = re.ASCII,
) -> TokenSpec:
    return TokenSpec(category, subkind, re.compile(regex, flags), discard, formatter)


TOKEN_SPECS: tuple[TokenSpec, ...] = (
    # Discarded
    _spec("LineEnd", "LineEnd", r"\r\n|\r|\n", discard=True),
    _spec("Util", "Tab", r"\t", discard=True),
    _spec("WhiteSpace", "WhiteSpace", r"\s+", discard=True, flags=0),
    _spec("Comment", "Block", r"/[\s\S]*?/", discard=True),
    _spec("Comment", "Line", r"#[^\r\n]*", discard=True),
    # Literals
    _spec("Literal", "Number", r"\d+", formatter=int),
    _spec("Literal", "String", r'"[^"]*"', formatter=_strip_quotes),
    _spec("Literal", "Char", r"'[^']*'", formatter=_strip_quotes),
    _spec("Literal", "BoolFalse", r"false", formatter=lambda _: False),
    _spec("Literal", "BoolTrue", r"true", formatter=lambda _: True),
    # Operators
    _spec("Operator", "Add", r"\+"),
    _spec("Operator", "Sub", r"-"),
    _spec("Operator", "Multiply", r"\*"),
    _spec("Operator", "Divide", r"/"),
    _spec("Operator", "Modulo", r"%"),
    _spec("Operator", "Power", r"\^"),
    _spec("Operator", "Equal", r"=="),
    _spec("Operator", "Greater", r">"),
    _spec("Operator", "Less", r"<"),
    _spec("Operator", "And", r"&"),
    _spec("Operator", "Or", r"\|"),
    _spec("Operator", "Not", r"!"),
    _spec("Operator", "Assign", r"="),
    # Delimiters
    _spec("Delimiter", "AssignType", r":"),
    _spec("Delimiter", "Dot", r"\."),
    _spec("Delimiter", "Comma", r","),
    _spec("Delimiter", "{", r"\{"),
    _spec("Delimiter", "}", r"\}"),
    _spec("Delimiter", "(", r"\("),
    _spec("Delimiter", ")", r"\)"),
    # Keywords
    _spec("Keyword", "If", r"if\b"),
    _spec("Keyword", "Else", r"else"),
    _spec("Keyword", "ShortIf", r"\?"),
    # Declarators
    _spec("Declarator", "Let", r"let\b"),
    _spec("Declarator", "Const", r"const\b"),
    # Identifiers: lowercase letters and underscore, at least two characters
    _spec("Identifier", "Variable", r"[a-z_][a-z_]+"),
)

SUBKINDS: frozenset[str] = frozenset(spec.subkind for spec in TOKEN_SPECS)

LITERAL_SUBKINDS: frozenset[str] = frozenset(
    {"Number", "String", "Char", "BoolTrue", "BoolFalse"}
)
ADDITIVE_OPERATORS: frozenset[str] = frozenset({"Add", "Sub"})
MULTIPLICATIVE_OPERATORS: frozenset[str] = frozenset({"Multiply", "Divide"})
DECLARATORS: frozenset[str] = frozenset({"Let", "Const"})

__all__ = [
    "ADDITIVE_OPERATORS",
    "DECLARATORS",
    "LITERAL_SUBKINDS",
    "MULTIPLICATIVE_OPERATORS",
    "SUBKINDS",
    "TOKEN_SPECS",
    "TokenSpec",
]
