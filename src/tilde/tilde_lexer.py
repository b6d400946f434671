"""
Lexical analyzer for the Tilde language.

This module turns raw source text into positioned tokens, one at a time, on
demand of the parser.

Classes:
    Token: A classified lexeme with its typed value and source location.
    Scanner: Stateful cursor over the source; first-match scan of `TOKEN_SPECS`.

Features:
    - First-match (not longest-match) recognition; table order decides ties
    - Transparently skips whitespace, line ends, `# line` and `/ block /` comments
    - Tracks offset, line and column of the first character of every lexeme

Raises:
    LexError: If no pattern matches at the cursor.

Example:
    >>> scanner = Scanner()
    >>> scanner.init("let answer = 42")
    >>> scanner.next_token()
    Token(Let, 'let')

Exports:
    - Token
    - Scanner
    - tokenize
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from tilde.tilde_constants import TOKEN_SPECS, TokenSpec
from tilde.tilde_errors import LexError

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    Attributes:
        category (str): Token class from the grammar table, e.g. "Operator".
        subkind (str): Concrete kind, e.g. "Add", "Variable", "(".
        value (Any): Formatted value (int for numbers, unquoted text for strings).
        raw (str): Exact matched substring.
        start (int): Offset of the first character.
        end (int): Offset one past the last character.
        line (int): 1-based line of the first character.
        column (int): 1-based column of the first character.
        discard (bool): True for whitespace and comments.
    """

    category: str
    subkind: str
    value: Any
    raw: str
    start: int
    end: int
    line: int
    column: int
    discard: bool = False

    def __repr__(self) -> str:
        return f"Token({self.subkind}, {self.value!r})"


class Scanner:
    """Produces tokens from a source string, skipping discarded lexemes.

    A scanner is reusable: `init()` resets it for a new source. It is not safe
    to share one instance between threads; the token table itself is immutable.
    """

    def __init__(self, specs: tuple[TokenSpec, ...] = TOKEN_SPECS) -> None:
        self._specs = specs
        self.init("")

    def init(self, source: str) -> None:
        """Resets the scan position to the start of `source`."""
        self._source = source
        self._cursor = 0
        self._line = 1
        self._column = 1
        logger.debug("Scanner initialized with %d characters", len(source))

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def line(self) -> int:
        return self._line

    @property
    def column(self) -> int:
        return self._column

    def is_eof(self) -> bool:
        return self._cursor >= len(self._source)

    def has_more_tokens(self) -> bool:
        return self._cursor < len(self._source)

    def next_token(self) -> Token | None:
        """Returns the next non-discarded token, or None at end of input.

        Raises:
            LexError: If no token pattern matches at the cursor.
        """
        while self.has_more_tokens():
            token = self._scan()
            if not token.discard:
                return token
        return None

    def scan(self, include_discarded: bool = False) -> Iterator[Token]:
        """Yields every remaining token; discarded lexemes only if requested."""
        while self.has_more_tokens():
            token = self._scan()
            if include_discarded or not token.discard:
                yield token

    def _scan(self) -> Token:
        for spec in self._specs:
            match = spec.pattern.match(self._source, self._cursor)
            # empty matches would never advance the cursor
            if match is None or match.end() == self._cursor:
                continue
            raw = match.group(0)
            token = Token(
                category=spec.category,
                subkind=spec.subkind,
                value=spec.format(raw),
                raw=raw,
                start=self._cursor,
                end=match.end(),
                line=self._line,
                column=self._column,
                discard=spec.discard,
            )
            self._advance(raw)
            return token

        raise LexError(
            self._source[self._cursor], self._cursor, self._line, self._column
        )

    def _advance(self, raw: str) -> None:
        breaks = list(_LINE_BREAK.finditer(raw))
        if breaks:
            self._line += len(breaks)
            self._column = len(raw) - breaks[-1].end() + 1
        else:
            self._column += len(raw)
        self._cursor += len(raw)


def tokenize(source: str, include_discarded: bool = False) -> list[Token]:
    """Scans `source` completely and returns its tokens as a list."""
    scanner = Scanner()
    scanner.init(source)
    return list(scanner.scan(include_discarded=include_discarded))


__all__ = ["Scanner", "Token", "tokenize"]
