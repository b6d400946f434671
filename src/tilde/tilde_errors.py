"""
Fatal error types raised while scanning or parsing Tilde source.

Both kinds abort immediately; there is no recovery and no partial tree. They
derive from the builtin `SyntaxError` so callers can treat any malformed source
uniformly, and they carry plain structured data (no terminal formatting) so a
harness can render them however it likes.

Classes:
    TildeError: Common base, adds `to_dict()`.
    LexError: No token pattern matches at the cursor.
    ParseError: A grammar rule's expectation was violated.
"""

from typing import Any

END_OF_INPUT = "end of input"


class TildeError(SyntaxError):
    """Base class for all Tilde front-end errors.

    Attributes:
        message (str): Human readable description, including the position.
        line (int): 1-based line of the offending position.
        column (int): 1-based column of the offending position.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }


class LexError(TildeError):
    """Raised when no pattern in the token table matches the remaining input.

    Attributes:
        char (str): The offending character.
        position (int): Character offset of `char` in the source.
    """

    def __init__(self, char: str, position: int, line: int, column: int) -> None:
        super().__init__(
            f"Unexpected character {char!r} at line {line}, column {column}",
            line,
            column,
        )
        self.char = char
        self.position = position

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(char=self.char, position=self.position)
        return data


class ParseError(TildeError):
    """Raised when the token stream does not fit the grammar.

    Attributes:
        rule (str): Name of the grammar rule that failed, e.g. "IfStatement".
        description (str): What went wrong, without the position suffix.
        expected (str | None): Expected token subkind or node shape, if any.
        actual (str): Actual token subkind, node type, or "end of input".
    """

    def __init__(
        self,
        rule: str,
        description: str,
        actual: str,
        line: int,
        column: int,
        expected: str | None = None,
    ) -> None:
        super().__init__(
            f"[{rule}] {description} at line {line}, column {column}", line, column
        )
        self.rule = rule
        self.description = description
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(rule=self.rule, expected=self.expected, actual=self.actual)
        return data


__all__ = ["END_OF_INPUT", "LexError", "ParseError", "TildeError"]
