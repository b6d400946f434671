"""
Defines the abstract syntax tree (AST) produced by the Tilde parser.

Every node is a small dataclass owning its children by value, so two trees
compare equal exactly when they have the same structure. `to_dict()` renders a
JSON-ready tree in which each node carries a `"type"` discriminator naming its
class.

Classes:
    ASTNode: Base class providing `type` and `to_dict()`.
    Program, IfStatement, BlockStatement, VariableDeclaration,
    VariableDeclarator, ExpressionStatement: statement-level nodes.
    AssignmentExpression, BinaryExpression, Identifier, Literal: expressions.

Example:
    >>> Literal("Number", 2).to_dict()
    {'type': 'Literal', 'kind': 'Number', 'value': 2}
"""

from dataclasses import dataclass, field, fields
from typing import Any, Union

ASTDict = dict[str, Any]


class ASTNode:
    """Base class for all AST nodes."""

    @property
    def type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> ASTDict:
        data: ASTDict = {"type": self.type}
        for f in fields(self):  # type: ignore[arg-type]
            data[f.name] = _to_plain(getattr(self, f.name))
        return data


def _to_plain(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


@dataclass
class Identifier(ASTNode):
    name: str


@dataclass
class Literal(ASTNode):
    """A literal value; `kind` is the token subkind (Number, String, Char, BoolTrue, BoolFalse)."""

    kind: str
    value: Any


@dataclass
class BinaryExpression(ASTNode):
    operator: str
    left: "Expression"
    right: "Expression"


@dataclass
class AssignmentExpression(ASTNode):
    left: Identifier
    right: "Expression"
    operator: str = "="


Expression = Union[AssignmentExpression, BinaryExpression, Identifier, Literal]


@dataclass
class ExpressionStatement(ASTNode):
    expression: Expression


@dataclass
class VariableDeclarator(ASTNode):
    id: Identifier
    init: Expression | None = None


@dataclass
class VariableDeclaration(ASTNode):
    """A `let`/`const` statement; `kind` is "Let" or "Const"."""

    kind: str
    declarations: list[VariableDeclarator] = field(default_factory=list)


@dataclass
class BlockStatement(ASTNode):
    body: list["Statement"] = field(default_factory=list)


@dataclass
class IfStatement(ASTNode):
    test: Expression
    consequent: "Statement"
    alternate: "Statement | None" = None


Statement = Union[
    IfStatement, BlockStatement, VariableDeclaration, ExpressionStatement
]


@dataclass
class Program(ASTNode):
    body: list[Statement] = field(default_factory=list)


__all__ = [
    "ASTDict",
    "ASTNode",
    "AssignmentExpression",
    "BinaryExpression",
    "BlockStatement",
    "Expression",
    "ExpressionStatement",
    "Identifier",
    "IfStatement",
    "Literal",
    "Program",
    "Statement",
    "VariableDeclaration",
    "VariableDeclarator",
]
