"""
Tilde Language Parser

Recursive-descent parser turning Tilde source text into an AST. Each grammar
rule is a method that consumes exactly the tokens of its production and
returns an `ASTNode`; the parser holds a single token of lookahead pulled on
demand from a `Scanner`.

Grammar
-------
    Program                  := StatementList
    StatementList(stop)      := Statement*            (until end of input or `stop`)
    Statement                := IfStatement | BlockStatement
                              | VariableStatement | ExpressionStatement
    IfStatement              := 'if' '(' Expression ')' Statement ('else' Statement)?
    BlockStatement           := '{' StatementList('}') '}'
    VariableStatement        := ('let' | 'const') VariableDeclarationList
    VariableDeclarationList  := VariableDeclaration (',' VariableDeclaration)*
    VariableDeclaration      := Identifier ('=' AssignmentExpression)?
    ExpressionStatement      := Expression
    Expression               := AssignmentExpression
    AssignmentExpression     := AdditiveExpression
                              | Identifier '=' AssignmentExpression
    AdditiveExpression       := MultiplicativeExpression (('+'|'-') MultiplicativeExpression)*
    MultiplicativeExpression := PrimaryExpression (('*'|'/') PrimaryExpression)*
    PrimaryExpression        := Literal | '(' Expression ')' | Identifier

Precedence comes from rule layering only: assignment binds loosest and is
right-associative, additive and multiplicative chains fold to the left.

Parser Behavior
---------------
- Fail-fast: the first violation raises `ParseError` (or `LexError` from the
  scanner) and no tree is returned.
- `Parser.parse()` resets all state, so one instance can parse many sources
  one after another (never concurrently).

Entry Points
------------
- `Parser().parse(text)`: Parse a full program.
- `parse(text)`: Same, with a fresh parser.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from tilde.tilde_ast import (
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    Expression,
    ExpressionStatement,
    Identifier,
    IfStatement,
    Literal,
    Program,
    Statement,
    VariableDeclaration,
    VariableDeclarator,
)
from tilde.tilde_constants import (
    ADDITIVE_OPERATORS,
    DECLARATORS,
    LITERAL_SUBKINDS,
    MULTIPLICATIVE_OPERATORS,
)
from tilde.tilde_errors import END_OF_INPUT, ParseError
from tilde.tilde_lexer import Scanner, Token

logger = logging.getLogger(__name__)


class Rule(str, Enum):
    """Grammar rules, used as the origin of parse errors."""

    PROGRAM = "Program"
    STATEMENT_LIST = "StatementList"
    STATEMENT = "Statement"
    IF_STATEMENT = "IfStatement"
    BLOCK_STATEMENT = "BlockStatement"
    VARIABLE_STATEMENT = "VariableStatement"
    VARIABLE_DECLARATION_LIST = "VariableDeclarationList"
    VARIABLE_DECLARATION = "VariableDeclaration"
    VARIABLE_INITIALIZER = "VariableInitializer"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    ASSIGNMENT_EXPRESSION = "AssignmentExpression"
    ADDITIVE_EXPRESSION = "AdditiveExpression"
    MULTIPLICATIVE_EXPRESSION = "MultiplicativeExpression"
    PRIMARY_EXPRESSION = "PrimaryExpression"
    PARENTHESIZED_EXPRESSION = "ParenthesizedExpression"
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"


# Tokens that may open an expression statement besides an identifier
_EXPRESSION_STARTS = LITERAL_SUBKINDS | {"Variable", "("}


class Parser:
    """
    Tilde Parser Class

    Attributes
    ----------
    scanner : Scanner
        Token source, re-initialized by every `parse()` call.
    lookahead : Token | None
        The next unconsumed token; None only at end of input.

    Raises
    ------
    ParseError
        When the token stream violates the grammar.
    LexError
        When the scanner meets a character no token pattern accepts.
    """

    def __init__(self) -> None:
        self.scanner = Scanner()
        self.lookahead: Token | None = None

        # Binary levels: operator subkinds and the next-tighter operand rule
        self._binary_levels: dict[
            Rule, tuple[frozenset[str], Callable[[], Expression]]
        ] = {
            Rule.ADDITIVE_EXPRESSION: (
                ADDITIVE_OPERATORS,
                self.multiplicative_expression,
            ),
            Rule.MULTIPLICATIVE_EXPRESSION: (
                MULTIPLICATIVE_OPERATORS,
                self.primary_expression,
            ),
        }

    def parse(self, text: str) -> Program:
        """Parse a complete Tilde program."""
        logger.debug("Parsing %d characters", len(text))
        self.scanner.init(text)
        self.lookahead = self.scanner.next_token()
        try:
            program = self.program()
        except RecursionError:
            raise self._error(
                Rule.PROGRAM, "Nesting too deep", self.lookahead
            ) from None
        logger.debug("Parsed program with %d statements", len(program.body))
        return program

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def program(self) -> Program:
        return Program(body=self.statement_list())

    def statement_list(self, stop: str | None = None) -> list[Statement]:
        statements: list[Statement] = []
        while self.lookahead is not None and self.lookahead.subkind != stop:
            statements.append(self.statement())
        return statements

    def statement(self) -> Statement:
        """Dispatch on the lookahead subkind to a statement production."""
        tok = self._require(Rule.STATEMENT, "statement")
        if tok.subkind == "If":
            return self.if_statement()
        if tok.subkind == "{":
            return self.block_statement()
        if tok.subkind in DECLARATORS:
            return self.variable_statement()
        if tok.subkind in _EXPRESSION_STARTS:
            return self.expression_statement()
        raise self._error(
            Rule.STATEMENT, f"Unexpected token {tok.subkind}", tok, expected="statement"
        )

    def if_statement(self) -> IfStatement:
        self._eat("If", Rule.IF_STATEMENT)
        self._eat("(", Rule.IF_STATEMENT)
        test = self.expression()
        self._eat(")", Rule.IF_STATEMENT)
        consequent = self.statement()
        alternate = None
        if self.lookahead is not None and self.lookahead.subkind == "Else":
            self._eat("Else", Rule.IF_STATEMENT)
            alternate = self.statement()
        return IfStatement(test=test, consequent=consequent, alternate=alternate)

    def block_statement(self) -> BlockStatement:
        self._eat("{", Rule.BLOCK_STATEMENT)
        body = self.statement_list("}")
        self._eat("}", Rule.BLOCK_STATEMENT)
        return BlockStatement(body=body)

    def variable_statement(self) -> VariableDeclaration:
        tok = self._require(Rule.VARIABLE_STATEMENT, "Let or Const")
        if tok.subkind not in DECLARATORS:
            raise self._error(
                Rule.VARIABLE_STATEMENT,
                f"Unexpected token {tok.subkind}, expected Let or Const",
                tok,
                expected="Let or Const",
            )
        self._eat(tok.subkind, Rule.VARIABLE_STATEMENT)
        return VariableDeclaration(
            kind=tok.subkind, declarations=self.variable_declaration_list()
        )

    def variable_declaration_list(self) -> list[VariableDeclarator]:
        declarations = [self.variable_declaration()]
        while self.lookahead is not None and self.lookahead.subkind == "Comma":
            self._eat("Comma", Rule.VARIABLE_DECLARATION_LIST)
            declarations.append(self.variable_declaration())
        return declarations

    def variable_declaration(self) -> VariableDeclarator:
        id_ = self.identifier()
        init = None
        if self.lookahead is not None and self.lookahead.subkind == "Assign":
            init = self.variable_initializer()
        return VariableDeclarator(id=id_, init=init)

    def variable_initializer(self) -> Expression:
        self._eat("Assign", Rule.VARIABLE_INITIALIZER)
        return self.assignment_expression()

    def expression_statement(self) -> ExpressionStatement:
        return ExpressionStatement(expression=self.expression())

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self) -> Expression:
        return self.assignment_expression()

    def assignment_expression(self) -> Expression:
        parenthesized = self.lookahead is not None and self.lookahead.subkind == "("
        left = self.additive_expression()

        if self.lookahead is None or self.lookahead.subkind != "Assign":
            return left

        target = self._check_valid_assignment_target(left, parenthesized)
        operator = self._eat("Assign", Rule.ASSIGNMENT_EXPRESSION)
        return AssignmentExpression(
            left=target, right=self.assignment_expression(), operator=operator.raw
        )

    def additive_expression(self) -> Expression:
        return self._binary_expression(Rule.ADDITIVE_EXPRESSION)

    def multiplicative_expression(self) -> Expression:
        return self._binary_expression(Rule.MULTIPLICATIVE_EXPRESSION)

    def _binary_expression(self, rule: Rule) -> Expression:
        """Left-folding loop shared by every binary precedence level."""
        operators, operand = self._binary_levels[rule]
        left = operand()
        while self.lookahead is not None and self.lookahead.subkind in operators:
            operator = self._eat(self.lookahead.subkind, rule)
            left = BinaryExpression(operator=operator.raw, left=left, right=operand())
        return left

    def primary_expression(self) -> Expression:
        tok = self._require(Rule.PRIMARY_EXPRESSION, "primary expression")
        if tok.subkind == "(":
            return self.parenthesized_expression()
        if tok.category == "Literal":
            return self.literal()
        if tok.category == "Identifier":
            return self.identifier()
        raise self._error(
            Rule.PRIMARY_EXPRESSION,
            f"Expected any valid primary expression, received unexpected token {tok.subkind}",
            tok,
            expected="primary expression",
        )

    def parenthesized_expression(self) -> Expression:
        self._eat("(", Rule.PARENTHESIZED_EXPRESSION)
        expression = self.expression()
        self._eat(")", Rule.PARENTHESIZED_EXPRESSION)
        return expression

    def identifier(self) -> Identifier:
        tok = self._eat("Variable", Rule.IDENTIFIER)
        return Identifier(name=tok.value)

    def literal(self) -> Literal:
        tok = self._require(Rule.LITERAL, "literal")
        if tok.subkind not in LITERAL_SUBKINDS:
            raise self._error(
                Rule.LITERAL,
                f"Unexpected literal token {tok.subkind}",
                tok,
                expected="literal",
            )
        self._eat(tok.subkind, Rule.LITERAL)
        return Literal(kind=tok.subkind, value=tok.value)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_valid_assignment_target(
        self, node: Expression, parenthesized: bool
    ) -> Identifier:
        if isinstance(node, Identifier) and not parenthesized:
            return node
        actual = "ParenthesizedExpression" if isinstance(node, Identifier) else node.type
        raise self._error(
            Rule.ASSIGNMENT_EXPRESSION,
            f"Invalid assignment target {actual}, expected Identifier",
            self.lookahead,
            expected="Identifier",
            actual=actual,
        )

    def _require(self, rule: Rule, expected: str) -> Token:
        """Return the lookahead, failing if input has ended."""
        if self.lookahead is None:
            raise self._error(
                rule,
                f"Unexpected {END_OF_INPUT}, expected {expected}",
                None,
                expected=expected,
            )
        return self.lookahead

    def _eat(self, subkind: str, rule: Rule) -> Token:
        """Consume the lookahead if it has `subkind`; otherwise fail."""
        tok = self.lookahead
        if tok is None:
            raise self._error(
                rule,
                f"Unexpected {END_OF_INPUT}, expected token {subkind}",
                None,
                expected=subkind,
            )
        if tok.subkind != subkind:
            raise self._error(
                rule,
                f"Unexpected token {tok.subkind}, expected {subkind}",
                tok,
                expected=subkind,
            )
        self.lookahead = self.scanner.next_token()
        return tok

    def _error(
        self,
        rule: Rule,
        description: str,
        tok: Token | None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> ParseError:
        if tok is None:
            line, column = self.scanner.line, self.scanner.column
            found = END_OF_INPUT
        else:
            line, column = tok.line, tok.column
            found = tok.subkind
        error = ParseError(
            rule.value,
            description,
            actual if actual is not None else found,
            line,
            column,
            expected=expected,
        )
        logger.debug("Parse error: %s", error)
        return error


def parse(text: str) -> Program:
    """Parse `text` with a fresh `Parser`."""
    return Parser().parse(text)


__all__ = ["Parser", "Rule", "parse"]
