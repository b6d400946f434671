from collections.abc import Callable

import pytest
from hypothesis import given
from hypothesis import strategies as st
from hypothesis.strategies import composite

from tilde.tilde_ast import (
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    ExpressionStatement,
    Identifier,
    IfStatement,
    Literal,
    Program,
    VariableDeclaration,
    VariableDeclarator,
)
from tilde.tilde_errors import LexError, ParseError
from tilde.tilde_parser import Parser, Rule, parse

Parse = Callable[[str], Program]


def num(value: int) -> Literal:
    return Literal("Number", value)


def ident(name: str) -> Identifier:
    return Identifier(name)


def expr(source: str) -> object:
    """Parse a single expression statement and return its expression."""
    (stmt,) = parse(source).body
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


def test_precedence() -> None:
    assert expr("2+3*4") == BinaryExpression(
        "+", num(2), BinaryExpression("*", num(3), num(4))
    )


def test_parenthesization() -> None:
    assert expr("(2+3)*4") == BinaryExpression(
        "*", BinaryExpression("+", num(2), num(3)), num(4)
    )


def test_additive_left_associativity() -> None:
    assert expr("ab-cd-ef") == BinaryExpression(
        "-", BinaryExpression("-", ident("ab"), ident("cd")), ident("ef")
    )


def test_multiplicative_left_associativity() -> None:
    assert expr("aa * bb / cc") == BinaryExpression(
        "/", BinaryExpression("*", ident("aa"), ident("bb")), ident("cc")
    )


def test_mixed_additive_operators() -> None:
    assert expr("aa + bb - cc") == BinaryExpression(
        "-", BinaryExpression("+", ident("aa"), ident("bb")), ident("cc")
    )


def test_assignment_right_associativity() -> None:
    assert expr("aa = bb = cc") == AssignmentExpression(
        ident("aa"), AssignmentExpression(ident("bb"), ident("cc"))
    )


def test_assignment_of_expression() -> None:
    assert expr("total = aa + 2 * bb") == AssignmentExpression(
        ident("total"),
        BinaryExpression("+", ident("aa"), BinaryExpression("*", num(2), ident("bb"))),
    )


def test_nested_parentheses() -> None:
    assert expr("((aa))") == ident("aa")


@pytest.mark.parametrize(
    "source,expected",
    [
        ("42", Literal("Number", 42)),
        ('"hi there"', Literal("String", "hi there")),
        ("'c'", Literal("Char", "c")),
        ("true", Literal("BoolTrue", True)),
        ("false", Literal("BoolFalse", False)),
    ],
)  # type: ignore[misc]
def test_literals(source: str, expected: Literal) -> None:
    assert expr(source) == expected


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def test_empty_program(parse: Parse) -> None:
    assert parse("") == Program([])
    assert parse("  # only a comment\n") == Program([])


def test_statements_are_juxtaposed(parse: Parse) -> None:
    program = parse("aa = 1\nbb = 2")
    assert program.body == [
        ExpressionStatement(AssignmentExpression(ident("aa"), num(1))),
        ExpressionStatement(AssignmentExpression(ident("bb"), num(2))),
    ]


def test_block_comment_can_swallow_division(parse: Parse) -> None:
    program = parse("aa / bb / cc")
    assert program.body == [ExpressionStatement(ident("aa")), ExpressionStatement(ident("cc"))]


def test_if_else(parse: Parse) -> None:
    program = parse("if (aa) bb = 1 else { cc = 2 }")
    assert program.body == [
        IfStatement(
            test=ident("aa"),
            consequent=ExpressionStatement(AssignmentExpression(ident("bb"), num(1))),
            alternate=BlockStatement(
                [ExpressionStatement(AssignmentExpression(ident("cc"), num(2)))]
            ),
        )
    ]


def test_if_without_else(parse: Parse) -> None:
    (stmt,) = parse("if (aa + 1) { bb }").body
    assert isinstance(stmt, IfStatement)
    assert stmt.test == BinaryExpression("+", ident("aa"), num(1))
    assert stmt.alternate is None


def test_else_binds_to_nearest_if(parse: Parse) -> None:
    (outer,) = parse("if (aa) if (bb) cc else dd").body
    assert isinstance(outer, IfStatement)
    assert outer.alternate is None
    assert outer.consequent == IfStatement(
        ident("bb"), ExpressionStatement(ident("cc")), ExpressionStatement(ident("dd"))
    )


def test_empty_block(parse: Parse) -> None:
    assert parse("{}").body == [BlockStatement([])]


def test_nested_blocks(parse: Parse) -> None:
    assert parse("{ { aa } bb }").body == [
        BlockStatement(
            [BlockStatement([ExpressionStatement(ident("aa"))]), ExpressionStatement(ident("bb"))]
        )
    ]


def test_let_declaration(parse: Parse) -> None:
    assert parse("let aa = 1").body == [
        VariableDeclaration("Let", [VariableDeclarator(ident("aa"), num(1))])
    ]


def test_const_declaration_with_assignment_initializer(parse: Parse) -> None:
    assert parse("const aa = bb = 2").body == [
        VariableDeclaration(
            "Const",
            [VariableDeclarator(ident("aa"), AssignmentExpression(ident("bb"), num(2)))],
        )
    ]


def test_declaration_list_without_initializers(parse: Parse) -> None:
    (decl,) = parse("let aa, bb = 1, cc").body
    assert decl == VariableDeclaration(
        "Let",
        [
            VariableDeclarator(ident("aa"), None),
            VariableDeclarator(ident("bb"), num(1)),
            VariableDeclarator(ident("cc"), None),
        ],
    )


def test_to_dict_shape(parse: Parse) -> None:
    assert parse("let aa = 1").to_dict() == {
        "type": "Program",
        "body": [
            {
                "type": "VariableDeclaration",
                "kind": "Let",
                "declarations": [
                    {
                        "type": "VariableDeclarator",
                        "id": {"type": "Identifier", "name": "aa"},
                        "init": {"type": "Literal", "kind": "Number", "value": 1},
                    }
                ],
            }
        ],
    }


def test_parse_function_uses_fresh_parser() -> None:
    assert parse("aa") == Program([ExpressionStatement(ident("aa"))])


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_invalid_assignment_target_parenthesized(parse: Parse) -> None:
    with pytest.raises(ParseError, match="Invalid assignment target") as excinfo:
        parse("(aa) = bb")
    err = excinfo.value
    assert err.rule == Rule.ASSIGNMENT_EXPRESSION.value
    assert err.expected == "Identifier"
    assert err.actual == "ParenthesizedExpression"
    assert (err.line, err.column) == (1, 6)


@pytest.mark.parametrize(
    "source,actual",
    [("aa + bb = cc", "BinaryExpression"), ("1 = aa", "Literal")],
)  # type: ignore[misc]
def test_invalid_assignment_target(parse: Parse, source: str, actual: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse(source)
    assert excinfo.value.actual == actual
    assert excinfo.value.rule == "AssignmentExpression"


def test_invalid_initializer_target(parse: Parse) -> None:
    with pytest.raises(ParseError, match="Invalid assignment target"):
        parse("let aa = (bb) = 1")


@pytest.mark.parametrize(
    "source,subkind",
    [("+ aa", "Add"), ("else", "Else"), ("}", "}"), ("aa == bb", "Equal"), ("?", "ShortIf")],
)  # type: ignore[misc]
def test_unexpected_statement_token(parse: Parse, source: str, subkind: str) -> None:
    with pytest.raises(ParseError, match=f"Unexpected token {subkind}") as excinfo:
        parse(source)
    assert excinfo.value.rule == "Statement"
    assert excinfo.value.actual == subkind


def test_unexpected_token_position(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("let aa = 1\n  }")
    assert (excinfo.value.line, excinfo.value.column) == (2, 3)
    assert str(excinfo.value) == "[Statement] Unexpected token } at line 2, column 3"


def test_eat_end_of_input(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("if (aa")
    err = excinfo.value
    assert err.rule == "IfStatement"
    assert err.expected == ")"
    assert err.actual == "end of input"
    assert (err.line, err.column) == (1, 7)


def test_unclosed_block(parse: Parse) -> None:
    with pytest.raises(ParseError, match="expected token }") as excinfo:
        parse("{ aa")
    assert excinfo.value.rule == "BlockStatement"


def test_if_requires_parenthesis(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("if aa bb")
    assert excinfo.value.expected == "("
    assert excinfo.value.actual == "Variable"


def test_if_requires_consequent(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("if (aa)")
    assert excinfo.value.rule == "Statement"
    assert excinfo.value.actual == "end of input"


def test_declaration_requires_identifier(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("let 12")
    assert excinfo.value.rule == "Identifier"
    assert excinfo.value.expected == "Variable"
    assert excinfo.value.actual == "Number"


def test_missing_right_operand(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("aa = ")
    assert excinfo.value.rule == "PrimaryExpression"
    assert excinfo.value.actual == "end of input"


def test_unexpected_primary_token(parse: Parse) -> None:
    with pytest.raises(ParseError, match="Expected any valid primary expression"):
        parse("aa + )")


def test_unexpected_literal_token(parser: Parser) -> None:
    parser.scanner.init("aa")
    parser.lookahead = parser.scanner.next_token()
    with pytest.raises(ParseError, match="Unexpected literal token Variable"):
        parser.literal()


def test_lex_error_propagates(parse: Parse) -> None:
    with pytest.raises(LexError):
        parse("let x = 1")


def test_errors_are_syntax_errors(parse: Parse) -> None:
    with pytest.raises(SyntaxError):
        parse("let = 1")


def test_parser_is_reusable_after_error(parser: Parser) -> None:
    with pytest.raises(ParseError):
        parser.parse("{ aa")
    assert parser.parse("bb") == Program([ExpressionStatement(ident("bb"))])
    assert parser.lookahead is None


def test_deep_parentheses_raise_parse_error(parse: Parse) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("(" * 500 + "aa" + ")" * 500)
    err = excinfo.value
    assert err.rule == Rule.PROGRAM
    assert "Nesting too deep" in str(err)
    assert err.line == 1


def test_deep_blocks_raise_parse_error(parse: Parse) -> None:
    with pytest.raises(ParseError, match=r"\[Program\] Nesting too deep"):
        parse("{" * 1000 + "}" * 1000)


def test_parser_is_reusable_after_nesting_error(parser: Parser) -> None:
    with pytest.raises(ParseError):
        parser.parse("(" * 500 + "aa" + ")" * 500)
    assert parser.parse("((aa))") == Program([ExpressionStatement(ident("aa"))])


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

names = st.sampled_from(["aa", "bb", "cc", "dd", "total", "x_y"])


@composite  # type: ignore[misc]
def expressions(draw: st.DrawFn, depth: int = 3) -> str:
    if depth == 0 or draw(st.booleans()):
        return draw(st.one_of(names, st.integers(0, 999).map(str)))
    op = draw(st.sampled_from(["+", "-", "*"]))
    left = draw(expressions(depth - 1))
    right = draw(expressions(depth - 1))
    if draw(st.booleans()):
        return f"({left} {op} {right})"
    return f"{left} {op} {right}"


@given(source=expressions())  # type: ignore[misc]
def test_parsing_is_deterministic(source: str) -> None:
    reused = Parser()
    first = reused.parse(source)
    assert reused.parse(source) == first
    assert Parser().parse(source) == first
    assert first.to_dict() == parse(source).to_dict()


@given(
    operands=st.lists(names, min_size=2, max_size=8),
    operators=st.lists(st.sampled_from(["+", "-"]), min_size=7, max_size=7),
)  # type: ignore[misc]
def test_additive_chain_folds_left(operands: list[str], operators: list[str]) -> None:
    source = operands[0]
    for name, op in zip(operands[1:], operators):
        source += f" {op} {name}"
    node = expr(source)
    for name in reversed(operands[1:]):
        assert isinstance(node, BinaryExpression)
        assert node.right == ident(name)
        node = node.left
    assert node == ident(operands[0])


@given(targets=st.lists(names, min_size=1, max_size=6))  # type: ignore[misc]
def test_assignment_chain_nests_right(targets: list[str]) -> None:
    node = expr(" = ".join(targets + ["1"]))
    for name in targets:
        assert isinstance(node, AssignmentExpression)
        assert node.left == ident(name)
        node = node.right
    assert node == num(1)
