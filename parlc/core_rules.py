"""Grammar rules for expressions, literals, types and operators."""

from __future__ import annotations

from typing import Callable

from parlc.grammar import Rule
from parlc.lexer import TokenType as T
from parlc.nodes import (
    ActualParamsNode,
    BinaryOpNode,
    BooleanNode,
    BuiltinFuncNode,
    ColorNode,
    Epsilon,
    ExpressionNode,
    FloatNode,
    FuncCallNode,
    IntegerNode,
    Node,
    OpList,
    SimpleExpression,
    TypeCastNode,
    TypeNode,
    UnaryOpNode,
    VariableNode,
)


def _lexeme(child: Node) -> str:
    return child.token.lexeme


def _integer(children: list) -> Node:
    text = _lexeme(children[0])
    return IntegerNode(name=text, value=int(text))


def _float(children: list) -> Node:
    text = _lexeme(children[0])
    return FloatNode(name=text, value=float(text))


def _color(children: list) -> Node:
    return ColorNode(value=_lexeme(children[0]))


def _type(children: list) -> Node:
    return TypeNode(name=_lexeme(children[0]))


def _operator(children: list) -> Node:
    return SimpleExpression(token=children[0].token)


def _second(children: list) -> Node:
    return children[1]


def _first(children: list) -> Node:
    return children[0]


def _epsilon(children: list) -> Node:
    return Epsilon()


def _empty_op_list(children: list) -> Node:
    return ExpressionNode(expr=OpList())


def _prepend_pair(children: list) -> Node:
    """Build the operator list of ``op operand tail``."""
    tail = children[2].expr
    pairs = [(_lexeme(children[0]), children[1]), *tail.pairs]
    return ExpressionNode(expr=OpList(pairs=pairs))


def _fold(first: Node, op_list_expr: ExpressionNode) -> Node:
    """Fold an operator list into left-associative binary operations."""
    node = first
    for operator, right in op_list_expr.expr.pairs:
        node = BinaryOpNode(operator=operator, left=node, right=right)
    return node


def _operand_chain(children: list) -> Node:
    return _fold(children[0], children[1])


def _expr(children: list) -> Node:
    node = _fold(children[0], children[1])
    tail = children[2]
    if isinstance(tail, TypeCastNode):
        return TypeCastNode(type_name=tail.type_name, expr=node)
    return node


def _cast_tail(children: list) -> Node:
    return TypeCastNode(type_name=children[1].name)


def _identifier(children: list) -> Node:
    return VariableNode(token=children[0].token, offset=children[1])


def _identifier_or_call(children: list) -> Node:
    suffix = children[1]
    if isinstance(suffix, FuncCallNode):
        suffix.name = _lexeme(children[0])
        return suffix
    return VariableNode(token=children[0].token, offset=suffix)


def _call_suffix(children: list) -> Node:
    return FuncCallNode(params=children[1])


def _actual_params(head: int, tail: int) -> Callable[[list], Node]:
    def action(children: list) -> Node:
        return ActualParamsNode(params=[children[head], *children[tail].params])

    return action


def _no_actual_params(children: list) -> Node:
    return ActualParamsNode(params=[])


def _builtin_no_args(children: list) -> Node:
    return BuiltinFuncNode(name=_lexeme(children[0]), args=[])


def _read(children: list) -> Node:
    return BuiltinFuncNode(name="__read", args=[children[2], children[4]])


def _random_int(children: list) -> Node:
    return BuiltinFuncNode(name=_lexeme(children[0]), args=[children[2]])


def _unary(children: list) -> Node:
    return UnaryOpNode(operator=_lexeme(children[0]), operand=children[1])


def _true(children: list) -> Node:
    return BooleanNode(value=True)


def _false(children: list) -> Node:
    return BooleanNode(value=False)


def core_rules() -> list[Rule]:
    """Rules for identifiers, literals, types and expressions, in table order."""
    return [
        # Identifier, optionally indexed, as the target of an assignment.
        Rule("Identifier", (T.IDENTIFIER, "IdentifierOrArrayAccess"), _identifier),
        Rule("IdentifierOrArrayAccess", (T.LEFT_BRACKET, "Expr", T.RIGHT_BRACKET), _second),
        Rule("IdentifierOrArrayAccess", (), _epsilon),
        # Literals.
        Rule("Literal", (T.INTEGER,), _integer),
        Rule("Literal", (T.FLOAT,), _float),
        Rule("Literal", (T.TRUE,), _true),
        Rule("Literal", (T.FALSE,), _false),
        Rule("Literal", (T.HEX_NUMBER,), _color),
        # Types.
        Rule("TypeRule", (T.FLOAT_TYPE,), _type),
        Rule("TypeRule", (T.INT_TYPE,), _type),
        Rule("TypeRule", (T.BOOL_TYPE,), _type),
        Rule("TypeRule", (T.COLOUR_TYPE,), _type),
        # Expressions.
        Rule("Expr", ("SimpleExpr", "ExprPrime", "ExprTail"), _expr),
        Rule("ExprTail", (T.AS, "TypeRule"), _cast_tail),
        Rule("ExprTail", (), _epsilon),
        Rule("ExprPrime", (T.REL_OP, "SimpleExpr", "ExprPrime"), _prepend_pair),
        Rule("ExprPrime", (), _empty_op_list),
        Rule("SimpleExpr", ("Term", "SimpleExprPrime"), _operand_chain),
        Rule(
            "SimpleExprPrime",
            ("AdditiveOperator", "Term", "SimpleExprPrime"),
            _prepend_pair,
        ),
        Rule("SimpleExprPrime", (), _empty_op_list),
        Rule("Term", ("Factor", "TermPrime"), _operand_chain),
        Rule(
            "TermPrime",
            ("MultiplicativeOperator", "Factor", "TermPrime"),
            _prepend_pair,
        ),
        Rule("MultiplicativeOperator", (T.STAR,), _operator),
        Rule("MultiplicativeOperator", (T.SLASH,), _operator),
        Rule("MultiplicativeOperator", (T.AND,), _operator),
        Rule("AdditiveOperator", (T.PLUS,), _operator),
        Rule("AdditiveOperator", (T.MINUS,), _operator),
        Rule("AdditiveOperator", (T.OR,), _operator),
        Rule("TermPrime", (), _empty_op_list),
        # Factors.
        Rule("Factor", (T.INTEGER,), _integer),
        Rule("Factor", (T.FLOAT,), _float),
        Rule("Factor", ("SubExpr",), _first),
        Rule("SubExpr", (T.LEFT_PAREN, "Expr", T.RIGHT_PAREN), _second),
        # Array size in a type signature.
        Rule("ArrayTypeSignature", (T.LEFT_BRACKET, T.INTEGER, T.RIGHT_BRACKET), _second),
        Rule("ArrayTypeSignature", (), _epsilon),
        # Built-in expressions.
        Rule("Factor", (T.PAD_WIDTH,), _builtin_no_args),
        Rule("Factor", (T.PAD_HEIGHT,), _builtin_no_args),
        Rule("Factor", ("ReadExpr",), _first),
        Rule(
            "ReadExpr",
            (T.PAD_READ, T.LEFT_PAREN, "Expr", T.COMMA, "Expr", T.RIGHT_PAREN),
            _read,
        ),
        Rule("Factor", (T.PAD_RAND_I, T.LEFT_PAREN, "Expr", T.RIGHT_PAREN), _random_int),
        # Variables, indexed variables and function calls.
        Rule("Factor", (T.IDENTIFIER, "IdentifierOrFunctionCall"), _identifier_or_call),
        Rule("IdentifierOrFunctionCall", (T.LEFT_BRACKET, "Expr", T.RIGHT_BRACKET), _second),
        Rule("IdentifierOrFunctionCall", (), _epsilon),
        Rule(
            "IdentifierOrFunctionCall",
            (T.LEFT_PAREN, "ActualParams", T.RIGHT_PAREN),
            _call_suffix,
        ),
        Rule("ActualParams", ("Expr", "ActualParamsTail"), _actual_params(0, 1)),
        Rule("ActualParams", (), _no_actual_params),
        Rule(
            "ActualParamsTail",
            (T.COMMA, "Expr", "ActualParamsTail"),
            _actual_params(1, 2),
        ),
        Rule("ActualParamsTail", (), _no_actual_params),
        # Unary operators and remaining literal factors.
        Rule("Factor", ("Unary",), _first),
        Rule("Unary", ("UnaryOperator", "Factor"), _unary),
        Rule("UnaryOperator", (T.MINUS,), _operator),
        Rule("UnaryOperator", (T.NOT,), _operator),
        Rule("Factor", (T.TRUE,), _true),
        Rule("Factor", (T.FALSE,), _false),
        Rule("Factor", (T.HEX_NUMBER,), _color),
    ]