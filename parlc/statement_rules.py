"""Grammar rules for programs, statements, declarations and functions."""

from __future__ import annotations

from typing import Callable

from parlc.core_rules import core_rules
from parlc.grammar import Grammar, Rule
from parlc.lexer import TokenType as T
from parlc.nodes import (
    ArrayNode,
    AssignmentNode,
    BlockNode,
    BuiltinFuncNode,
    Epsilon,
    ExpressionNode,
    ForNode,
    FormalParamsNode,
    FuncDeclNode,
    IfNode,
    Node,
    ProgramNode,
    ReturnNode,
    VarDeclNode,
    WhileNode,
)


def _lexeme(child: Node) -> str:
    return child.token.lexeme


def _program(children: list) -> Node:
    return ProgramNode(block=children[0])


def _braced_program(children: list) -> Node:
    return ProgramNode(block=children[1])


def _stmt_list(children: list) -> Node:
    return BlockNode(name="", stmts=[children[0], *children[1].stmts])


def _empty_stmt_list(children: list) -> Node:
    return BlockNode(name="", stmts=[])


def _assignment(children: list) -> Node:
    return AssignmentNode(target=children[0], expr=children[2])


def _var_decl(children: list) -> Node:
    """Build a declaration; an array initialiser sizes the declared type."""
    type_node = children[3]
    suffix = children[4]
    if isinstance(suffix, ArrayNode):
        type_node.name += f"[{suffix.size}]"
        suffix.type_name = type_node.name
    return VarDeclNode(
        name=_lexeme(children[1]),
        type_name=type_node.name,
        expression=suffix,
    )


def _second(children: list) -> Node:
    return children[1]


def _epsilon(children: list) -> Node:
    return Epsilon()


def _sized_array(children: list) -> Node:
    array = children[5]
    array.size = int(_lexeme(children[0]))
    array.items = [children[4], *array.items]
    return array


def _unsized_array(children: list) -> Node:
    array = children[4]
    array.size += 1
    array.items = [children[3], *array.items]
    return array


def _array_tail(children: list) -> Node:
    tail = children[2]
    return ArrayNode(size=tail.size + 1, items=[children[1], *tail.items])


def _array_end(children: list) -> Node:
    return ArrayNode(items=[])


def _if(children: list) -> Node:
    return IfNode(condition=children[1], then_block=children[2], else_block=children[3])


def _block(children: list) -> Node:
    block = children[1]
    block.name = "Block"
    return block


def _while(children: list) -> Node:
    return WhileNode(condition=children[1], block=children[2])


def _for(children: list) -> Node:
    return ForNode(
        var_decl=children[2],
        condition=children[4],
        increment=children[6],
        block=children[8],
    )


def _with_array_size(type_name: str, signature: Node) -> str:
    if isinstance(signature, Epsilon):
        return type_name
    return f"{type_name}[{_lexeme(signature)}]"


def _func_decl(children: list) -> Node:
    return FuncDeclNode(
        name=_lexeme(children[1]),
        return_type=_with_array_size(children[6].name, children[7]),
        params=children[3],
        block=children[8],
    )


def _formal_params(offset: int) -> Callable[[list], Node]:
    """Action for ``[','] Identifier ':' TypeRule ArrayTypeSignature Tail``."""

    def action(children: list) -> Node:
        param = VarDeclNode(
            name=_lexeme(children[offset]),
            type_name=_with_array_size(children[offset + 2].name, children[offset + 3]),
            expression=ExpressionNode(expr=Epsilon()),
        )
        return FormalParamsNode(params=[param, *children[offset + 4].params])

    return action


def _no_formal_params(children: list) -> Node:
    return FormalParamsNode(params=[])


def _builtin(*arg_positions: int) -> Callable[[list], Node]:
    def action(children: list) -> Node:
        return BuiltinFuncNode(
            name=_lexeme(children[0]),
            args=[children[position] for position in arg_positions],
        )

    return action


def _block_statement(children: list) -> Node:
    return BlockNode(name="Statement", stmts=children[0].stmts)


def _return(children: list) -> Node:
    return ReturnNode(expr=children[1])


def statement_rules() -> list[Rule]:
    """Rules for programs, statements, declarations and functions, in table order."""
    return [
        # Program and statement lists.
        Rule("Program", ("StmtList",), _program),
        Rule("Program", (T.LEFT_CURLY, "StmtList", T.RIGHT_CURLY), _braced_program),
        Rule("StmtList", ("Statement", "StmtList"), _stmt_list),
        Rule("StmtList", (), _empty_stmt_list),
        # Assignment.
        Rule("Statement", ("Identifier", T.EQUALS, "Expr", T.SEMICOLON), _assignment),
        # Variable declaration.
        Rule(
            "Statement",
            (T.LET, T.IDENTIFIER, T.COLON, "TypeRule", "VarDeclSuffix", T.SEMICOLON),
            _var_decl,
        ),
        Rule("VarDeclSuffix", (T.EQUALS, "Expr"), _second),
        Rule("VarDeclSuffix", (T.LEFT_BRACKET, "VarDeclArray"), _second),
        Rule(
            "VarDeclArray",
            (
                T.INTEGER,
                T.RIGHT_BRACKET,
                T.EQUALS,
                T.LEFT_BRACKET,
                "Literal",
                "VarDeclArrayTail",
            ),
            _sized_array,
        ),
        Rule("VarDeclArrayTail", (T.COMMA, "Literal", "VarDeclArrayTail"), _array_tail),
        Rule("VarDeclArrayTail", (T.RIGHT_BRACKET,), _array_end),
        Rule(
            "VarDeclArray",
            (T.RIGHT_BRACKET, T.EQUALS, T.LEFT_BRACKET, "Literal", "VarDeclArrayTail"),
            _unsized_array,
        ),
        # Conditionals and blocks.
        Rule("Statement", (T.IF, "Expr", "Block", "IfTail"), _if),
        Rule("IfTail", (T.ELSE, "Block"), _second),
        Rule("IfTail", (), _epsilon),
        Rule("Block", (T.LEFT_CURLY, "StmtList", T.RIGHT_CURLY), _block),
        # Loops.
        Rule("Statement", (T.WHILE, "Expr", "Block"), _while),
        Rule(
            "Statement",
            (
                T.FOR,
                T.LEFT_PAREN,
                "ForVarDecl",
                T.SEMICOLON,
                "Expr",
                T.SEMICOLON,
                "ForAssignment",
                T.RIGHT_PAREN,
                "Block",
            ),
            _for,
        ),
        Rule(
            "ForVarDecl",
            (T.LET, T.IDENTIFIER, T.COLON, "TypeRule", "VarDeclSuffix"),
            _var_decl,
        ),
        Rule("ForVarDecl", (), _epsilon),
        Rule("ForAssignment", ("Identifier", T.EQUALS, "Expr"), _assignment),
        Rule("ForAssignment", (), _epsilon),
        # Function declarations.
        Rule(
            "Statement",
            (
                T.FUN,
                T.IDENTIFIER,
                T.LEFT_PAREN,
                "FormalParams",
                T.RIGHT_PAREN,
                T.LEFT_ARROW,
                "TypeRule",
                "ArrayTypeSignature",
                "Block",
            ),
            _func_decl,
        ),
        Rule(
            "FormalParams",
            (T.IDENTIFIER, T.COLON, "TypeRule", "ArrayTypeSignature", "FormalParamsTail"),
            _formal_params(0),
        ),
        Rule(
            "FormalParamsTail",
            (
                T.COMMA,
                T.IDENTIFIER,
                T.COLON,
                "TypeRule",
                "ArrayTypeSignature",
                "FormalParamsTail",
            ),
            _formal_params(1),
        ),
        Rule("FormalParamsTail", (), _no_formal_params),
        Rule("FormalParams", (), _no_formal_params),
        # Built-in statements.
        Rule("Statement", (T.PRINT, "Expr", T.SEMICOLON), _builtin(1)),
        Rule("Statement", (T.DELAY, "Expr", T.SEMICOLON), _builtin(1)),
        Rule(
            "Statement",
            (T.WRITE, "Expr", T.COMMA, "Expr", T.COMMA, "Expr", T.SEMICOLON),
            _builtin(1, 3, 5),
        ),
        Rule(
            "Statement",
            (
                T.WRITE_BOX,
                "Expr",
                T.COMMA,
                "Expr",
                T.COMMA,
                "Expr",
                T.COMMA,
                "Expr",
                T.COMMA,
                "Expr",
                T.SEMICOLON,
            ),
            _builtin(1, 3, 5, 7, 9),
        ),
        Rule("Statement", (T.CLEAR, "Expr", T.SEMICOLON), _builtin(1)),
        # Nested block and return.
        Rule("Statement", ("Block",), _block_statement),
        Rule("Statement", (T.RETURN, "Expr", T.SEMICOLON), _return),
    ]


def build_grammar() -> Grammar:
    """The complete language grammar with its LL(1) table."""
    return Grammar(rules=[*statement_rules(), *core_rules()], start_symbol="Program")