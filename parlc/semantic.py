"""Semantic analysis: scoping, declarations and type checking of syntax trees."""

from __future__ import annotations

import re
from typing import Optional

from parlc.nodes import (
    ActualParamNode,
    ActualParamsNode,
    ArrayNode,
    AssignmentNode,
    BinaryOpNode,
    BlockNode,
    BooleanNode,
    BuiltinFuncNode,
    ColorNode,
    Epsilon,
    ExpressionNode,
    FloatNode,
    ForNode,
    FormalParamNode,
    FormalParamsNode,
    FuncCallNode,
    FuncDeclNode,
    IfNode,
    IntegerNode,
    Node,
    NodeVisitor,
    PrintNode,
    ProgramNode,
    ReturnNode,
    SimpleExpression,
    TypeCastNode,
    TypeNode,
    UnaryOpNode,
    VarDeclNode,
    VariableNode,
    WhileNode,
)

_RELATIONAL = frozenset({"<", ">", "<=", ">=", "=="})
_COLOR_PATTERN = re.compile(r"#[+-]?[0-9a-fA-F]")

# name -> (argument types, result type, argument-count message template)
_STANDARD_COUNT = "Invalid number of arguments for {name}: expected {expected}, got {got}"
_BUILTIN_SIGNATURES: dict[str, tuple[tuple[str, ...], str, str]] = {
    "__random_int": (("int",), "int", _STANDARD_COUNT),
    "__delay": (("int",), "", _STANDARD_COUNT),
    "__write": (("int", "int", "colour"), "", _STANDARD_COUNT),
    "__write_box": (
        ("int", "int", "int", "int", "colour"),
        "int",
        "Invalid number of arguments for __random_int: expected {expected} got {got}",
    ),
    "__read": (("int", "int"), "int", _STANDARD_COUNT),
}


class SemanticError(Exception):
    """The program is syntactically valid but breaks a language rule."""


class SymbolTable:
    """A stack of scopes; each new scope starts as a copy of the enclosing one."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Node]] = []

    def __len__(self) -> int:
        return len(self._scopes)

    def push(self) -> None:
        """Open a scope that sees everything visible in the current one."""
        if self._scopes:
            self._scopes.append(dict(self._scopes[-1]))
        else:
            self._scopes.append({})

    def pop(self) -> None:
        """Close the current scope; does nothing when none is open."""
        if self._scopes:
            self._scopes.pop()

    def lookup(self, name: str) -> Optional[Node]:
        """The declaration visible under ``name``, or None."""
        if not self._scopes:
            return None
        return self._scopes[-1].get(name)

    def insert(self, name: str, node: Node) -> None:
        """Declare ``name`` in the current scope; ignored when none is open."""
        if self._scopes:
            self._scopes[-1][name] = node


def _element_type(type_name: str, name: str) -> str:
    if "[" not in type_name:
        raise SemanticError(f"Not an array: {name}")
    return type_name[: type_name.index("[")]


def _variable_declaration(name: str, symbol_table: SymbolTable) -> VarDeclNode:
    declaration = symbol_table.lookup(name)
    if declaration is None:
        raise SemanticError(f"Variable not declared: {name}")
    if not isinstance(declaration, VarDeclNode):
        raise SemanticError("Not a variable declaration: ")
    return declaration


def _builtin_type(node: BuiltinFuncNode, symbol_table: SymbolTable) -> str:
    name = node.name
    if name in ("__height", "__width"):
        return "int"
    if name == "__print":
        if len(node.args) != 1:
            raise SemanticError(
                f"Invalid number of arguments for __print: expected 1, got {len(node.args)}"
            )
        return ""
    signature = _BUILTIN_SIGNATURES.get(name)
    if signature is None:
        raise SemanticError(f"Unknown builtin function: {name}")
    expected_types, result, count_message = signature
    if len(node.args) != len(expected_types):
        raise SemanticError(
            count_message.format(name=name, expected=len(expected_types), got=len(node.args))
        )
    actual_types = [expression_type(arg, symbol_table) for arg in node.args]
    for expected, actual in zip(expected_types, actual_types):
        if actual != expected:
            shown = "color" if expected == "colour" else expected
            raise SemanticError(
                f"Invalid argument type for {name}: expected {shown}, got {actual}"
            )
    return result


def _call_type(node: FuncCallNode, symbol_table: SymbolTable) -> str:
    declaration = symbol_table.lookup(node.name)
    if declaration is None:
        raise SemanticError(f"Function not declared: {node.name}")
    if not isinstance(declaration, FuncDeclNode):
        raise SemanticError(f"Not a function declaration: {node.name}")
    formal = declaration.params.params
    actual = node.params.params
    if len(actual) != len(formal):
        raise SemanticError(
            f"Argument count mismatch: expected {len(formal)}, got {len(actual)}"
        )
    for argument, parameter in zip(actual, formal):
        argument_type = expression_type(argument, symbol_table)
        if argument_type != parameter.type_name:
            raise SemanticError(
                f"Type mismatch: expected {parameter.type_name}, got {argument_type}"
            )
    return declaration.return_type


def expression_type(node: Node, symbol_table: SymbolTable) -> str:
    """The type name of an expression; raises SemanticError where it is ill-typed."""
    if isinstance(node, IntegerNode):
        return "int"
    if isinstance(node, FloatNode):
        return "float"
    if isinstance(node, BooleanNode):
        return "bool"
    if isinstance(node, ColorNode):
        return "colour"
    if isinstance(node, VariableNode):
        name = node.token.lexeme
        declaration = _variable_declaration(name, symbol_table)
        if not isinstance(node.offset, Epsilon):
            return _element_type(declaration.type_name, name)
        return declaration.type_name
    if isinstance(node, BinaryOpNode):
        left = expression_type(node.left, symbol_table)
        right = expression_type(node.right, symbol_table)
        if left != right:
            raise SemanticError(f"Type mismatch: expected {left}, got {right}")
        return "bool" if node.operator in _RELATIONAL else left
    if isinstance(node, UnaryOpNode):
        return expression_type(node.operand, symbol_table)
    if isinstance(node, AssignmentNode):
        return expression_type(node.expr, symbol_table)
    if isinstance(node, FuncCallNode):
        return _call_type(node, symbol_table)
    if isinstance(node, ReturnNode):
        return expression_type(node.expr, symbol_table)
    if isinstance(node, ExpressionNode):
        return expression_type(node.expr, symbol_table)
    if isinstance(node, TypeCastNode):
        return node.type_name
    if isinstance(node, ArrayNode):
        return node.type_name
    if isinstance(node, Epsilon):
        return ""
    if isinstance(node, BuiltinFuncNode):
        return _builtin_type(node, symbol_table)
    raise SemanticError(f"Unknown expression type{type(node).__name__}")


def has_return_statement(node: Node, visitor: SemanticVisitor, expected_type: str) -> bool:
    """Whether ``node`` is sure to return; every return met must be ``expected_type``."""
    if isinstance(node, ReturnNode):
        actual = expression_type(node.expr, visitor.symbol_table)
        if actual != expected_type:
            raise SemanticError(
                f"Return type mismatch: expected {expected_type}, got {actual}"
            )
        return True
    if isinstance(node, BlockNode):
        return any(has_return_statement(stmt, visitor, expected_type) for stmt in node.stmts)
    if isinstance(node, IfNode):
        if has_return_statement(node.then_block, visitor, expected_type):
            if node.else_block is not None:
                return has_return_statement(node.else_block, visitor, expected_type)
            return True
    return False


def _array_item_type(node: ArrayNode) -> str:
    return node.type_name.split("[")[0]


class SemanticVisitor(NodeVisitor):
    """Checks declarations, scopes and types; raises SemanticError on the first fault."""

    def __init__(self) -> None:
        self.symbol_table = SymbolTable()

    def _scoped(self, node: Node) -> None:
        if isinstance(node, BlockNode):
            self.symbol_table.push()
            try:
                node.accept(self)
            finally:
                self.symbol_table.pop()
        else:
            node.accept(self)

    def _check_offset(self, offset: Node) -> None:
        if isinstance(offset, Epsilon):
            return
        offset_type = expression_type(offset, self.symbol_table)
        if offset_type != "int":
            raise SemanticError(f"Invalid offset type: expected int, got {offset_type}")

    def visit_integer(self, node: IntegerNode) -> None:
        pass

    def visit_variable(self, node: VariableNode) -> None:
        if self.symbol_table.lookup(node.token.lexeme) is None:
            raise SemanticError(f"Variable not declared: {node.token.lexeme}")
        self._check_offset(node.offset)

    def visit_assignment(self, node: AssignmentNode) -> None:
        name = node.target.token.lexeme
        declaration = self.symbol_table.lookup(name)
        if declaration is None:
            raise SemanticError(f"Variable not declared: {name}")
        if not isinstance(declaration, VarDeclNode):
            raise SemanticError(f"Not a variable declaration: {name}")
        if isinstance(node.target.offset, Epsilon):
            expected = declaration.type_name
        else:
            self._check_offset(node.target.offset)
            expected = _element_type(declaration.type_name, name)
        actual = expression_type(node.expr, self.symbol_table)
        if actual != expected:
            raise SemanticError(f"Type mismatch: expected {expected}, got {actual}")
        node.expr.accept(self)

    def visit_var_decl(self, node: VarDeclNode) -> None:
        if self.symbol_table.lookup(node.name) is not None:
            raise SemanticError(f"Variable already declared: {node.name}")
        actual = expression_type(node.expression, self.symbol_table)
        if actual and actual != node.type_name:
            raise SemanticError(f"Type mismatch: expected {node.type_name}, got {actual}")
        self.symbol_table.insert(node.name, node)
        node.expression.accept(self)

    def visit_block(self, node: BlockNode) -> None:
        for stmt in node.stmts:
            self._scoped(stmt)

    def visit_type(self, node: TypeNode) -> None:
        pass

    def visit_program(self, node: ProgramNode) -> None:
        self._scoped(node.block)

    def visit_if(self, node: IfNode) -> None:
        node.condition.accept(self)
        self._scoped(node.then_block)
        if node.else_block is not None:
            self._scoped(node.else_block)

    def visit_while(self, node: WhileNode) -> None:
        node.condition.accept(self)
        self._scoped(node.block)

    def visit_for(self, node: ForNode) -> None:
        self.symbol_table.push()
        try:
            node.var_decl.accept(self)
            node.condition.accept(self)
            node.increment.accept(self)
            node.block.accept(self)
        finally:
            self.symbol_table.pop()

    def visit_type_cast(self, node: TypeCastNode) -> None:
        node.expr.accept(self)

    def visit_formal_params(self, node: FormalParamsNode) -> None:
        for param in node.params:
            param.accept(self)

    def visit_epsilon(self, node: Epsilon) -> None:
        pass

    def visit_actual_param(self, node: ActualParamNode) -> None:
        node.value.accept(self)

    def visit_func_call(self, node: FuncCallNode) -> None:
        if self.symbol_table.lookup(node.name) is None:
            raise SemanticError(f"Function not declared: {node.name}")
        node.params.accept(self)

    def visit_print(self, node: PrintNode) -> None:
        node.expr.accept(self)

    def visit_binary_op(self, node: BinaryOpNode) -> None:
        node.left.accept(self)
        node.right.accept(self)

    def visit_unary_op(self, node: UnaryOpNode) -> None:
        node.operand.accept(self)

    def visit_boolean(self, node: BooleanNode) -> None:
        pass

    def visit_color(self, node: ColorNode) -> None:
        value = node.value
        if len(value) not in (4, 7) or not value.startswith("#"):
            raise SemanticError(f"Invalid color value: {value}")
        if not _COLOR_PATTERN.match(value):
            raise SemanticError(f"Invalid color value: {value}")

    def visit_builtin_func(self, node: BuiltinFuncNode) -> None:
        for arg in node.args:
            arg.accept(self)

    def visit_return(self, node: ReturnNode) -> None:
        node.expr.accept(self)

    def visit_actual_params(self, node: ActualParamsNode) -> None:
        for param in node.params:
            param.accept(self)

    def visit_expression(self, node: ExpressionNode) -> None:
        node.expr.accept(self)

    def visit_float(self, node: FloatNode) -> None:
        pass

    def visit_formal_param(self, node: FormalParamNode) -> None:
        if self.symbol_table.lookup(node.name) is not None:
            raise SemanticError(f"Parameter already declared: {node.name}")
        self.symbol_table.insert(node.name, node)

    def visit_func_decl(self, node: FuncDeclNode) -> None:
        if self.symbol_table.lookup(node.name) is not None:
            raise SemanticError(f"Function already declared: {node.name}")
        self.symbol_table.insert(node.name, node)
        self.symbol_table.push()
        try:
            node.params.accept(self)
            node.block.accept(self)
            if not has_return_statement(node.block, self, node.return_type):
                raise SemanticError("Function must have a return statement")
        finally:
            self.symbol_table.pop()

    def visit_simple_expression(self, node: SimpleExpression) -> None:
        pass

    def visit_array(self, node: ArrayNode) -> None:
        if node.size < 0:
            raise SemanticError(f"Array size must be greater than 0: {node.size}")
        if node.size < len(node.items):
            raise SemanticError(
                "Array size must be greater than the number of items: "
                f"{node.size} < {len(node.items)}"
            )
        expected = _array_item_type(node)
        for item in node.items:
            item.accept(self)
            actual = expression_type(item, self.symbol_table)
            if actual != expected:
                raise SemanticError(
                    f"Array item type mismatch: expected {expected}, got {actual}"
                )