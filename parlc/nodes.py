"""Syntax tree nodes and the visitor interface that walks them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from parlc.lexer import Token, TokenType


class NodeVisitor:
    """Base visitor: every ``visit_*`` method falls back to ``generic_visit``."""

    def generic_visit(self, node: Node) -> Any:
        """Called for node kinds the visitor does not handle; does nothing."""
        return None

    def visit_integer(self, node: IntegerNode) -> Any:
        return self.generic_visit(node)

    def visit_assignment(self, node: AssignmentNode) -> Any:
        return self.generic_visit(node)

    def visit_variable(self, node: VariableNode) -> Any:
        return self.generic_visit(node)

    def visit_block(self, node: BlockNode) -> Any:
        return self.generic_visit(node)

    def visit_var_decl(self, node: VarDeclNode) -> Any:
        return self.generic_visit(node)

    def visit_binary_op(self, node: BinaryOpNode) -> Any:
        return self.generic_visit(node)

    def visit_expression(self, node: ExpressionNode) -> Any:
        return self.generic_visit(node)

    def visit_simple_expression(self, node: SimpleExpression) -> Any:
        return self.generic_visit(node)

    def visit_program(self, node: ProgramNode) -> Any:
        return self.generic_visit(node)

    def visit_print(self, node: PrintNode) -> Any:
        return self.generic_visit(node)

    def visit_if(self, node: IfNode) -> Any:
        return self.generic_visit(node)

    def visit_while(self, node: WhileNode) -> Any:
        return self.generic_visit(node)

    def visit_epsilon(self, node: Epsilon) -> Any:
        return self.generic_visit(node)

    def visit_type_cast(self, node: TypeCastNode) -> Any:
        return self.generic_visit(node)

    def visit_for(self, node: ForNode) -> Any:
        return self.generic_visit(node)

    def visit_func_decl(self, node: FuncDeclNode) -> Any:
        return self.generic_visit(node)

    def visit_formal_params(self, node: FormalParamsNode) -> Any:
        return self.generic_visit(node)

    def visit_formal_param(self, node: FormalParamNode) -> Any:
        return self.generic_visit(node)

    def visit_type(self, node: TypeNode) -> Any:
        return self.generic_visit(node)

    def visit_float(self, node: FloatNode) -> Any:
        return self.generic_visit(node)

    def visit_builtin_func(self, node: BuiltinFuncNode) -> Any:
        return self.generic_visit(node)

    def visit_func_call(self, node: FuncCallNode) -> Any:
        return self.generic_visit(node)

    def visit_actual_params(self, node: ActualParamsNode) -> Any:
        return self.generic_visit(node)

    def visit_actual_param(self, node: ActualParamNode) -> Any:
        return self.generic_visit(node)

    def visit_unary_op(self, node: UnaryOpNode) -> Any:
        return self.generic_visit(node)

    def visit_boolean(self, node: BooleanNode) -> Any:
        return self.generic_visit(node)

    def visit_color(self, node: ColorNode) -> Any:
        return self.generic_visit(node)

    def visit_return(self, node: ReturnNode) -> Any:
        return self.generic_visit(node)

    def visit_array(self, node: ArrayNode) -> Any:
        return self.generic_visit(node)


class Node:
    """A syntax tree node; ``accept`` hands it to the matching visitor method."""

    _visit: ClassVar[Optional[str]] = None

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_<kind>``; nodes without a kind are ignored."""
        if self._visit is None:
            return None
        return getattr(visitor, "visit_" + self._visit)(self)


@dataclass
class Epsilon(Node):
    """The empty production."""

    _visit: ClassVar[Optional[str]] = "epsilon"


@dataclass
class BlockNode(Node):
    name: str = ""
    stmts: list[Node] = field(default_factory=list)

    _visit: ClassVar[Optional[str]] = "block"


@dataclass
class ProgramNode(Node):
    block: BlockNode = field(default_factory=BlockNode)

    _visit: ClassVar[Optional[str]] = "program"


@dataclass
class IntegerNode(Node):
    name: str = ""
    value: int = 0

    _visit: ClassVar[Optional[str]] = "integer"


@dataclass
class VariableNode(Node):
    token: Token = field(default_factory=lambda: Token(TokenType.IDENTIFIER, ""))
    offset: Node = field(default_factory=Epsilon)

    _visit: ClassVar[Optional[str]] = "variable"


@dataclass
class AssignmentNode(Node):
    target: VariableNode = field(default_factory=VariableNode)
    expr: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "assignment"


@dataclass
class TypeNode(Node):
    """A type name; visitors never receive it."""

    name: str = ""


@dataclass
class VarDeclNode(Node):
    name: str = ""
    type_name: str = ""
    expression: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "var_decl"


@dataclass
class ExpressionNode(Node):
    expr: Optional[Node] = None
    type_name: str = ""

    _visit: ClassVar[Optional[str]] = "expression"


@dataclass
class LiteralNode(Node):
    """A bare literal token; visitors never receive it."""

    token: Token = field(default_factory=lambda: Token(TokenType.ERROR, ""))


@dataclass
class SimpleExpression(Node):
    """A single token wrapped as a leaf."""

    token: Token = field(default_factory=lambda: Token(TokenType.ERROR, ""))

    _visit: ClassVar[Optional[str]] = "simple_expression"


@dataclass
class BinaryOpNode(Node):
    operator: str = ""
    left: Optional[Node] = None
    right: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "binary_op"


@dataclass
class PrintNode(Node):
    expr: ExpressionNode = field(default_factory=ExpressionNode)

    _visit: ClassVar[Optional[str]] = "print"


@dataclass
class OpList(Node):
    """Operator/operand pairs still to be folded into binary operations."""

    pairs: list[tuple[str, Node]] = field(default_factory=list)


@dataclass
class IfNode(Node):
    condition: Optional[Node] = None
    then_block: Optional[Node] = None
    else_block: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "if"


@dataclass
class WhileNode(Node):
    condition: Optional[Node] = None
    block: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "while"


@dataclass
class TypeCastNode(Node):
    type_name: str = ""
    expr: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "type_cast"


@dataclass
class ForNode(Node):
    var_decl: Optional[Node] = None
    condition: Optional[Node] = None
    increment: Optional[Node] = None
    block: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "for"


@dataclass
class FormalParamsNode(Node):
    params: list[Node] = field(default_factory=list)

    _visit: ClassVar[Optional[str]] = "formal_params"


@dataclass
class FuncDeclNode(Node):
    name: str = ""
    return_type: str = ""
    params: Node = field(default_factory=FormalParamsNode)
    block: Node = field(default_factory=BlockNode)

    _visit: ClassVar[Optional[str]] = "func_decl"


@dataclass
class FormalParamNode(Node):
    name: str = ""
    type_name: str = ""

    _visit: ClassVar[Optional[str]] = "formal_param"


@dataclass
class FloatNode(Node):
    name: str = ""
    value: float = 0.0

    _visit: ClassVar[Optional[str]] = "float"


@dataclass
class BuiltinFuncNode(Node):
    name: str = ""
    args: list[Node] = field(default_factory=list)

    _visit: ClassVar[Optional[str]] = "builtin_func"


@dataclass
class ActualParamsNode(Node):
    params: list[Node] = field(default_factory=list)

    _visit: ClassVar[Optional[str]] = "actual_params"


@dataclass
class FuncCallNode(Node):
    name: str = ""
    params: Node = field(default_factory=ActualParamsNode)

    _visit: ClassVar[Optional[str]] = "func_call"


@dataclass
class ActualParamNode(Node):
    value: Optional[Node] = None
    type_name: str = ""

    _visit: ClassVar[Optional[str]] = "actual_param"


@dataclass
class UnaryOpNode(Node):
    operator: str = ""
    operand: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "unary_op"


@dataclass
class BooleanNode(Node):
    value: bool = False

    _visit: ClassVar[Optional[str]] = "boolean"


@dataclass
class ColorNode(Node):
    value: str = ""

    _visit: ClassVar[Optional[str]] = "color"


@dataclass
class ReturnNode(Node):
    expr: Optional[Node] = None

    _visit: ClassVar[Optional[str]] = "return"


@dataclass
class ArrayNode(Node):
    type_name: str = ""
    items: list[Node] = field(default_factory=list)
    size: int = 0

    _visit: ClassVar[Optional[str]] = "array"