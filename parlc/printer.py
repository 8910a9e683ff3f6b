"""Visitor that prints an indented outline of a syntax tree."""

from __future__ import annotations

import sys
from typing import Any, Optional, TextIO

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


def _show(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


class PrintNodesVisitor(NodeVisitor):
    """Writes one line per visited node, indented by tabs, and counts nodes."""

    def __init__(self, out: Optional[TextIO] = None) -> None:
        self.name = "Print Tree Visitor"
        self.node_count = 0
        self.tab_count = 0
        self._out = out

    @property
    def _stream(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def _tabs(self) -> str:
        return "\t" * self.tab_count

    def _line(self, *parts: Any) -> None:
        print(self._tabs, *(_show(part) for part in parts), file=self._stream)

    def _raw(self, text: str) -> None:
        print(text, file=self._stream)

    def visit_integer(self, node: IntegerNode) -> None:
        self.node_count += 1
        self._line("Integer value::", node.value)

    def visit_variable(self, node: VariableNode) -> None:
        self.node_count += 1
        self._line("Variable =>", node.token.lexeme)

    def visit_assignment(self, node: AssignmentNode) -> None:
        self.node_count += 1
        self._line("Assignment node =>")
        self.tab_count += 1
        node.target.accept(self)
        node.expr.accept(self)
        self.tab_count -= 1

    def visit_var_decl(self, node: VarDeclNode) -> None:
        self.node_count += 1
        self._raw(f"{self._tabs}Var decl node => {node.name} {node.type_name}")
        self.tab_count += 1
        node.expression.accept(self)
        self.tab_count -= 1

    def visit_block(self, node: BlockNode) -> None:
        self.node_count += 1
        self._line("New Block =>")
        self.tab_count += 1
        for stmt in node.stmts:
            stmt.accept(self)
        self.tab_count -= 1

    def visit_binary_op(self, node: BinaryOpNode) -> None:
        self.node_count += 1
        self._line("Binary Op node =>", node.operator)
        self.tab_count += 1
        node.left.accept(self)
        node.right.accept(self)
        self.tab_count -= 1

    def visit_expression(self, node: ExpressionNode) -> None:
        self.node_count += 1
        self._raw(f"{self._tabs}Expression node =>{node.type_name}")
        self.tab_count += 1
        node.expr.accept(self)
        self.tab_count -= 1

    def visit_simple_expression(self, node: SimpleExpression) -> None:
        self.node_count += 1
        self._line("Simple node =>")

    def visit_program(self, node: ProgramNode) -> None:
        self.node_count += 1
        self._line("Program node =>")
        node.block.accept(self)

    def visit_print(self, node: PrintNode) -> None:
        self.node_count += 1
        self._line("Print node =>")
        node.expr.accept(self)

    def visit_if(self, node: IfNode) -> None:
        # The else part is printed one level shallower than the node itself,
        # and the indentation stays one level lower afterwards.
        self.node_count += 1
        self._line("If node =>")
        self.tab_count += 1
        node.condition.accept(self)
        node.then_block.accept(self)
        self.tab_count -= 2
        self._line("Else Block =>")
        self.tab_count += 1
        if node.else_block is not None:
            node.else_block.accept(self)
        self.tab_count -= 1

    def visit_while(self, node: WhileNode) -> None:
        self.node_count += 1
        self._line("While node =>")
        self.tab_count += 1
        node.condition.accept(self)
        node.block.accept(self)
        self.tab_count -= 1

    def visit_type_cast(self, node: TypeCastNode) -> None:
        self.node_count += 1
        self._line("Type cast node:: ", node.type_name, " =>")
        self.tab_count += 1
        node.expr.accept(self)
        self.tab_count -= 1

    def visit_epsilon(self, node: Epsilon) -> None:
        self.node_count += 1
        self._line("Epsilon node")

    def _section(self, title: str, child: Any) -> None:
        self._line(title)
        self.tab_count += 1
        child.accept(self)
        self.tab_count -= 1

    def visit_for(self, node: ForNode) -> None:
        # Sections are nested one level deeper; the level is not restored.
        self.node_count += 1
        self._line("For node =>")
        self.tab_count += 1
        self._section("For var decl =>", node.var_decl)
        self._section("For condition =>", node.condition)
        self._section("For increment =>", node.increment)
        self._section("For block =>", node.block)

    def visit_func_decl(self, node: FuncDeclNode) -> None:
        # Sections are nested one level deeper; the level is not restored.
        self.node_count += 1
        self._line("Function decl node =>", node.name, ":", node.return_type)
        self.tab_count += 1
        self._section("Function params =>", node.params)
        self._section("Function block =>", node.block)

    def visit_formal_params(self, node: FormalParamsNode) -> None:
        self.node_count += 1
        self._line("Formal params node =>")
        self.tab_count += 1
        for param in node.params:
            param.accept(self)
        self.tab_count -= 1

    def visit_formal_param(self, node: FormalParamNode) -> None:
        self.node_count += 1
        self._line("Formal param node:: ", node.name, ":", node.type_name)

    def visit_type(self, node: TypeNode) -> None:
        self.node_count += 1
        self._line("Type node =>")
        self._raw(node.name)

    def visit_float(self, node: FloatNode) -> None:
        self.node_count += 1
        self._line("Float value::", node.value)

    def visit_builtin_func(self, node: BuiltinFuncNode) -> None:
        self.node_count += 1
        self._line("Builtin function node =>", node.name)
        self.tab_count += 1
        for arg in node.args:
            arg.accept(self)
        self.tab_count -= 1

    def visit_func_call(self, node: FuncCallNode) -> None:
        self.node_count += 1
        self._line("Function call node =>", node.name)
        self.tab_count += 1
        node.params.accept(self)
        self.tab_count -= 1

    def visit_actual_params(self, node: ActualParamsNode) -> None:
        self.node_count += 1
        self._line("Actual params node =>")
        self.tab_count += 1
        for param in node.params:
            param.accept(self)
        self.tab_count -= 1

    def visit_actual_param(self, node: ActualParamNode) -> None:
        self.node_count += 1
        self._line("Actual param node =>")

    def visit_unary_op(self, node: UnaryOpNode) -> None:
        self.node_count += 1
        self._line("Unary Op node =>", node.operator)
        self.tab_count += 1
        node.operand.accept(self)
        self.tab_count -= 1

    def visit_return(self, node: ReturnNode) -> None:
        self.node_count += 1
        self._line("Return node =>")
        self.tab_count += 1
        node.expr.accept(self)
        self.tab_count -= 1

    def visit_color(self, node: ColorNode) -> None:
        self.node_count += 1
        self._line("Color node :: ", node.value)

    def visit_boolean(self, node: BooleanNode) -> None:
        self.node_count += 1
        self._line("Boolean value::", node.value)

    def visit_array(self, node: ArrayNode) -> None:
        self.node_count += 1
        self._line("Array node =>")
        self.tab_count += 1
        for item in node.items:
            item.accept(self)
        self.tab_count -= 1