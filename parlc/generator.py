"""Code generation: lowers a syntax tree to stack-machine instructions."""

from __future__ import annotations

from dataclasses import dataclass
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

_BINARY_OPCODES = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
    "%": "mod",
    "and": "and",
    "or": "or",
    "==": "eq",
    "<": "lt",
    "<=": "le",
    ">": "gt",
    ">=": "ge",
}

_UNARY_OPCODES = {"-": "dec", "+": "inc", "not": "not"}


def _array_size(type_name: str) -> str:
    """The text between the brackets of an array type such as ``int[3]``."""
    return type_name[type_name.index("[") + 1 : type_name.rindex("]")]


@dataclass(frozen=True)
class SymbolGen:
    """A symbol placed in a frame, at ``frame_index`` within that frame."""

    name: str
    frame_index: int
    type_name: str


class FrameStack:
    """Stack of frames mapping names to their slots; level 0 is the top frame."""

    def __init__(self) -> None:
        self._frames: list[dict[str, SymbolGen]] = []

    def __len__(self) -> int:
        return len(self._frames)

    def push_frame(self) -> None:
        """Open a new, empty frame on top."""
        self._frames.append({})

    def pop_frame(self) -> None:
        """Drop the top frame; does nothing when there is none."""
        if self._frames:
            self._frames.pop()

    def define(self, name: str, type_name: str) -> SymbolGen:
        """Place ``name`` in the top frame after the symbols already there."""
        if not self._frames:
            raise RuntimeError("no frame to define symbol in")
        frame = self._frames[-1]
        symbol = SymbolGen(name=name, frame_index=len(frame), type_name=type_name)
        frame[name] = symbol
        return symbol

    def resolve(self, name: str) -> Optional[tuple[SymbolGen, int]]:
        """The symbol and its frame level, searching from the top; None if absent."""
        for level, frame in enumerate(reversed(self._frames)):
            symbol = frame.get(name)
            if symbol is not None:
                return symbol, level
        return None


def count_var_decls(node: Node) -> int:
    """Number of frame slots the declarations directly in ``node`` need."""
    if isinstance(node, BlockNode):
        return sum(count_var_decls(stmt) for stmt in node.stmts)
    if isinstance(node, VarDeclNode):
        if isinstance(node.expression, ArrayNode):
            return len(node.expression.items)
        return 1
    if isinstance(node, FuncDeclNode):
        return 1
    return 0


def _slots_of(type_name: str) -> int:
    return int(_array_size(type_name)) if "[" in type_name else 1


def count_actual_params(node: ActualParamsNode, visitor: GeneratorVisitor) -> int:
    """Number of values the arguments of a call push; arrays count per element."""
    count = 0
    for param in node.params:
        if isinstance(param, ArrayNode):
            count += len(_array_size(param.type_name))
        elif isinstance(param, FuncCallNode):
            count += _slots_of(visitor._lookup(param.name).type_name)
        elif isinstance(param, VariableNode):
            count += _slots_of(visitor._lookup(param.token.lexeme).type_name)
        else:
            count += 1
    return count


class GeneratorVisitor(NodeVisitor):
    """Emits instructions for each visited node into ``instructions``."""

    def __init__(self) -> None:
        self.symbol_table = FrameStack()
        self.instructions: list[str] = []

    def _emit(self, instruction: str) -> int:
        self.instructions.append(instruction)
        return len(self.instructions) - 1

    def _resolve(self, name: str) -> tuple[SymbolGen, int]:
        found = self.symbol_table.resolve(name)
        if found is None:
            raise LookupError(f"undefined symbol: {name}")
        return found

    def _lookup(self, name: str) -> SymbolGen:
        return self._resolve(name)[0]

    def _expression_type(self, node: Node) -> str:
        if isinstance(node, IntegerNode):
            return "int"
        if isinstance(node, FloatNode):
            return "float"
        if isinstance(node, BooleanNode):
            return "bool"
        if isinstance(node, ColorNode):
            return "colour"
        if isinstance(node, VariableNode):
            return self._lookup(node.token.lexeme).type_name
        if isinstance(node, ArrayNode):
            return node.type_name
        if isinstance(node, FuncCallNode):
            return self._lookup(node.name).type_name
        if isinstance(node, BinaryOpNode):
            return self._expression_type(node.left)
        if isinstance(node, UnaryOpNode):
            return self._expression_type(node.operand)
        if isinstance(node, TypeNode):
            return node.name
        if isinstance(node, TypeCastNode):
            return node.type_name
        if isinstance(node, (ReturnNode, AssignmentNode)):
            return self._expression_type(node.expr)
        raise ValueError(f"unknown node type: {type(node).__name__}")

    def _open_frame_if_block(self, node: Node) -> None:
        if isinstance(node, BlockNode):
            self._emit(f"push {count_var_decls(node)}")
            self._emit("oframe")
            node.accept(self)
            self._emit("cframe")
        else:
            node.accept(self)

    # Entry points

    def visit_program(self, node: ProgramNode) -> None:
        self._emit(".main")
        self._emit("push #PC+3")
        self._emit("jmp")
        self._emit("halt")
        self.symbol_table.push_frame()
        self._open_frame_if_block(node.block)
        self.symbol_table.pop_frame()
        self._emit("halt")

    def visit_block(self, node: BlockNode) -> None:
        for stmt in node.stmts:
            self._open_frame_if_block(stmt)

    # Built-ins

    def _accept_reversed(self, nodes: list) -> None:
        for item in reversed(nodes):
            item.accept(self)

    def visit_builtin_func(self, node: BuiltinFuncNode) -> None:
        name = node.name
        if name == "__delay":
            node.args[0].accept(self)
            self._emit("delay")
        elif name == "__width":
            self._emit("width")
        elif name == "__height":
            self._emit("height")
        elif name == "__write":
            self._accept_reversed(node.args)
            self._emit("write")
        elif name == "__write_box":
            self._accept_reversed(node.args)
            self._emit("writebox")
        elif name == "__print":
            self._accept_reversed(node.args)
            type_name = self._expression_type(node.args[0])
            if "[" in type_name:
                self._emit(f"push {_array_size(type_name)}")
                self._emit("printa")
            else:
                self._emit("print")
        elif name == "__random_int":
            node.args[0].accept(self)
            self._emit("irnd")
        elif name == "__clear":
            node.args[0].accept(self)
            self._emit("clear")

    # Functions

    def visit_func_decl(self, node: FuncDeclNode) -> None:
        self.symbol_table.define(node.name, node.return_type)
        skip_body = self._emit("push TBD")
        self._emit("jmp")
        self.symbol_table.push_frame()
        self._emit(f".{node.name}")
        param_slots = sum(_slots_of(param.type_name) for param in node.params.params)
        self._emit(f"push {count_var_decls(node.block) + param_slots}")
        self._emit("alloc")
        node.params.accept(self)
        node.block.accept(self)
        self.instructions[skip_body] = f"push #PC+{len(self.instructions) - skip_body}"
        self.symbol_table.pop_frame()

    def visit_formal_params(self, node: FormalParamsNode) -> None:
        for param in node.params:
            self.symbol_table.define(param.name, param.type_name)

    def visit_formal_param(self, node: FormalParamNode) -> None:
        pass

    def visit_actual_params(self, node: ActualParamsNode) -> None:
        pass

    def visit_actual_param(self, node: ActualParamNode) -> None:
        pass

    def visit_func_call(self, node: FuncCallNode) -> None:
        self._accept_reversed(node.params.params)
        self._emit(f"push {count_actual_params(node.params, self)}")
        self._emit(f"push .{node.name}")
        self._emit("call")

    def visit_print(self, node: PrintNode) -> None:
        pass

    def visit_return(self, node: ReturnNode) -> None:
        type_name = self._expression_type(node.expr)
        node.expr.accept(self)
        if "[" in type_name:
            self._emit(f"push {_array_size(type_name)}")
            self._emit("reta")
        else:
            self._emit("ret")

    # Literals and operators

    def visit_integer(self, node: IntegerNode) -> None:
        self._emit(f"push {node.value}")

    def visit_float(self, node: FloatNode) -> None:
        self._emit(f"push {node.value:f}")

    def visit_boolean(self, node: BooleanNode) -> None:
        self._emit(f"push {1 if node.value else 0}")

    def visit_color(self, node: ColorNode) -> None:
        self._emit(f"push {node.value}")

    def visit_binary_op(self, node: BinaryOpNode) -> None:
        node.right.accept(self)
        node.left.accept(self)
        opcode = _BINARY_OPCODES.get(node.operator)
        if opcode is not None:
            self._emit(opcode)

    def visit_unary_op(self, node: UnaryOpNode) -> None:
        node.operand.accept(self)
        opcode = _UNARY_OPCODES.get(node.operator)
        if opcode is not None:
            self._emit(opcode)

    def visit_type(self, node: TypeNode) -> None:
        pass

    # Variables and assignments

    def visit_var_decl(self, node: VarDeclNode) -> None:
        symbol = self.symbol_table.define(node.name, node.type_name)
        _, level = self._resolve(node.name)
        node.expression.accept(self)
        self._emit(f"push {symbol.frame_index}")
        self._emit(f"push {level}")
        self._emit("sta" if isinstance(node.expression, ArrayNode) else "st")

    def visit_assignment(self, node: AssignmentNode) -> None:
        node.expr.accept(self)
        symbol, level = self._resolve(node.target.token.lexeme)
        self._emit(f"push {symbol.frame_index}")
        self._emit(f"push {level}")
        self._emit("st")

    def visit_variable(self, node: VariableNode) -> None:
        symbol, level = self._resolve(node.token.lexeme)
        if not isinstance(node.offset, Epsilon):
            node.offset.accept(self)
            self._emit(f"push +[{symbol.frame_index}:{level}]")
            return
        if "[" in symbol.type_name:
            self._emit(f"push {_array_size(symbol.type_name)}")
            self._emit(f"pusha [{symbol.frame_index}:{level}]")
            return
        self._emit(f"push [{symbol.frame_index}:{level}]")

    def visit_simple_expression(self, node: SimpleExpression) -> None:
        pass

    def visit_expression(self, node: ExpressionNode) -> None:
        pass

    # Control flow

    def visit_while(self, node: WhileNode) -> None:
        self.symbol_table.push_frame()
        self._emit(f"push {count_var_decls(node.block)}")
        condition_start = self._emit("oframe") + 1
        node.condition.accept(self)
        self._emit("push #PC+4")
        branch = self._emit("cjmp")
        exit_jump = self._emit("push #TBD")
        self._emit("jmp")
        node.block.accept(self)
        self._emit(f"push {condition_start}")
        self._emit("jmp")
        end = self._emit("cframe")
        self.instructions[exit_jump] = f"push #PC+{end - branch - 1}"
        self.symbol_table.pop_frame()

    def visit_for(self, node: ForNode) -> None:
        self.symbol_table.push_frame()
        slots = count_var_decls(node.block) + count_var_decls(node.var_decl)
        self._emit(f"push {slots}")
        self._emit("oframe")
        node.var_decl.accept(self)
        node.condition.accept(self)
        self._emit("push #PC+4")
        branch = self._emit("cjmp")
        exit_jump = self._emit("push #TBD")
        self._emit("jmp")
        before_block = len(self.instructions)
        node.block.accept(self)
        block_size = len(self.instructions) - before_block
        before_increment = len(self.instructions)
        node.increment.accept(self)
        increment_size = len(self.instructions) - before_increment
        self._emit(f"push #PC-{7 + increment_size + block_size}")
        self._emit("jmp")
        end = self._emit("cframe")
        self.instructions[exit_jump] = f"push #PC+{end - branch - 1}"
        self.symbol_table.pop_frame()

    def visit_if(self, node: IfNode) -> None:
        self.symbol_table.push_frame()
        self._emit(f"push {count_var_decls(node.then_block)}")
        self._emit("oframe")
        node.condition.accept(self)
        self._emit("push #PC+4")
        branch = self._emit("cjmp")
        else_jump = self._emit("push #TBD")
        self._emit("jmp")
        node.then_block.accept(self)
        then_end = self._emit("cframe")
        skip_else = self._emit("push #PC+TBD")
        self._emit("jmp")
        if node.else_block is not None:
            self.instructions[else_jump] = f"push #PC+{skip_else - branch + 1}"
        else:
            self.instructions[else_jump] = f"push #PC+{then_end - branch - 2}"
        before_else = len(self.instructions)
        if node.else_block is not None:
            node.else_block.accept(self)
        self._emit("cframe")
        else_size = len(self.instructions) - before_else
        self.instructions[skip_else] = f"push #PC+{else_size + 2}"
        self.symbol_table.pop_frame()

    def visit_type_cast(self, node: TypeCastNode) -> None:
        node.expr.accept(self)

    def visit_epsilon(self, node: Epsilon) -> None:
        pass

    def visit_array(self, node: ArrayNode) -> None:
        self._accept_reversed(node.items)
        self._emit(f"push {len(node.items)}")