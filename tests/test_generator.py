import pytest

from parlc.generator import (
    FrameStack,
    GeneratorVisitor,
    count_actual_params,
    count_var_decls,
)
from parlc.nodes import Epsilon
from parlc.parser import Parser
from parlc.statement_rules import build_grammar


def _tree(source):
    return Parser(source).parse(build_grammar())


def _generate(source):
    generator = GeneratorVisitor()
    _tree(source).accept(generator)
    return generator.instructions


def _offset(instruction, prefix):
    assert instruction.startswith(prefix)
    return int(instruction[len(prefix):])


def test_frame_stack_define_and_resolve_levels():
    frames = FrameStack()
    frames.push_frame()
    a = frames.define("a", "int")
    b = frames.define("b", "float")
    frames.push_frame()
    c = frames.define("c", "bool")
    assert b.frame_index == a.frame_index + 1
    assert frames.resolve("a") == (a, 1)
    assert frames.resolve("c") == (c, 0)
    assert frames.resolve("missing") is None
    frames.pop_frame()
    assert frames.resolve("c") is None
    assert frames.resolve("b") == (b, 0)


def test_define_without_frame_raises():
    with pytest.raises(RuntimeError, match="no frame to define symbol in"):
        FrameStack().define("x", "int")


def test_pop_frame_on_empty_stack_is_harmless():
    frames = FrameStack()
    frames.pop_frame()
    assert len(frames) == 0


def test_count_var_decls():
    root = _tree("let x:int = 1; let a:int[3] = [1, 2, 3]; fun f() -> int { return 1; }")
    assert count_var_decls(root.block) == 5
    assert count_var_decls(Epsilon()) == 0


def test_count_actual_params_expands_arrays():
    call = _tree("let y:int = foo(arr, n, 7);").block.stmts[0].expression
    generator = GeneratorVisitor()
    generator.symbol_table.push_frame()
    generator.symbol_table.define("arr", "int[4]")
    generator.symbol_table.define("n", "int")
    assert count_actual_params(call.params, generator) == 6


def test_program_prologue_and_epilogue():
    instructions = _generate("let x:int = 5;")
    assert instructions[:4] == [".main", "push #PC+3", "jmp", "halt"]
    assert instructions[-2:] == ["cframe", "halt"]


def test_var_decl_worked_example():
    assert _generate("let x:int = 5;") == [
        ".main", "push #PC+3", "jmp", "halt",
        "push 1", "oframe",
        "push 5", "push 0", "push 0", "st",
        "cframe", "halt",
    ]


def test_binary_operands_pushed_right_first():
    instructions = _generate("let x:int = 7 + 8;")
    assert instructions.index("push 8") < instructions.index("push 7")
    assert instructions[instructions.index("push 7") + 1] == "add"


def test_relational_operator():
    instructions = _generate("let b:bool = 3 < 4;")
    assert instructions[instructions.index("push 3") + 1] == "lt"


def test_float_literal_uses_fixed_format():
    assert "push 2.500000" in _generate("let f:float = 2.5;")


def test_unary_not():
    instructions = _generate("let b:bool = not true;")
    assert instructions[instructions.index("not") - 1] == "push 1"


def test_array_declaration_stores_with_sta():
    instructions = _generate("let a:int[3] = [4, 5, 6];")
    start = instructions.index("oframe") + 1
    end = instructions.index("sta") + 1
    assert instructions[start:end] == [
        "push 6", "push 5", "push 4", "push 3", "push 0", "push 0", "sta",
    ]


def test_print_array_uses_printa():
    instructions = _generate("let a:int[2] = [1, 2]; __print a;")
    p = instructions.index("printa")
    assert instructions[p - 3:p + 1] == ["push 2", "pusha [0:0]", "push 2", "printa"]


def test_print_scalar():
    instructions = _generate("let x:int = 1; __print x;")
    assert instructions[instructions.index("print") - 1] == "push [0:0]"


def test_indexed_variable_access():
    instructions = _generate("let a:int[2] = [1, 2]; let y:int = a[1];")
    assert "push +[0:0]" in instructions


@pytest.mark.parametrize(
    "source, expected",
    [
        ("__write 1, 2, #ff0000;", ["push #ff0000", "push 2", "push 1", "write"]),
        (
            "__write_box 1, 2, 3, 4, #00ff00;",
            ["push #00ff00", "push 4", "push 3", "push 2", "push 1", "writebox"],
        ),
        ("__delay 100;", ["push 100", "delay"]),
        ("__clear #000000;", ["push #000000", "clear"]),
        ("let r:int = __random_int(10);", ["push 10", "irnd"]),
        ("let w:int = __width;", ["width"]),
        ("let h:int = __height;", ["height"]),
    ],
)
def test_builtins(source, expected):
    instructions = _generate(source)
    last = instructions.index(expected[-1])
    assert instructions[last - len(expected) + 1:last + 1] == expected


def test_function_declaration_jumps_over_body():
    instructions = _generate("fun foo() -> int { return 1; }")
    label = instructions.index(".foo")
    skip = label - 2
    n = _offset(instructions[skip], "push #PC+")
    assert instructions[skip + n - 1] == "ret"
    assert skip + n == len(instructions) - 2
    assert instructions[label + 2] == "alloc"


def test_function_call():
    instructions = _generate("fun foo(a:int) -> int { return a; } let y:int = foo(9);")
    c = instructions.index("call")
    assert instructions[c - 3:c + 1] == ["push 9", "push 1", "push .foo", "call"]
    label = instructions.index(".foo")
    assert instructions[label + 1:label + 3] == ["push 1", "alloc"]


def test_array_return_uses_reta():
    instructions = _generate("fun f(a:int[3]) -> int[3] { return a; }")
    label = instructions.index(".f")
    assert instructions[label + 1:label + 3] == ["push 3", "alloc"]
    r = instructions.index("reta")
    assert instructions[r - 3:r + 1] == ["push 3", "pusha [0:0]", "push 3", "reta"]


def test_while_loop_jumps():
    instructions = _generate("let x:int = 0; while (x < 3) { x = x + 1; }")
    branch = instructions.index("cjmp")
    exit_offset = _offset(instructions[branch + 1], "push #PC+")
    end = branch + 1 + exit_offset
    assert instructions[end] == "cframe"
    oframe = max(i for i, ins in enumerate(instructions[:branch]) if ins == "oframe")
    assert instructions[end - 2] == f"push {oframe + 1}"
    assert instructions[end - 1] == "jmp"


def test_for_loop_jumps():
    instructions = _generate("for (let i:int = 0; i < 3; i = i + 1) { __print i; }")
    branch = instructions.index("cjmp")
    exit_offset = _offset(instructions[branch + 1], "push #PC+")
    end = branch + 1 + exit_offset
    assert instructions[end] == "cframe"
    back = end - 2
    target = back - _offset(instructions[back], "push #PC-")
    assert instructions[branch - 2] == "lt"
    assert target == branch - 4


def test_if_without_else():
    instructions = _generate("let x:int = 1; if (x > 0) { x = 2; }")
    branch = instructions.index("cjmp")
    else_target = branch + 1 + _offset(instructions[branch + 1], "push #PC+")
    assert instructions[else_target] == "cframe"
    assert instructions[else_target - 1] == "jmp"
    skip = else_target - 2
    after = skip + _offset(instructions[skip], "push #PC+")
    assert instructions[after:] == ["cframe", "halt"]


def test_if_with_else():
    instructions = _generate("let x:int = 1; if (x > 0) { x = 2; } else { x = 3; }")
    branch = instructions.index("cjmp")
    else_target = branch + 1 + _offset(instructions[branch + 1], "push #PC+")
    assert instructions[else_target] == "push 3"
    assert instructions[else_target - 1] == "jmp"


def test_undefined_variable_raises():
    with pytest.raises(LookupError, match="undefined symbol: x"):
        _generate("x = 1;")


def test_unknown_expression_type_raises():
    with pytest.raises(ValueError, match="unknown node type"):
        _generate("__print __width;")