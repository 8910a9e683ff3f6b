import pytest

from parlc.nodes import (
    ArrayNode,
    BlockNode,
    BuiltinFuncNode,
    FloatNode,
    IntegerNode,
    ReturnNode,
    VarDeclNode,
)
from parlc.parser import Parser
from parlc.semantic import (
    SemanticError,
    SemanticVisitor,
    SymbolTable,
    expression_type,
    has_return_statement,
)
from parlc.statement_rules import build_grammar


def parse(source):
    return Parser(source).parse(build_grammar())


def analyse(source):
    visitor = SemanticVisitor()
    parse(source).accept(visitor)
    return visitor


def declarations(source):
    """Analyse the top-level statements in an open scope and return that scope."""
    visitor = SemanticVisitor()
    visitor.symbol_table.push()
    parse(source).block.accept(visitor)
    return visitor.symbol_table


def expect_error(source, message):
    with pytest.raises(SemanticError) as info:
        analyse(source)
    assert str(info.value) == message


# Cases carried over from the source's own tests.


def test_double_variable_declaration():
    expect_error("let x:int = 5; let x:float = 10.0;\n", "Variable already declared: x")


def test_undeclared_variable():
    expect_error("let x:int = 5; let y:int = x + z;\n", "Variable not declared: z")


def test_valid_variable_declaration():
    table = declarations("let x:int = 5; let y:float = 10.0;\n")
    assert table.lookup("x").type_name == "int"
    assert table.lookup("y").type_name == "float"


def test_valid_variable_declaration_leaves_no_scope_open():
    visitor = analyse("let x:int = 5; let y:float = 10.0;\n")
    assert len(visitor.symbol_table) == 0


def test_valid_variable_assignment():
    table = declarations("let x:int = 5; x = 10;\n")
    assert table.lookup("x").type_name == "int"


def test_invalid_variable_assignment():
    expect_error("let x:int = 5; y = 10;\n", "Variable not declared: y")


def test_valid_variable_usage():
    table = declarations("let x:int = 5; let y:int = x + 10;\n")
    assert table.lookup("y").type_name == "int"


def test_double_func_declaration():
    expect_error(
        "fun foo() -> int { return 1; } fun foo() -> float { return 1.0; }\n",
        "Function already declared: foo",
    )


def test_undeclared_func():
    expect_error(
        "fun foo() -> int { return 1; } let x:int = bar();\n",
        "Function not declared: bar",
    )


def test_valid_func_declaration():
    table = declarations("fun foo() -> int { return 1; } fun bar() -> float { return 1.0; }\n")
    assert table.lookup("foo").return_type == "int"
    assert table.lookup("bar").return_type == "float"


def test_outer_variables_are_seen_by_inner_scopes():
    table = declarations(
        "let x:int = 5; fun foo() -> int { let y:int = x + 1; return y; } let z:int = foo();\n"
    )
    assert table.lookup("z").type_name == "int"
    assert table.lookup("y") is None


def test_inner_variables_are_not_seen_by_outer_scopes():
    expect_error(
        "let x:int = 5; fun foo() -> int { let y:int = 10; return y; } let z:int = x + y;\n",
        "Variable not declared: y",
    )


def test_valid_block():
    table = declarations("let x:int = 5; { let y:int = x + 1; }\n")
    assert table.lookup("x").type_name == "int"
    assert table.lookup("y") is None


def test_invalid_block():
    expect_error(
        "let x:int = 5; { let y:int = x + 1; } { let z:int = y + 1; }\n",
        "Variable not declared: y",
    )


def test_type_mismatch_on_variable_declaration():
    expect_error("let x:int = 5.0;\n", "Type mismatch: expected int, got float")


def test_type_mismatch_on_assignment():
    expect_error("let x:int = 5; x = 10.0;\n", "Type mismatch: expected int, got float")


def test_type_mismatch_on_formal_and_actual_params():
    expect_error(
        "fun foo(x:int) -> int { return x; } let y:float = foo(5.0);\n",
        "Type mismatch: expected int, got float",
    )


def test_argument_number_mismatch():
    expect_error(
        "fun foo(x:int, y:int) -> int { return x + y; } let z:int = foo(5);\n",
        "Argument count mismatch: expected 2, got 1",
    )


def test_return_type_mismatch():
    expect_error(
        "fun foo() -> int { return 5.0; }\n",
        "Return type mismatch: expected int, got float",
    )


def test_function_used_as_operand_mismatch_type():
    expect_error(
        "fun foo() -> int { return 5; } let x:int = foo() + 10.0;\n",
        "Type mismatch: expected int, got float",
    )


def test_array_with_invalid_size():
    expect_error(
        "let x:int[5] = [1, 2, 3, 4, 5]; let y:int[3] = [1, 2, 3, 4];\n",
        "Array size must be greater than the number of items: 3 < 4",
    )


def test_array_with_invalid_type_element():
    expect_error(
        "let x:int[5] = [1, 2, 3, 4, 5]; let y:int[3] = [1, 2, 3.0];\n",
        "Array item type mismatch: expected int, got float",
    )


def test_array_access_with_invalid_type():
    expect_error(
        "let x:int[5] = [1, 2, 3, 4, 5]; let y:int = x[1.0];\n",
        "Invalid offset type: expected int, got float",
    )


# Further behaviour.


def test_valid_array_access():
    table = declarations("let x:int[2] = [1, 2]; let y:int = x[0];")
    assert table.lookup("x").type_name == "int[2]"
    assert table.lookup("y").type_name == "int"


def test_array_element_assignment_type_mismatch():
    expect_error(
        "let x:int[2] = [1, 2]; x[0] = 1.0;",
        "Type mismatch: expected int, got float",
    )


def test_relational_expression_is_bool():
    table = declarations("let b:bool = 1 < 2;")
    assert table.lookup("b").type_name == "bool"


def test_relational_expression_declared_as_int():
    expect_error("let b:int = 1 < 2;", "Type mismatch: expected int, got bool")


def test_type_cast_gives_target_type():
    table = declarations("let f:float = 3 as float;")
    assert table.lookup("f").type_name == "float"


def test_for_loop_variable_is_scoped_to_loop():
    table = declarations("for (let i:int = 0; i < 10; i = i + 1) { __print i; }")
    assert table.lookup("i") is None


def test_missing_return_statement():
    expect_error(
        "fun f() -> int { let a:int = 1; }",
        "Function must have a return statement",
    )


def test_return_only_in_then_branch_is_not_enough():
    expect_error(
        "fun f(x:int) -> int { if (x > 0) { return 1; } }",
        "Function must have a return statement",
    )


def test_return_in_both_branches():
    table = declarations("fun f(x:int) -> int { if (x > 0) { return 1; } else { return 2; } }")
    assert table.lookup("f").return_type == "int"


def test_duplicate_parameter():
    expect_error(
        "fun f(a:int, a:int) -> int { return a; }",
        "Variable already declared: a",
    )


def test_parameter_shadowing_outer_variable():
    expect_error(
        "let a:int = 1; fun f(a:int) -> int { return a; }",
        "Variable already declared: a",
    )


def test_valid_colour():
    table = declarations("let c:colour = #00ff00;")
    assert table.lookup("c").type_name == "colour"


@pytest.mark.parametrize("value", ["#00ff0", "#zzzzzz"])
def test_invalid_colour(value):
    expect_error(f"let c:colour = {value};", f"Invalid color value: {value}")


def test_random_int_argument_type():
    expect_error(
        "let r:int = __random_int(1.0);",
        "Invalid argument type for __random_int: expected int, got float",
    )


def test_write_expects_colour_argument():
    node = BuiltinFuncNode(
        name="__write", args=[IntegerNode(value=1), IntegerNode(value=2), IntegerNode(value=3)]
    )
    with pytest.raises(SemanticError) as info:
        expression_type(node, SymbolTable())
    assert str(info.value) == "Invalid argument type for __write: expected color, got int"


def test_write_box_argument_count_message():
    node = BuiltinFuncNode(name="__write_box", args=[IntegerNode(value=1)])
    with pytest.raises(SemanticError) as info:
        expression_type(node, SymbolTable())
    assert str(info.value) == "Invalid number of arguments for __random_int: expected 5 got 1"


def test_unknown_builtin():
    with pytest.raises(SemanticError) as info:
        expression_type(BuiltinFuncNode(name="__clear", args=[]), SymbolTable())
    assert str(info.value) == "Unknown builtin function: __clear"


def test_height_is_int():
    assert expression_type(BuiltinFuncNode(name="__height"), SymbolTable()) == "int"


def test_negative_array_size():
    visitor = SemanticVisitor()
    with pytest.raises(SemanticError) as info:
        ArrayNode(type_name="int[1]", items=[], size=-1).accept(visitor)
    assert str(info.value) == "Array size must be greater than 0: -1"


def test_symbol_table_push_copies_current_scope():
    table = SymbolTable()
    outer = VarDeclNode(name="x", type_name="int")
    table.push()
    table.insert("x", outer)
    table.push()
    assert table.lookup("x") is outer
    table.insert("y", VarDeclNode(name="y", type_name="float"))
    table.pop()
    assert table.lookup("y") is None
    assert len(table) == 1


def test_symbol_table_without_scope():
    table = SymbolTable()
    table.insert("x", VarDeclNode(name="x"))
    table.pop()
    assert table.lookup("x") is None
    assert len(table) == 0


def test_has_return_statement_direct():
    visitor = SemanticVisitor()
    assert has_return_statement(ReturnNode(expr=IntegerNode(value=1)), visitor, "int") is True
    assert has_return_statement(BlockNode(stmts=[]), visitor, "int") is False
    with pytest.raises(SemanticError) as info:
        has_return_statement(ReturnNode(expr=FloatNode(value=1.0)), visitor, "int")
    assert str(info.value) == "Return type mismatch: expected int, got float"