# parlc

`parlc` compiles programs written in PArL, a small typed language for a
pixel-pad machine, into listings of stack-machine instructions.

The compiler runs in four stages:

1. **Lexing**: `parlc.lexer.Lexer` is a table-driven finite automaton
   that turns source text into `Token`s, including comments, whitespace
   and newlines. Lexing stops after the first `END` or `ERROR` token.
2. **Parsing**: `parlc.parser.Parser` is an LL(1) parser. Its table is
   computed from the grammar's FIRST and FOLLOW sets by
   `parlc.grammar.build_table`. The complete grammar comes from
   `parlc.statement_rules.build_grammar`. The parser builds a syntax tree
   from the node classes in `parlc.nodes` and raises
   `parlc.parser.ParseError` when the input does not match.
3. **Semantic analysis**: `parlc.semantic.SemanticVisitor` checks scopes,
   declarations, argument counts and types, and that every function has
   a return statement. It raises `parlc.semantic.SemanticError` on the
   first problem it finds.
4. **Code generation**: `parlc.generator.GeneratorVisitor` collects
   instructions such as `push`, `oframe`, `cframe`, `alloc`, `call`,
   `ret`, `cjmp` and `jmp` in its `instructions` list.

## Installation

```
pip install .
```

## Command line

```
parlc program.parl
```

This reads a source file and prints the generated instructions, one per
line. With no file argument, or with `-`, the program is read from
standard input.

Options:

- `--tokens`: before compiling, print the token stream, one token per line.
- `--tree`: print an indented outline of the syntax tree before checking it.

On a parse or semantic error, `parlc` prints the message to standard error
and exits with status 1.

## Library use

```python
from parlc.cli import compile_source

source = """
fun Max(x:int, y:int) -> int {
    let m:int = x;
    if (y > m) { m = y; }
    return m;
}
let a:int = Max(3, 7);
__print a;
"""

for instruction in compile_source(source):
    print(instruction)
```

The stages can also be used on their own:

```python
from parlc.lexer import Lexer
from parlc.parser import Parser
from parlc.statement_rules import build_grammar
from parlc.printer import PrintNodesVisitor
from parlc.semantic import SemanticVisitor

tokens = Lexer().generate_tokens("let x:int = 5;")

tree = Parser("let x:int = 5; let y:int = x + 1;").parse(build_grammar())
tree.accept(PrintNodesVisitor())   # prints an indented outline to stdout
tree.accept(SemanticVisitor())     # raises SemanticError on invalid programs
```

`PrintNodesVisitor` also accepts an output stream, as in
`PrintNodesVisitor(out=stream)`. `parlc.grammar.format_table(grammar)`
returns the LL(1) parsing table as fixed-width text, and
`parlc.grammar.format_rule(rule)` renders one rule as `A → B c`.

## The language in brief

- Types: `int`, `float`, `bool`, `colour`, and fixed-size arrays such as
  `int[5]`.
- Declarations: `let x:int = 5;` and `let a:int[3] = [1, 2, 3];`
- Control flow: `if`/`else`, `while`, and
  `for (let i:int = 0; i < 10; i = i + 1) { … }`
- Functions: `fun name(x:int, y:int) -> int { … return …; }`
- Casts: `expr as float`
- Built-ins: the statements `__print`, `__delay`, `__write`, `__write_box`
  and `__clear`, and the expressions `__width`, `__height`, `__read(x, y)`
  and `__random_int(n)`.
- Comments: `// …` and `/* … */`

## What parlc does not do

`parlc` produces instruction listings only. It has no machine to run them
and no pixel display. Code generation emits nothing for `__read`, and no
instruction for the `!=` operator, although both are accepted by the parser.

## Running the tests

```
pip install ".[test]"
pytest
```