"""Command line: compile a source program to stack-machine instructions."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from parlc.generator import GeneratorVisitor
from parlc.lexer import Lexer
from parlc.parser import ParseError, Parser
from parlc.printer import PrintNodesVisitor
from parlc.semantic import SemanticError, SemanticVisitor
from parlc.statement_rules import build_grammar


def compile_source(source: str) -> list[str]:
    """Parse, check and generate code for ``source``; return the instructions."""
    tree = Parser(source).parse(build_grammar())
    tree.accept(SemanticVisitor())
    generator = GeneratorVisitor()
    tree.accept(generator)
    return generator.instructions


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Compile a program file (or standard input) and print its instructions."""
    parser = argparse.ArgumentParser(
        prog="parlc", description="Compile a program to stack-machine instructions."
    )
    parser.add_argument("source", nargs="?", default="-", help="program file, or - for stdin")
    parser.add_argument("--tokens", action="store_true", help="print the token stream")
    parser.add_argument("--tree", action="store_true", help="print the syntax tree")
    args = parser.parse_args(argv)

    try:
        text = _read_source(args.source)
    except OSError as exc:
        print(f"parlc: {exc}", file=sys.stderr)
        return 1

    if args.tokens:
        for token in Lexer().generate_tokens(text):
            print(f"{token.type} {token.lexeme!r}")

    try:
        tree = Parser(text).parse(build_grammar())
        if args.tree:
            tree.accept(PrintNodesVisitor())
        tree.accept(SemanticVisitor())
        generator = GeneratorVisitor()
        tree.accept(generator)
    except (ParseError, SemanticError, LookupError, ValueError) as exc:
        print(f"parlc: {exc}", file=sys.stderr)
        return 1

    for instruction in generator.instructions:
        print(instruction)
    return 0


if __name__ == "__main__":
    sys.exit(main())