"""Table-driven LL(1) parser that builds syntax trees through rule actions."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from parlc.grammar import Action, Grammar
from parlc.lexer import Lexer, Token, TokenType
from parlc.nodes import Node, SimpleExpression

_SKIPPED = frozenset(
    {
        TokenType.WHITESPACE,
        TokenType.NEWLINE,
        TokenType.COMMENT_SINGLE_LINE,
        TokenType.COMMENT_MULTI_LINE,
    }
)


class ParseError(Exception):
    """The token stream does not match the grammar."""


@dataclass
class _Frame:
    pending: deque
    action: Action
    children: list = field(default_factory=list)


class Parser:
    """Parses one source program against an LL(1) grammar."""

    def __init__(self, program: str) -> None:
        self.source = program
        self.tokens: list[Token] = Lexer().generate_tokens(program)

    def parse(self, grammar: Grammar) -> Node:
        """Parse the tokens and return the node built by the start rule."""
        tokens = self.tokens
        root = _Frame(deque([grammar.start_symbol]), lambda children: children[0])
        frames = [root]
        pos = 0

        while True:
            if not root.pending:
                if pos < len(tokens) and tokens[pos].type is not TokenType.END:
                    raise ParseError(
                        f"extraneous input starting at token {pos}: Token: {tokens[pos]}"
                    )
                break
            if pos < len(tokens) and tokens[pos].type in _SKIPPED:
                pos += 1
                continue

            top = frames[-1]
            if not top.pending:
                frames.pop()
                node = top.action(top.children)
                parent = frames[-1]
                parent.children.append(node)
                parent.pending.popleft()
                continue

            if pos >= len(tokens):
                raise ParseError("incomplete input; ran out of tokens")
            token = tokens[pos]
            symbol = top.pending[0]

            if isinstance(symbol, TokenType):
                if token.type is not symbol:
                    raise ParseError(
                        f"mismatch: expected {symbol} but saw {token.type} at token {pos}"
                    )
                top.pending.popleft()
                top.children.append(SimpleExpression(token=token))
                pos += 1
            elif isinstance(symbol, str):
                row = grammar.table.get(symbol)
                if row is None:
                    raise ParseError(f'no parsing table row for nonterminal "{symbol}"')
                index = row.get(token.type)
                if index is None:
                    raise ParseError(
                        f'no rule for nonterminal "{symbol}" on lookahead {token.type}, '
                        f"position {pos} lexeme {token.lexeme}"
                    )
                rule = grammar.rules[index]
                frames.append(_Frame(deque(rule.rhs), rule.action))
            else:
                raise ParseError(f"invalid symbol on stack: {symbol!r}")

        return root.action(root.children)