"""Grammar rules and construction of the LL(1) parsing table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

from parlc.lexer import TokenType
from parlc.nodes import Node

Symbol = Union[TokenType, str]
"""A terminal (a token type) or a nonterminal (its name)."""

Action = Callable[[list], Node]
"""Builds the syntax tree node of a rule from the nodes of its children."""


@dataclass
class Rule:
    """One production ``lhs → rhs`` and the action that builds its node."""

    lhs: str
    rhs: tuple = ()
    action: Action = field(default=lambda children: children[0], repr=False)

    def __post_init__(self) -> None:
        self.rhs = tuple(self.rhs)


@dataclass
class Grammar:
    """A set of rules with its start symbol and derived LL(1) table.

    ``table[nonterminal][lookahead]`` is the index in ``rules`` of the
    rule to expand.
    """

    rules: list[Rule]
    start_symbol: str = "Program"
    table: dict[str, dict[TokenType, int]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.rules = list(self.rules)
        self.table = build_table(self)


def build_table(grammar: Grammar) -> dict[str, dict[TokenType, int]]:
    """Compute FIRST and FOLLOW sets and build the LL(1) parsing table.

    Where two rules compete for one cell, the later rule wins.
    """
    rules = grammar.rules
    nonterminals = list(dict.fromkeys(rule.lhs for rule in rules))
    if grammar.start_symbol not in nonterminals:
        raise ValueError(f"start symbol {grammar.start_symbol!r} has no rules")

    first: dict[str, set[TokenType]] = {name: set() for name in nonterminals}
    nullable: dict[str, bool] = {name: False for name in nonterminals}

    def first_of(sequence: Iterable[Symbol]) -> tuple[set[TokenType], bool]:
        result: set[TokenType] = set()
        for symbol in sequence:
            if isinstance(symbol, TokenType):
                result.add(symbol)
                return result, False
            result |= first.get(symbol, set())
            if not nullable.get(symbol, False):
                return result, False
        return result, True

    changed = True
    while changed:
        changed = False
        for rule in rules:
            rhs_first, rhs_nullable = first_of(rule.rhs)
            target = first[rule.lhs]
            if not rhs_first <= target:
                target |= rhs_first
                changed = True
            if rhs_nullable and not nullable[rule.lhs]:
                nullable[rule.lhs] = True
                changed = True

    follow: dict[str, set[TokenType]] = {name: set() for name in nonterminals}
    follow[grammar.start_symbol].add(TokenType.END)

    changed = True
    while changed:
        changed = False
        for rule in rules:
            for position, symbol in enumerate(rule.rhs):
                if isinstance(symbol, TokenType):
                    continue
                beta_first, beta_nullable = first_of(rule.rhs[position + 1:])
                beta_first.discard(TokenType.END)
                if beta_nullable:
                    beta_first |= follow[rule.lhs]
                target = follow.setdefault(symbol, set())
                if not beta_first <= target:
                    target |= beta_first
                    changed = True

    table: dict[str, dict[TokenType, int]] = {name: {} for name in nonterminals}
    for index, rule in enumerate(rules):
        rhs_first, rhs_nullable = first_of(rule.rhs)
        row = table[rule.lhs]
        for terminal in rhs_first:
            row[terminal] = index
        if rhs_nullable:
            for terminal in follow[rule.lhs]:
                row[terminal] = index
    return table


def format_rule(rule: Rule) -> str:
    """Render a rule as ``A → B c``, or ``A → ε`` for an empty one."""
    parts = [f"{rule.lhs} →"]
    parts.extend(str(symbol) for symbol in rule.rhs)
    if not rule.rhs:
        parts.append("ε")
    return " ".join(parts)


def format_table(grammar: Grammar) -> str:
    """Render the parsing table as fixed-width text."""
    terminals = sorted(
        {terminal for row in grammar.table.values() for terminal in row},
        key=lambda terminal: terminal.value,
    )
    separator = "---------------------------"
    lines = ["LL(1) Parsing Table:", separator]
    lines.append(f"{'':<10}" + "".join(f"{terminal:<15}" for terminal in terminals))
    for nonterminal, row in grammar.table.items():
        cells = []
        for terminal in terminals:
            index = row.get(terminal)
            text = "" if index is None else format_rule(grammar.rules[index])
            cells.append(f"{text:<15}")
        lines.append(f"{nonterminal:<10}" + "".join(cells))
    lines.append(separator)
    return "\n".join(lines) + "\n"