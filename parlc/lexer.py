"""Table-driven lexer producing tokens for the source language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Kinds of token the lexer can produce."""

    IDENTIFIER = 1
    INTEGER = 2
    WHITESPACE = 3
    EQUALS = 4
    PLUS = 5
    STAR = 6
    MINUS = 7
    SLASH = 8
    AND = 9
    OR = 10
    NOT = 11
    SEMICOLON = 12
    LEFT_PAREN = 13
    RIGHT_PAREN = 14
    OPERATOR = 15
    COLON = 16
    LEFT_ARROW = 17
    RIGHT_CURLY = 18
    LEFT_CURLY = 19
    RIGHT_BRACKET = 20
    LEFT_BRACKET = 21
    REL_OP = 22
    COMMA = 23
    HEX_NUMBER = 24
    FLOAT = 25
    COMMENT_SINGLE_LINE = 26
    COMMENT_MULTI_LINE = 27
    NEWLINE = 28
    RETURN = 29
    LET = 30
    ERROR = 31
    END = 32
    IF = 33
    ELSE = 34
    WHILE = 35
    FOR = 36
    FUN = 37
    PAD_WIDTH = 38
    PAD_HEIGHT = 39
    PAD_READ = 40
    PAD_RAND_I = 41
    PRINT = 42
    DELAY = 43
    WRITE_BOX = 44
    WRITE = 45
    CLEAR = 46
    INT_TYPE = 47
    FLOAT_TYPE = 48
    BOOL_TYPE = 49
    COLOUR_TYPE = 50
    AS = 51
    TRUE = 52
    FALSE = 53

    def __str__(self) -> str:
        return _DISPLAY_NAMES.get(self, "Unknown")

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_DISPLAY_NAMES = {
    TokenType.IDENTIFIER: "Identifier",
    TokenType.INTEGER: "Integer",
    TokenType.WHITESPACE: "Whitespace",
    TokenType.EQUALS: "Equals",
    TokenType.SEMICOLON: "Semicolon",
    TokenType.LEFT_PAREN: "LeftParen",
    TokenType.RIGHT_PAREN: "RightParen",
    TokenType.RETURN: "Return",
    TokenType.PLUS: "Plus",
    TokenType.MINUS: "Minus",
    TokenType.SLASH: "Slash",
    TokenType.STAR: "Star",
    TokenType.AND: "And",
    TokenType.OR: "Or",
    TokenType.NOT: "Not",
    TokenType.LET: "Let",
    TokenType.ERROR: "Error",
    TokenType.END: "End",
    TokenType.AS: "As",
    TokenType.COLON: "Colon",
    TokenType.INT_TYPE: "IntType",
    TokenType.BOOL_TYPE: "BoolType",
    TokenType.COLOUR_TYPE: "ColourType",
    TokenType.FLOAT_TYPE: "FloatType",
    TokenType.LEFT_CURLY: "LeftCurly",
    TokenType.RIGHT_CURLY: "RightCurly",
    TokenType.REL_OP: "RelOp",
    TokenType.LEFT_ARROW: "LeftArrow",
    TokenType.COMMA: "Comma",
    TokenType.COMMENT_SINGLE_LINE: "CommentSingleLine",
    TokenType.COMMENT_MULTI_LINE: "CommentMultiLine",
    TokenType.NEWLINE: "Newline",
    TokenType.IF: "If",
    TokenType.ELSE: "Else",
    TokenType.WHILE: "While",
    TokenType.FOR: "For",
    TokenType.FUN: "Fun",
    TokenType.PRINT: "Print",
    TokenType.DELAY: "Delay",
    TokenType.WRITE_BOX: "WriteBox",
    TokenType.WRITE: "Write",
    TokenType.PAD_WIDTH: "PadWidth",
    TokenType.PAD_HEIGHT: "PadHeight",
    TokenType.PAD_READ: "PadRead",
    TokenType.PAD_RAND_I: "PadRandI",
    TokenType.CLEAR: "Clear",
    TokenType.RIGHT_BRACKET: "RightBracket",
    TokenType.LEFT_BRACKET: "LeftBracket",
}


@dataclass(frozen=True)
class Token:
    """A lexed token: its kind and the text it was read from."""

    type: TokenType
    lexeme: str


class _Cat(Enum):
    UNDERSCORE = auto()
    LETTER = auto()
    DIGIT = auto()
    WHITESPACE = auto()
    EQUALS = auto()
    SEMICOLON = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    PLUS = auto()
    MINUS = auto()
    SLASH = auto()
    STAR = auto()
    OTHER = auto()
    COLON = auto()
    LEFT_CURLY = auto()
    RIGHT_CURLY = auto()
    REL_OP = auto()
    COMMA = auto()
    HASH = auto()
    DOT = auto()
    RIGHT_BRACKET = auto()
    LEFT_BRACKET = auto()
    NEWLINE = auto()


_CHAR_CATEGORIES = {
    "_": _Cat.UNDERSCORE,
    " ": _Cat.WHITESPACE,
    "\t": _Cat.WHITESPACE,
    "\n": _Cat.NEWLINE,
    "=": _Cat.EQUALS,
    ";": _Cat.SEMICOLON,
    "(": _Cat.LEFT_PAREN,
    ")": _Cat.RIGHT_PAREN,
    "+": _Cat.PLUS,
    "-": _Cat.MINUS,
    "*": _Cat.STAR,
    "/": _Cat.SLASH,
    ":": _Cat.COLON,
    "{": _Cat.LEFT_CURLY,
    "}": _Cat.RIGHT_CURLY,
    "<": _Cat.REL_OP,
    ">": _Cat.REL_OP,
    "!": _Cat.REL_OP,
    ",": _Cat.COMMA,
    "#": _Cat.HASH,
    ".": _Cat.DOT,
    "[": _Cat.LEFT_BRACKET,
    "]": _Cat.RIGHT_BRACKET,
}


def _classify(ch: str) -> _Cat:
    category = _CHAR_CATEGORIES.get(ch)
    if category is not None:
        return category
    if "a" <= ch <= "z" or "A" <= ch <= "Z":
        return _Cat.LETTER
    if "0" <= ch <= "9":
        return _Cat.DIGIT
    return _Cat.OTHER


class _State(Enum):
    START = auto()
    IDENT = auto()
    WHITESPACE = auto()
    EQUALS = auto()
    SEMICOLON = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    PLUS = auto()
    STAR = auto()
    SLASH = auto()
    MINUS = auto()
    INT = auto()
    COLON = auto()
    REL_OP_EXTENDED = auto()
    LEFT_CURLY = auto()
    RIGHT_CURLY = auto()
    REL_OP = auto()
    COMMA = auto()
    HEX = auto()
    FLOAT = auto()
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()
    MULTILINE_OPEN = auto()
    MULTILINE_ALMOST_CLOSED = auto()
    MULTILINE_CLOSED = auto()
    SINGLELINE_COMMENT = auto()
    NEWLINE = auto()


# Every state but the start state accepts.
_ACCEPTING = frozenset(_State) - {_State.START}

_FINAL_TOKEN_TYPES = {
    _State.WHITESPACE: TokenType.WHITESPACE,
    _State.EQUALS: TokenType.EQUALS,
    _State.SEMICOLON: TokenType.SEMICOLON,
    _State.LEFT_PAREN: TokenType.LEFT_PAREN,
    _State.RIGHT_PAREN: TokenType.RIGHT_PAREN,
    _State.MINUS: TokenType.MINUS,
    _State.STAR: TokenType.STAR,
    _State.SLASH: TokenType.SLASH,
    _State.PLUS: TokenType.PLUS,
    _State.INT: TokenType.INTEGER,
    _State.COLON: TokenType.COLON,
    _State.LEFT_CURLY: TokenType.LEFT_CURLY,
    _State.RIGHT_CURLY: TokenType.RIGHT_CURLY,
    _State.REL_OP: TokenType.REL_OP,
    _State.COMMA: TokenType.COMMA,
    _State.HEX: TokenType.HEX_NUMBER,
    _State.FLOAT: TokenType.FLOAT,
    _State.NEWLINE: TokenType.NEWLINE,
    _State.SINGLELINE_COMMENT: TokenType.COMMENT_SINGLE_LINE,
    _State.MULTILINE_CLOSED: TokenType.COMMENT_MULTI_LINE,
    _State.MULTILINE_ALMOST_CLOSED: TokenType.COMMENT_MULTI_LINE,
    _State.MULTILINE_OPEN: TokenType.COMMENT_MULTI_LINE,
    _State.LEFT_BRACKET: TokenType.LEFT_BRACKET,
    _State.RIGHT_BRACKET: TokenType.RIGHT_BRACKET,
}

_KEYWORDS = {
    "return": TokenType.RETURN,
    "let": TokenType.LET,
    "as": TokenType.AS,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "__print": TokenType.PRINT,
    "__delay": TokenType.DELAY,
    "__write": TokenType.WRITE,
    "__write_box": TokenType.WRITE_BOX,
    "__width": TokenType.PAD_WIDTH,
    "__height": TokenType.PAD_HEIGHT,
    "__read": TokenType.PAD_READ,
    "__random_int": TokenType.PAD_RAND_I,
    "__clear": TokenType.CLEAR,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "colour": TokenType.COLOUR_TYPE,
    "int": TokenType.INT_TYPE,
    "bool": TokenType.BOOL_TYPE,
    "float": TokenType.FLOAT_TYPE,
}


def _build_transitions() -> dict[tuple[_State, _Cat], _State]:
    S, C = _State, _Cat
    tx = {
        (S.START, C.LETTER): S.IDENT,
        (S.START, C.UNDERSCORE): S.IDENT,
        (S.IDENT, C.LETTER): S.IDENT,
        (S.IDENT, C.DIGIT): S.IDENT,
        (S.IDENT, C.UNDERSCORE): S.IDENT,
        (S.START, C.WHITESPACE): S.WHITESPACE,
        (S.WHITESPACE, C.WHITESPACE): S.WHITESPACE,
        (S.START, C.EQUALS): S.EQUALS,
        (S.START, C.SEMICOLON): S.SEMICOLON,
        (S.START, C.LEFT_PAREN): S.LEFT_PAREN,
        (S.START, C.RIGHT_PAREN): S.RIGHT_PAREN,
        (S.START, C.PLUS): S.PLUS,
        (S.START, C.MINUS): S.MINUS,
        (S.START, C.STAR): S.STAR,
        (S.START, C.SLASH): S.SLASH,
        (S.PLUS, C.EQUALS): S.PLUS,
        (S.STAR, C.EQUALS): S.STAR,
        (S.SLASH, C.EQUALS): S.SLASH,
        (S.MINUS, C.EQUALS): S.MINUS,
        (S.START, C.DIGIT): S.INT,
        (S.INT, C.DIGIT): S.INT,
        (S.START, C.COLON): S.COLON,
        (S.MINUS, C.REL_OP): S.REL_OP_EXTENDED,
        (S.START, C.LEFT_CURLY): S.LEFT_CURLY,
        (S.START, C.RIGHT_CURLY): S.RIGHT_CURLY,
        (S.START, C.REL_OP): S.REL_OP,
        (S.EQUALS, C.EQUALS): S.REL_OP,
        (S.REL_OP, C.EQUALS): S.REL_OP,
        (S.START, C.COMMA): S.COMMA,
        (S.START, C.HASH): S.HEX,
        (S.HEX, C.DIGIT): S.HEX,
        (S.HEX, C.LETTER): S.HEX,
        (S.INT, C.DOT): S.FLOAT,
        (S.FLOAT, C.DIGIT): S.FLOAT,
        (S.SLASH, C.SLASH): S.SINGLELINE_COMMENT,
        (S.START, C.NEWLINE): S.NEWLINE,
        (S.START, C.LEFT_BRACKET): S.LEFT_BRACKET,
        (S.START, C.RIGHT_BRACKET): S.RIGHT_BRACKET,
        (S.SLASH, C.STAR): S.MULTILINE_OPEN,
        (S.MULTILINE_OPEN, C.STAR): S.MULTILINE_ALMOST_CLOSED,
        (S.MULTILINE_ALMOST_CLOSED, C.SLASH): S.MULTILINE_CLOSED,
        (S.MULTILINE_ALMOST_CLOSED, C.STAR): S.MULTILINE_ALMOST_CLOSED,
    }
    for cat in C:
        if cat is not C.NEWLINE:
            tx[(S.SINGLELINE_COMMENT, cat)] = S.SINGLELINE_COMMENT
        if cat not in (C.STAR, C.SLASH):
            tx[(S.MULTILINE_ALMOST_CLOSED, cat)] = S.MULTILINE_OPEN
            tx[(S.MULTILINE_OPEN, cat)] = S.MULTILINE_OPEN
    return tx


def _token_for(state: _State, lexeme: str) -> Token:
    if state is _State.IDENT:
        return Token(_KEYWORDS.get(lexeme, TokenType.IDENTIFIER), lexeme)
    if state is _State.REL_OP_EXTENDED and lexeme == "->":
        return Token(TokenType.LEFT_ARROW, lexeme)
    return Token(_FINAL_TOKEN_TYPES.get(state, TokenType.ERROR), lexeme)


class Lexer:
    """A maximal-munch lexer driven by a finite-state transition table."""

    def __init__(self) -> None:
        self._transitions = _build_transitions()

    def next_token(self, src: str, idx: int) -> Token:
        """Read the longest token of ``src`` that starts at ``idx``."""
        if idx >= len(src):
            return Token(TokenType.END, "end")
        state = _State.START
        accepted: tuple[_State, int] | None = None
        for pos, ch in enumerate(src[idx:], start=idx):
            following = self._transitions.get((state, _classify(ch)))
            if following is None:
                break
            state = following
            if state in _ACCEPTING:
                accepted = (state, pos + 1)
        if accepted is None:
            return Token(TokenType.ERROR, "")
        final_state, end = accepted
        return _token_for(final_state, src[idx:end])

    def generate_tokens(self, src: str) -> list[Token]:
        """Lex the whole of ``src``, stopping after the end or an error token."""
        tokens: list[Token] = []
        idx = 0
        while True:
            token = self.next_token(src, idx)
            tokens.append(token)
            if token.type in (TokenType.END, TokenType.ERROR):
                return tokens
            idx += len(token.lexeme)