import pytest

from parlc.lexer import Lexer, Token, TokenType


@pytest.fixture
def lexer():
    return Lexer()


MULTILINE = """/* comment and dw
            ez ez ez
            """


@pytest.mark.parametrize(
    "source, expected",
    [
        ("abc", Token(TokenType.IDENTIFIER, "abc")),
        ("_temp1", Token(TokenType.IDENTIFIER, "_temp1")),
        ("123", Token(TokenType.INTEGER, "123")),
        ("#ab12cf", Token(TokenType.HEX_NUMBER, "#ab12cf")),
        ("12.3", Token(TokenType.FLOAT, "12.3")),
        (" ", Token(TokenType.WHITESPACE, " ")),
        ("\n", Token(TokenType.NEWLINE, "\n")),
        ("\t", Token(TokenType.WHITESPACE, "\t")),
        ("=", Token(TokenType.EQUALS, "=")),
        (";", Token(TokenType.SEMICOLON, ";")),
        ("(", Token(TokenType.LEFT_PAREN, "(")),
        (")", Token(TokenType.RIGHT_PAREN, ")")),
        ("+", Token(TokenType.PLUS, "+")),
        ("-", Token(TokenType.MINUS, "-")),
        ("*", Token(TokenType.STAR, "*")),
        ("/", Token(TokenType.SLASH, "/")),
        ("and", Token(TokenType.AND, "and")),
        ("or", Token(TokenType.OR, "or")),
        ("not", Token(TokenType.NOT, "not")),
        (":", Token(TokenType.COLON, ":")),
        (",", Token(TokenType.COMMA, ",")),
        ("{", Token(TokenType.LEFT_CURLY, "{")),
        ("}", Token(TokenType.RIGHT_CURLY, "}")),
        ("<", Token(TokenType.REL_OP, "<")),
        (">", Token(TokenType.REL_OP, ">")),
        ("!=", Token(TokenType.REL_OP, "!=")),
        ("==", Token(TokenType.REL_OP, "==")),
        (">=", Token(TokenType.REL_OP, ">=")),
        ("<=", Token(TokenType.REL_OP, "<=")),
        ("->", Token(TokenType.LEFT_ARROW, "->")),
        ("let", Token(TokenType.LET, "let")),
        ("return", Token(TokenType.RETURN, "return")),
        ("as", Token(TokenType.AS, "as")),
        ("true", Token(TokenType.TRUE, "true")),
        ("false", Token(TokenType.FALSE, "false")),
        ("int", Token(TokenType.INT_TYPE, "int")),
        ("float", Token(TokenType.FLOAT_TYPE, "float")),
        ("bool", Token(TokenType.BOOL_TYPE, "bool")),
        ("colour", Token(TokenType.COLOUR_TYPE, "colour")),
        ("//comment and dw", Token(TokenType.COMMENT_SINGLE_LINE, "//comment and dw")),
        ("/* comment and dw */", Token(TokenType.COMMENT_MULTI_LINE, "/* comment and dw */")),
        ("/* comment and dw *", Token(TokenType.COMMENT_MULTI_LINE, "/* comment and dw *")),
        ("/* comment and dw ", Token(TokenType.COMMENT_MULTI_LINE, "/* comment and dw ")),
        (MULTILINE, Token(TokenType.COMMENT_MULTI_LINE, MULTILINE)),
        ("[", Token(TokenType.LEFT_BRACKET, "[")),
        ("]", Token(TokenType.RIGHT_BRACKET, "]")),
    ],
)
def test_first_token(lexer, source, expected):
    tokens = lexer.generate_tokens(source)
    assert tokens[0] == expected


def test_american_spelling_is_not_a_type(lexer):
    assert lexer.generate_tokens("color")[0] == Token(TokenType.IDENTIFIER, "color")


def test_token_stream_ends_with_end(lexer):
    tokens = lexer.generate_tokens("let x:int = 5;")
    assert [t.type for t in tokens] == [
        TokenType.LET,
        TokenType.WHITESPACE,
        TokenType.IDENTIFIER,
        TokenType.COLON,
        TokenType.INT_TYPE,
        TokenType.WHITESPACE,
        TokenType.EQUALS,
        TokenType.WHITESPACE,
        TokenType.INTEGER,
        TokenType.SEMICOLON,
        TokenType.END,
    ]
    assert tokens[-1].lexeme == "end"


def test_lexemes_rebuild_source(lexer):
    source = "fun f(a:int) -> bool { return a >= 2; } // done\n"
    tokens = lexer.generate_tokens(source)
    assert "".join(t.lexeme for t in tokens[:-1]) == source
    assert tokens[-1].type is TokenType.END


def test_empty_source_gives_end(lexer):
    assert lexer.generate_tokens("") == [Token(TokenType.END, "end")]


def test_unknown_character_stops_with_error(lexer):
    tokens = lexer.generate_tokens("x @ y")
    assert tokens[-1] == Token(TokenType.ERROR, "")
    assert [t.type for t in tokens[:-1]] == [TokenType.IDENTIFIER, TokenType.WHITESPACE]


def test_minus_relop_that_is_not_arrow_is_error(lexer):
    assert lexer.next_token("-<", 0) == Token(TokenType.ERROR, "-<")


def test_next_token_from_offset(lexer):
    assert lexer.next_token("ab cd", 3) == Token(TokenType.IDENTIFIER, "cd")


def test_next_token_past_end(lexer):
    assert lexer.next_token("ab", 2).type is TokenType.END


def test_keywords_builtins(lexer):
    tokens = lexer.generate_tokens("__write_box __random_int __clear")
    kinds = [t.type for t in tokens if t.type is not TokenType.WHITESPACE]
    assert kinds == [TokenType.WRITE_BOX, TokenType.PAD_RAND_I, TokenType.CLEAR, TokenType.END]


def test_token_type_display_names(lexer):
    assert str(lexer.next_token(";", 0).type) == "Semicolon"
    assert str(lexer.next_token("#ab12cf", 0).type) == "Unknown"
    assert f"{lexer.next_token('->', 0).type}" == "LeftArrow"