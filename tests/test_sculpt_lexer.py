"""
Unit tests for the sculpt lexer.
"""

import pytest
from sculpt import tokenize, Lexer, TokenType, LexerError, ParseError


def token_types(source):
    return [t.type for t in tokenize(source) if t.type != TokenType.EOF]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_and_newlines_are_skipped(self):
        assert token_types("  \t\n\r\n  ") == []

    def test_simple_let_statement(self):
        """Basic let statement tokenization."""
        assert token_types("let x = 42;") == [
            TokenType.LET,
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.NUMBER_LITERAL,
            TokenType.SEMICOLON,
        ]

    def test_keywords(self):
        assert token_types("let const var function return if else for while") == [
            TokenType.LET, TokenType.CONST, TokenType.VAR, TokenType.FUNCTION,
            TokenType.RETURN, TokenType.IF, TokenType.ELSE, TokenType.FOR,
            TokenType.WHILE,
        ]

    def test_identifiers_may_contain_dollar_and_underscore(self):
        tokens = tokenize("_tmp $x a1_b")
        assert [t.value for t in tokens[:-1]] == ["_tmp", "$x", "a1_b"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])

    def test_lexer_is_iterable(self):
        types = [t.type for t in Lexer("sphere(1)")]
        assert types == [
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.NUMBER_LITERAL,
            TokenType.RPAREN, TokenType.EOF,
        ]


class TestLiterals:
    """Numbers, strings and booleans."""

    def test_numbers_are_floats(self):
        tokens = tokenize("42 0.5 .25 1e3 2.5E-2")
        values = [t.value for t in tokens[:-1]]
        assert values == [42.0, 0.5, 0.25, 1000.0, 0.025]
        assert all(isinstance(v, float) for v in values)

    def test_hex_number(self):
        token = tokenize("0xff")[0]
        assert token.type == TokenType.NUMBER_LITERAL
        assert token.value == 255.0
        assert token.lexeme == "0xff"

    def test_booleans(self):
        tokens = tokenize("true false")
        assert [t.type for t in tokens[:-1]] == [TokenType.BOOL_LITERAL] * 2
        assert [t.value for t in tokens[:-1]] == [True, False]

    def test_strings_with_either_quote(self):
        tokens = tokenize("'radius' \"size\"")
        assert [t.value for t in tokens[:-1]] == ["radius", "size"]

    def test_string_escapes(self):
        token = tokenize(r'"a\nb\t\"c\" \x41B"')[0]
        assert token.value == 'a\nb\t"c" AB'

    def test_member_access_lexes_as_dot(self):
        """`v.x` lexes as name, dot, name."""
        assert token_types("v.x") == [TokenType.IDENTIFIER, TokenType.DOT, TokenType.IDENTIFIER]


class TestOperators:
    """Operators are matched longest first."""

    def test_strict_equality(self):
        assert token_types("a === b !== c") == [
            TokenType.IDENTIFIER, TokenType.STRICT_EQ, TokenType.IDENTIFIER,
            TokenType.STRICT_NE, TokenType.IDENTIFIER,
        ]

    def test_compound_assignment_and_update(self):
        assert token_types("x += 1; y++; --z") == [
            TokenType.IDENTIFIER, TokenType.PLUS_ASSIGN, TokenType.NUMBER_LITERAL,
            TokenType.SEMICOLON,
            TokenType.IDENTIFIER, TokenType.PLUS_PLUS, TokenType.SEMICOLON,
            TokenType.MINUS_MINUS, TokenType.IDENTIFIER,
        ]

    def test_arrow_and_conditional(self):
        assert token_types("() => c ? a : b") == [
            TokenType.LPAREN, TokenType.RPAREN, TokenType.ARROW,
            TokenType.IDENTIFIER, TokenType.QUESTION, TokenType.IDENTIFIER,
            TokenType.COLON, TokenType.IDENTIFIER,
        ]

    def test_logical_operators(self):
        assert token_types("!a && b || c") == [
            TokenType.BANG, TokenType.IDENTIFIER, TokenType.AND_AND,
            TokenType.IDENTIFIER, TokenType.OR_OR, TokenType.IDENTIFIER,
        ]


class TestComments:
    """Comments are trivia."""

    def test_line_comment(self):
        assert token_types("sphere(1) // a ball\n") == [
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.NUMBER_LITERAL,
            TokenType.RPAREN,
        ]

    def test_block_comment_spanning_lines(self):
        assert token_types("/* one\n two */ x") == [TokenType.IDENTIFIER]

    def test_division_is_not_a_comment(self):
        assert token_types("a / b") == [TokenType.IDENTIFIER, TokenType.SLASH, TokenType.IDENTIFIER]


class TestSourceLocations:
    """Token spans track lines and columns."""

    def test_line_and_column(self):
        tokens = tokenize("let a = 1;\n  box(a, a, a);")
        box = tokens[5]
        assert box.value == "box"
        assert box.span.start.line == 2
        assert box.span.start.column == 3

    def test_filename_in_span(self):
        token = tokenize("x", filename="scene.sculpt")[0]
        assert token.span.start.filename == "scene.sculpt"
        assert str(token.span).startswith("scene.sculpt:1:1")


class TestLexerErrors:
    """Malformed input raises LexerError with an E0xx code."""

    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("sphere(1) @")
        assert exc_info.value.code == "E001"
        assert "'@'" in exc_info.value.message

    def test_unterminated_string(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("input('radius")
        assert exc_info.value.code == "E002"

    def test_string_cannot_span_lines(self):
        with pytest.raises(LexerError):
            tokenize("'abc\ndef'")

    def test_unterminated_comment(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("/* never closed")
        assert exc_info.value.code == "E004"

    def test_invalid_escape(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize(r"'\q'")
        assert exc_info.value.code == "E005"

    def test_number_running_into_name(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("3px")
        assert exc_info.value.code == "E006"
        assert "3px" in exc_info.value.message

    def test_incomplete_exponent(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("1e+")
        assert exc_info.value.code == "E006"

    def test_lexer_error_is_a_parse_error(self):
        with pytest.raises(ParseError):
            tokenize("#")

    def test_error_quotes_source_line(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("let a = 1;\nlet b = ~2;")
        text = str(exc_info.value)
        assert "2:9" in text
        assert "let b = ~2;" in text
        assert "^" in text
