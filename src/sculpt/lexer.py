"""
Lexer for the sculpt DSL.

Turns program text into the token list the parser reads. The language is a
JavaScript subset, so the lexical rules are JavaScript's:

- // line comments and non-nesting /* block */ comments
- strings in single or double quotes, with \\n \\t \\xHH \\uHHHH style escapes
- numbers (42, 0.5, .25, 1e3, 0xff), all read as floats
- identifiers may contain $ and _
- operators are matched longest first, so === wins over == and =

Newlines carry no meaning; statement semicolons are optional.
"""

import re
from typing import Iterator, List, Optional

from .tokens import Token, TokenType, SourceLocation, SourceSpan, KEYWORDS, OPERATORS
from .errors import (
    error_unexpected_character,
    error_unterminated_string,
    error_unterminated_comment,
    error_invalid_escape_sequence,
    error_invalid_number_literal,
)


WHITESPACE_OR_LINE_COMMENT = re.compile(r"\s+|//[^\n]*")
IDENTIFIER = re.compile(r"[^\W\d][\w$]*|\$[\w$]*")

# Greedy candidates; a candidate that does not also match the strict form
# below (3px, 1e+, 0x) is an invalid literal
NUMBER_CANDIDATE = re.compile(r"0[xX][\w$]*|(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d*)?[\w$]*")
HEX_NUMBER = re.compile(r"0[xX][0-9a-fA-F]+")
DECIMAL_NUMBER = re.compile(r"(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?")

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '0': '\0',
    '\\': '\\',
    '"': '"',
    "'": "'",
}
HEX_ESCAPE_WIDTH = {'x': 2, 'u': 4}


class Lexer:
    """
    Tokenizer for sculpt programs.

    ``Lexer(text).tokenize()`` returns every token up to and including EOF;
    iterating a Lexer yields the same tokens lazily.
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self.source_lines = source.splitlines()
        self.pos = 0
        self.line = 1
        self.column = 1

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Line `line_num` (1-indexed) of the program, for diagnostics."""
        if 1 <= line_num <= len(self.source_lines):
            return self.source_lines[line_num - 1]
        return None

    # --- Position bookkeeping ---

    def _location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Character at pos + offset, or '' past the end."""
        return self.source[self.pos + offset:self.pos + offset + 1]

    def _consume(self, count: int) -> str:
        """Move past `count` characters, keeping line and column current."""
        text = self.source[self.pos:self.pos + count]
        self.pos += len(text)
        newlines = text.count('\n')
        if newlines:
            self.line += newlines
            self.column = len(text) - text.rfind('\n')
        else:
            self.column += len(text)
        return text

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        return Token(token_type, value, self.source[start.offset:self.pos], self._span(start))

    # --- Trivia ---

    def _skip_trivia(self) -> None:
        while not self._is_at_end():
            match = WHITESPACE_OR_LINE_COMMENT.match(self.source, self.pos)
            if match:
                self._consume(match.end() - self.pos)
            elif self.source.startswith('/*', self.pos):
                self._skip_block_comment()
            else:
                return

    def _skip_block_comment(self) -> None:
        start = self._location()
        end = self.source.find('*/', self.pos + 2)
        if end < 0:
            self._consume(len(self.source) - self.pos)
            raise error_unterminated_comment(self._span(start), self.get_source_line(start.line))
        self._consume(end + 2 - self.pos)

    # --- Literals ---

    def _scan_string(self, start: SourceLocation) -> Token:
        quote = self._consume(1)
        chars = []
        while self._peek() != quote:
            ch = self._peek()
            if ch in ('', '\n'):
                raise error_unterminated_string(self._span(start), self.get_source_line(start.line))
            if ch == '\\':
                chars.append(self._scan_escape())
            else:
                chars.append(self._consume(1))
        self._consume(1)
        return self._token(TokenType.STRING_LITERAL, ''.join(chars), start)

    def _scan_escape(self) -> str:
        start = self._location()
        self._consume(1)  # backslash
        ch = self._peek()
        if ch in ESCAPES:
            self._consume(1)
            return ESCAPES[ch]
        width = HEX_ESCAPE_WIDTH.get(ch)
        if width is not None:
            digits = self.source[self.pos + 1:self.pos + 1 + width]
            if len(digits) == width and all(c in "0123456789abcdefABCDEF" for c in digits):
                self._consume(1 + width)
                return chr(int(digits, 16))
            ch += digits
        self._consume(1)
        raise error_invalid_escape_sequence(ch, self._span(start), self.get_source_line(start.line))

    def _scan_number(self, start: SourceLocation) -> Token:
        match = NUMBER_CANDIDATE.match(self.source, self.pos)
        text = self._consume(match.end() - self.pos)
        if HEX_NUMBER.fullmatch(text):
            return self._token(TokenType.NUMBER_LITERAL, float(int(text, 16)), start)
        if DECIMAL_NUMBER.fullmatch(text):
            return self._token(TokenType.NUMBER_LITERAL, float(text), start)
        raise error_invalid_number_literal(text, self._span(start), self.get_source_line(start.line))

    def _scan_word(self, start: SourceLocation) -> Token:
        match = IDENTIFIER.match(self.source, self.pos)
        word = self._consume(match.end() - self.pos)
        token_type = KEYWORDS.get(word)
        if token_type is None:
            return self._token(TokenType.IDENTIFIER, word, start)
        if token_type == TokenType.BOOL_LITERAL:
            return self._token(token_type, word == 'true', start)
        return self._token(token_type, word, start)

    # --- Driver ---

    def _scan_token(self) -> Token:
        self._skip_trivia()
        start = self._location()
        if self._is_at_end():
            return self._token(TokenType.EOF, None, start)

        ch = self._peek()
        if ch in ('"', "'"):
            return self._scan_string(start)
        if ch.isdigit() or (ch == '.' and self._peek(1).isdigit()):
            return self._scan_number(start)
        if IDENTIFIER.match(self.source, self.pos):
            return self._scan_word(start)

        for text, token_type in OPERATORS:
            if self.source.startswith(text, self.pos):
                self._consume(len(text))
                return self._token(token_type, text, start)

        self._consume(1)
        raise error_unexpected_character(ch, self._span(start), self.get_source_line(start.line))

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self._scan_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        """Every token in the program, ending with EOF."""
        return list(self)


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """
    Tokenize a sculpt program.

    Args:
        source: Program text
        filename: Name used in token spans and error messages

    Returns:
        List of tokens ending with an EOF token

    Raises:
        LexerError: On a character, string, comment or number the
            language does not allow
    """
    return Lexer(source, filename).tokenize()
