"""
Token types for the sculpt DSL lexer.

The sculpt language is a small JavaScript-like scripting language. Only the
subset needed to describe shapes is tokenized: no classes, objects, arrays
or template strings.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Type and dimension errors
- E3xx: Semantic errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the sculpt lexer."""

    # --- Literals ---
    NUMBER_LITERAL = auto()     # 42, 0.5, .5, 1e-3, 0xff
    STRING_LITERAL = auto()     # "radius", 'radius'
    BOOL_LITERAL = auto()       # true, false

    # --- Identifiers ---
    IDENTIFIER = auto()         # user-defined names

    # --- Keywords ---
    LET = auto()                # let
    CONST = auto()              # const
    VAR = auto()                # var
    FUNCTION = auto()           # function
    RETURN = auto()             # return
    IF = auto()                 # if
    ELSE = auto()               # else
    FOR = auto()                # for
    WHILE = auto()              # while

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    PERCENT = auto()            # %
    PLUS_PLUS = auto()          # ++
    MINUS_MINUS = auto()        # --

    # --- Comparison operators ---
    LT = auto()                 # <
    GT = auto()                 # >
    LE = auto()                 # <=
    GE = auto()                 # >=
    EQ = auto()                 # ==
    NE = auto()                 # !=
    STRICT_EQ = auto()          # ===
    STRICT_NE = auto()          # !==

    # --- Logical operators ---
    AND_AND = auto()            # &&
    OR_OR = auto()              # ||
    BANG = auto()               # !

    # --- Assignment ---
    ASSIGN = auto()             # =
    PLUS_ASSIGN = auto()        # +=
    MINUS_ASSIGN = auto()       # -=
    STAR_ASSIGN = auto()        # *=
    SLASH_ASSIGN = auto()       # /=
    PERCENT_ASSIGN = auto()     # %=

    # --- Delimiters ---
    LBRACE = auto()             # {
    RBRACE = auto()             # }
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    SEMICOLON = auto()          # ;
    COMMA = auto()              # ,
    DOT = auto()                # .
    QUESTION = auto()           # ?
    COLON = auto()              # :
    ARROW = auto()              # =>

    # --- Special ---
    EOF = auto()                # end of file


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # float for numbers, str for strings and names
    lexeme: str             # The original source text
    span: SourceSpan

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER_LITERAL, TokenType.STRING_LITERAL,
                         TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


KEYWORDS: dict[str, TokenType] = {
    "let": TokenType.LET,
    "const": TokenType.CONST,
    "var": TokenType.VAR,
    "function": TokenType.FUNCTION,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "for": TokenType.FOR,
    "while": TokenType.WHILE,
    "true": TokenType.BOOL_LITERAL,
    "false": TokenType.BOOL_LITERAL,
}


# Operators, longest first so that '===' wins over '==' and '='.
OPERATORS: tuple[tuple[str, TokenType], ...] = (
    ("===", TokenType.STRICT_EQ),
    ("!==", TokenType.STRICT_NE),
    ("==", TokenType.EQ),
    ("!=", TokenType.NE),
    ("<=", TokenType.LE),
    (">=", TokenType.GE),
    ("&&", TokenType.AND_AND),
    ("||", TokenType.OR_OR),
    ("++", TokenType.PLUS_PLUS),
    ("--", TokenType.MINUS_MINUS),
    ("+=", TokenType.PLUS_ASSIGN),
    ("-=", TokenType.MINUS_ASSIGN),
    ("*=", TokenType.STAR_ASSIGN),
    ("/=", TokenType.SLASH_ASSIGN),
    ("%=", TokenType.PERCENT_ASSIGN),
    ("=>", TokenType.ARROW),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.STAR),
    ("/", TokenType.SLASH),
    ("%", TokenType.PERCENT),
    ("<", TokenType.LT),
    (">", TokenType.GT),
    ("=", TokenType.ASSIGN),
    ("!", TokenType.BANG),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    (";", TokenType.SEMICOLON),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
    ("?", TokenType.QUESTION),
    (":", TokenType.COLON),
)


ASSIGNMENT_OPERATORS: frozenset[TokenType] = frozenset({
    TokenType.ASSIGN,
    TokenType.PLUS_ASSIGN,
    TokenType.MINUS_ASSIGN,
    TokenType.STAR_ASSIGN,
    TokenType.SLASH_ASSIGN,
    TokenType.PERCENT_ASSIGN,
})


def is_declaration_keyword(token_type: TokenType) -> bool:
    """Check if a token type starts a variable declaration."""
    return token_type in (TokenType.LET, TokenType.CONST, TokenType.VAR)
