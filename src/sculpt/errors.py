"""
Compiler exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Type and dimension errors
- E3xx: Semantic errors

Errors raised while evaluating builtins usually have no source span; the
interpreter attaches the span of the innermost DSL call on the way out
(see ``DslError.locate``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        loc = f"{self.span.start}" if self.span is not None else "<sculpt>"
        parts.append(f"{loc}: {self.severity.value}[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            if self.span.start.line == self.span.end.line:
                end_col = self.span.end.column
            else:
                end_col = len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        result = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "hints": self.hints,
        }
        if self.span is not None:
            result["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return result


class DslError(Exception):
    """Base exception for sculpt compile errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def message(self) -> str:
        return self.diagnostic.message

    def locate(self, span: SourceSpan, source_line: Optional[str] = None,
               buffer_length: Optional[int] = None) -> "DslError":
        """Attach a source location if the error has none yet.

        The first caller wins, so the span ends up pointing at the innermost
        DSL call that triggered the error.
        """
        if self.diagnostic.span is None:
            self.diagnostic.span = span
            self.diagnostic.source_line = source_line
            if buffer_length is not None:
                self.diagnostic.hints.append(
                    f"{buffer_length} chars of geometry emitted before the error"
                )
        return self


class ParseError(DslError):
    """Malformed DSL text (E1xx)."""
    pass


class LexerError(ParseError):
    """Error during lexical analysis (E0xx)."""
    pass


class TypeError(DslError):
    """A value of the wrong kind reached an operation (E201)."""
    pass


class UnboundIdentifierError(DslError):
    """Reference to a name not present in the environment (E202)."""
    pass


class DimensionError(DslError):
    """A scalar was required but a vector was given (E203)."""
    pass


class DimensionMismatchError(DslError):
    """Two vector operands have incompatible sizes (E204)."""
    pass


class SemanticError(DslError):
    """Well-typed program that still cannot be compiled (E3xx)."""
    pass


def _diagnostic(code: str, message: str, span: Optional[SourceSpan] = None,
                source_line: Optional[str] = None,
                hints: Optional[List[str]] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=list(hints or []),
    )


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Unexpected character."""
    return LexerError(_diagnostic("E001", f"unexpected character '{char}'", span, source_line))


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: Unterminated string literal."""
    return LexerError(_diagnostic(
        "E002", "unterminated string literal", span, source_line,
        hints=["string literals must be closed with matching quotes"],
    ))


def error_unterminated_comment(span: SourceSpan, source_line: str = None) -> LexerError:
    """E004: Unterminated multi-line comment."""
    return LexerError(_diagnostic(
        "E004", "unterminated multi-line comment (expected closing */)", span, source_line,
    ))


def error_invalid_escape_sequence(seq: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E005: Invalid escape sequence in string."""
    return LexerError(_diagnostic(
        "E005", f"invalid escape sequence '\\{seq}'", span, source_line,
        hints=["valid escape sequences: \\n, \\t, \\r, \\\", \\', \\\\, \\0, \\x##, \\u####"],
    ))


def error_invalid_number_literal(text: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E006: Invalid number literal."""
    return LexerError(_diagnostic("E006", f"invalid number literal '{text}'", span, source_line))


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParseError:
    """E101: Unexpected token."""
    return ParseError(_diagnostic("E101", f"expected {expected}, found {found}", span, source_line))


def error_unexpected_eof(expected: str, span: SourceSpan) -> ParseError:
    """E102: Unexpected end of file."""
    return ParseError(_diagnostic("E102", f"unexpected end of file, expected {expected}", span))


def error_invalid_assignment_target(span: SourceSpan, source_line: str = None) -> ParseError:
    """E103: Assignment to something that is not a name or component."""
    return ParseError(_diagnostic(
        "E103", "invalid assignment target", span, source_line,
        hints=["only variables and vector components (v.x) can be assigned"],
    ))


def error_illegal_return(span: SourceSpan, source_line: str = None) -> ParseError:
    """E104: return outside of a function body."""
    return ParseError(_diagnostic("E104", "illegal return statement outside of a function",
                                  span, source_line))


# --- Type and dimension error codes ---

def error_type(message: str, span: SourceSpan = None) -> TypeError:
    """E201: Wrong kind of value."""
    return TypeError(_diagnostic("E201", message, span))


def error_scalar_required(func_name: str, given: str) -> TypeError:
    """E201: A function accepts only scalars."""
    return TypeError(_diagnostic(
        "E201", f"{func_name} accepts only a scalar. Was given: {given}",
    ))


def error_constant_required(what: str, given: str) -> TypeError:
    """E201: A compile-time constant is required."""
    return TypeError(_diagnostic(
        "E201", f"{what} must be a constant number. Was given: {given}",
        hints=["values derived from time, mouse or input() only exist on the GPU"],
    ))


def error_arity(func_name: str, expected: str, given: int) -> TypeError:
    """E201: Wrong number of arguments to a builtin."""
    return TypeError(_diagnostic(
        "E201", f"{func_name} takes {expected} argument(s), {given} given",
    ))


def error_not_callable(name: str, given: str) -> TypeError:
    """E201: Calling something that is not a function."""
    return TypeError(_diagnostic("E201", f"'{name}' is not a function. It is a {given}"))


def error_unbound_identifier(name: str, span: SourceSpan = None,
                             source_line: str = None) -> UnboundIdentifierError:
    """E202: Unknown identifier."""
    return UnboundIdentifierError(_diagnostic(
        "E202", f"'{name}' is not defined", span, source_line,
    ))


def error_dimension(operator: str, given: str) -> DimensionError:
    """E203: A scalar operand is required."""
    return DimensionError(_diagnostic(
        "E203", f"'{operator}' compares only scalars. Was given: {given}",
    ))


def error_dimension_mismatch(operation: str, left: str, right: str) -> DimensionMismatchError:
    """E204: Vector sizes do not line up."""
    return DimensionMismatchError(_diagnostic(
        "E204", f"dimension mismatch in {operation}: {left} and {right}",
        hints=["vectors must have the same size, or one operand must be a scalar"],
    ))


def error_wrong_dimension(func_name: str, expected: str, given: str) -> DimensionMismatchError:
    """E204: An argument has the wrong vector size."""
    return DimensionMismatchError(_diagnostic(
        "E204", f"{func_name} expects {expected}. Was given: {given}",
    ))


# --- Semantic error codes ---

def error_duplicate_uniform(name: str) -> SemanticError:
    """E301: A uniform name is already a uniform or another GLSL name."""
    return SemanticError(_diagnostic("E301", f"uniform name '{name}' is already in use"))


def error_division_by_zero() -> SemanticError:
    """E302: Constant division by zero."""
    return SemanticError(_diagnostic("E302", "division by zero in a constant expression"))


def error_unbalanced_scopes(depth: int) -> SemanticError:
    """E303: Shape scopes left open at the end of the program."""
    return SemanticError(_diagnostic(
        "E303", f"{depth - 1} shape scope(s) were never closed",
    ))


def error_recursion_limit() -> SemanticError:
    """E304: The program recursed too deeply."""
    return SemanticError(_diagnostic(
        "E304", "maximum recursion depth exceeded",
        hints=["recursion must terminate at compile time"],
    ))


def error_not_normalized(node_name: str) -> SemanticError:
    """E305: The interpreter reached a node the normalization passes remove."""
    return SemanticError(_diagnostic(
        "E305", f"{node_name} must be normalized before evaluation",
        hints=["run the program through transforms.default_pipeline() first"],
    ))


def error_non_finite() -> SemanticError:
    """E306: A constant is infinite or not a number."""
    return SemanticError(_diagnostic(
        "E306", "constant expression is not a finite number",
        hints=["GLSL float literals must be finite"],
    ))
