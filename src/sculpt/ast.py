"""
Abstract Syntax Tree (AST) node definitions for the sculpt DSL.

The parser produces the full surface syntax. The normalization passes in
``sculpt.transforms`` then rewrite operators, conditionals and declarations
into calls, so the interpreter only sees a reduced set of nodes:
Literal, Identifier, FunctionCall, MemberAccess, AssignmentExpr and
FunctionExpr expressions, and VarDeclaration, FunctionDecl,
ExpressionStatement, ForStatement, WhileStatement, ReturnStatement, Block and
EmptyStatement statements.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Union, Any
from abc import ABC
from .tokens import SourceSpan, TokenType


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expression):
    """A literal value (number, string, bool)."""
    value: Union[float, str, bool]
    literal_type: TokenType  # NUMBER_LITERAL, STRING_LITERAL, BOOL_LITERAL


@dataclass
class Identifier(Expression):
    """A variable or function name reference."""
    name: str


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x && y)."""
    left: Expression
    operator: str  # Operator symbol as written: '+', '===', '&&', ...
    right: Expression


@dataclass
class UnaryOp(Expression):
    """A unary operation (!x, -x, +x)."""
    operator: str
    operand: Expression


@dataclass
class UpdateExpr(Expression):
    """An increment or decrement (i++, --i)."""
    operator: str  # '++' or '--'
    target: Expression
    prefix: bool


@dataclass
class AssignmentExpr(Expression):
    """An assignment, plain or compound (x = 1, v.x += 2)."""
    target: Expression  # Identifier or MemberAccess
    operator: str       # '=', '+=', '-=', '*=', '/=', '%='
    value: Expression


@dataclass
class FunctionCall(Expression):
    """A function call (e.g., sphere(0.5))."""
    callee: Expression
    arguments: List[Expression] = field(default_factory=list)


@dataclass
class MemberAccess(Expression):
    """Member access (e.g., p.x, col.xyz)."""
    object: Expression
    member: str


@dataclass
class ConditionalExpr(Expression):
    """A ternary conditional expression (c ? a : b)."""
    condition: Expression
    true_branch: Expression
    false_branch: Expression


@dataclass
class FunctionExpr(Expression):
    """A function expression or arrow function.

    Arrow functions with an expression body are parsed into a block holding
    a single return statement. ``is_branch`` marks the thunks created for
    if/else branches: a return inside them leaves the enclosing function.
    """
    parameters: List[str]
    body: "Block"
    name: Optional[str] = None
    is_branch: bool = False


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class VarDeclarator(AstNode):
    """One name in a declaration (the `r = 1` in `let r = 1, g = 2`)."""
    name: str
    initializer: Optional[Expression] = None


@dataclass
class VarDeclaration(Statement):
    """A let/const/var declaration."""
    kind: str  # 'let', 'const' or 'var'
    declarators: List[VarDeclarator]


@dataclass
class FunctionDecl(Statement):
    """A named function declaration (function f(a, b) { ... })."""
    name: str
    parameters: List[str]
    body: "Block"


@dataclass
class IfStatement(Statement):
    """An if statement with an optional else branch."""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass
class ForStatement(Statement):
    """A C-style for loop: for (init; condition; update) body."""
    init: Optional[Union[VarDeclaration, Expression]]
    condition: Optional[Expression]
    update: Optional[Expression]
    body: Statement


@dataclass
class WhileStatement(Statement):
    """A while loop."""
    condition: Expression
    body: Statement


@dataclass
class ReturnStatement(Statement):
    value: Optional[Expression] = None


@dataclass
class ExpressionStatement(Statement):
    """An expression used as a statement."""
    expression: Expression


@dataclass
class Block(Statement):
    """A braced block of statements. Blocks open a new lexical scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class EmptyStatement(Statement):
    """A stray semicolon."""
    pass


@dataclass
class Program(AstNode):
    """A complete sculpt program."""
    body: List[Statement] = field(default_factory=list)


# =============================================================================
# Visitor Helpers
# =============================================================================

class DumpVisitor(AstVisitor):
    """Debug visitor that renders the AST structure as indented text."""

    def __init__(self, indent: int = 0):
        self.indent = indent
        self.lines: List[str] = []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def _child(self, node: AstNode) -> None:
        child = DumpVisitor(self.indent + 2)
        child.generic_visit(node)
        self.lines.extend(child.lines)

    def generic_visit(self, node: AstNode) -> None:
        self._emit(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._emit(f"  {name}:")
                self._child(value)
            elif isinstance(value, list):
                self._emit(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        self._child(item)
                    else:
                        self._emit(f"    {item!r}")
                self._emit("  ]")
            else:
                self._emit(f"  {name}: {value!r}")


def dump_ast(node: AstNode) -> str:
    """Render an AST node as indented text for debugging."""
    visitor = DumpVisitor()
    visitor.generic_visit(node)
    return "\n".join(visitor.lines)
