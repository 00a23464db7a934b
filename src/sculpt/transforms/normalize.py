"""
Normalization passes.

These passes rewrite surface syntax into calls to compiler-provided
builtins, so the interpreter never has to know how an operator or a
conditional is compiled:

    x += 1                ->  x = _binaryOp(x, 1, '+')
    a === b               ->  _binaryOp(a, b, '==')
    !a, -a                ->  _not(a), _negate(a)
    let r = input(1, 0)   ->  let r = input('r', 1, 0)
    if (c) {A} else {B}   ->  _if(c, () => {A}, () => {B})
    c ? a : b             ->  _ternary(c, () => a, () => b)
    let v = e             ->  let v = _bindName('v', e)

Every pass is idempotent: running it over its own output changes nothing.
"""

from typing import List, Optional

from ..ast import (
    Statement, VarDeclarator, IfStatement, ExpressionStatement, ReturnStatement, Block,
    Expression, Literal, Identifier, BinaryOp, UnaryOp, UpdateExpr,
    AssignmentExpr, FunctionCall, ConditionalExpr, FunctionExpr,
)
from ..tokens import SourceSpan, TokenType
from .base import TreeTransform, TransformPipeline


BINARY_OPERATORS = {
    '+': '+', '-': '-', '*': '*', '/': '/', '%': '%',
    '==': '==', '!=': '!=', '===': '==', '!==': '!=',
    '<': '<', '<=': '<=', '>': '>', '>=': '>=',
    '&&': '&&', '||': '||',
}

UNARY_BUILTINS = {'!': '_not', '-': '_negate'}


def make_call(name: str, arguments: List[Expression], span: SourceSpan) -> FunctionCall:
    """Build a call to a named builtin, located at ``span``."""
    return FunctionCall(callee=Identifier(name=name, span=span), arguments=arguments, span=span)


def is_call_to(node: Optional[Expression], name: str) -> bool:
    return (isinstance(node, FunctionCall)
            and isinstance(node.callee, Identifier)
            and node.callee.name == name)


def string_literal(value: str, span: SourceSpan) -> Literal:
    return Literal(value=value, literal_type=TokenType.STRING_LITERAL, span=span)


class CompoundAssignmentTransform(TreeTransform):
    """Expand `x op= y` into `x = x op y`, and `x++`/`x--` into `x = x ± 1`."""

    @property
    def name(self) -> str:
        return "compound-assignment"

    def visit_assignment(self, node: AssignmentExpr) -> Expression:
        node = super().visit_assignment(node)
        if node.operator == '=':
            return node
        value = BinaryOp(left=node.target, operator=node.operator[:-1], right=node.value,
                         span=node.span)
        return AssignmentExpr(target=node.target, operator='=', value=value, span=node.span)

    def visit_update(self, node: UpdateExpr) -> Expression:
        target = self.visit_expression(node.target)
        one = Literal(value=1.0, literal_type=TokenType.NUMBER_LITERAL, span=node.span)
        value = BinaryOp(left=target, operator=node.operator[0], right=one, span=node.span)
        return AssignmentExpr(target=target, operator='=', value=value, span=node.span)


class OperatorTransform(TreeTransform):
    """Replace binary and unary operators with builtin calls."""

    @property
    def name(self) -> str:
        return "operators"

    def visit_binary_op(self, node: BinaryOp) -> Expression:
        left = self.visit_expression(node.left)
        right = self.visit_expression(node.right)
        symbol = BINARY_OPERATORS.get(node.operator)
        if symbol is None:
            return BinaryOp(left=left, operator=node.operator, right=right, span=node.span)
        return make_call('_binaryOp', [left, right, string_literal(symbol, node.span)], node.span)

    def visit_unary_op(self, node: UnaryOp) -> Expression:
        operand = self.visit_expression(node.operand)
        if node.operator == '+':
            return operand
        builtin = UNARY_BUILTINS.get(node.operator)
        if builtin is None:
            return UnaryOp(operator=node.operator, operand=operand, span=node.span)
        return make_call(builtin, [operand], node.span)


class InputNamingTransform(TreeTransform):
    """Pass the declared name to input() so the uniform is named after it."""

    @property
    def name(self) -> str:
        return "input-naming"

    def visit_declarator(self, node: VarDeclarator) -> VarDeclarator:
        node = super().visit_declarator(node)
        init = node.initializer
        if not is_call_to(init, 'input'):
            return node
        args = init.arguments
        if args and isinstance(args[0], Literal) and args[0].literal_type == TokenType.STRING_LITERAL:
            return node
        named = FunctionCall(
            callee=init.callee,
            arguments=[string_literal(node.name, init.span)] + list(args),
            span=init.span,
        )
        return VarDeclarator(name=node.name, initializer=named, span=node.span)


class ConditionalTransform(TreeTransform):
    """Turn if statements and ?: expressions into _if/_ternary calls on thunks."""

    @property
    def name(self) -> str:
        return "conditionals"

    @staticmethod
    def _branch(stmt: Statement) -> FunctionExpr:
        body = stmt if isinstance(stmt, Block) else Block(statements=[stmt], span=stmt.span)
        return FunctionExpr(parameters=[], body=body, is_branch=True, span=stmt.span)

    @staticmethod
    def _thunk(expr: Expression) -> FunctionExpr:
        body = Block(statements=[ReturnStatement(value=expr, span=expr.span)], span=expr.span)
        return FunctionExpr(parameters=[], body=body, span=expr.span)

    def visit_if(self, node: IfStatement) -> Statement:
        node = super().visit_if(node)
        args: List[Expression] = [node.condition, self._branch(node.then_branch)]
        if node.else_branch is not None:
            args.append(self._branch(node.else_branch))
        return ExpressionStatement(expression=make_call('_if', args, node.span), span=node.span)

    def visit_conditional(self, node: ConditionalExpr) -> Expression:
        node = super().visit_conditional(node)
        return make_call('_ternary', [
            node.condition,
            self._thunk(node.true_branch),
            self._thunk(node.false_branch),
        ], node.span)


class DeclarationTransform(TreeTransform):
    """Wrap declaration initializers in _bindName so GLSL temporaries get readable names."""

    @property
    def name(self) -> str:
        return "declarations"

    def visit_declarator(self, node: VarDeclarator) -> VarDeclarator:
        node = super().visit_declarator(node)
        init = node.initializer
        if init is None:
            return node
        if is_call_to(init, '_bindName') and init.arguments:
            first = init.arguments[0]
            if isinstance(first, Literal) and first.value == node.name:
                return node
        wrapped = make_call('_bindName', [string_literal(node.name, init.span), init], init.span)
        return VarDeclarator(name=node.name, initializer=wrapped, span=node.span)


def default_pipeline() -> TransformPipeline:
    """The normalization passes in the order the interpreter expects."""
    return TransformPipeline([
        CompoundAssignmentTransform(),
        OperatorTransform(),
        InputNamingTransform(),
        ConditionalTransform(),
        DeclarationTransform(),
    ])
