"""
Tree-walking interpreter for normalized sculpt programs.

Runs the program once at compile time. Constant parts of the program are
evaluated directly; anything depending on shader inputs becomes GLSL text
written to the CompilerState buffers as a side effect of the builtins.

The interpreter expects the output of the normalization pipeline: operators,
if statements and ternaries must already be calls to the underscore builtins.
"""

import logging
from typing import List, Optional

from ..ast import (
    AstNode, Program, Statement, Expression,
    VarDeclaration, FunctionDecl, ExpressionStatement, ReturnStatement,
    Block, EmptyStatement, ForStatement, WhileStatement,
    Literal, Identifier, FunctionCall, MemberAccess, AssignmentExpr, FunctionExpr,
)
from ..errors import (
    DslError,
    error_type,
    error_not_callable,
    error_not_normalized,
    error_recursion_limit,
    error_wrong_dimension,
)
from ..tokens import TokenType
from .builtins import BuiltinRegistry, get_builtin_registry
from .context import CompilerState
from .values import (
    Value, Number, Boolean, String, Var, Closure, BuiltinFunction,
    type_name, to_var,
)

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Tree-walking interpreter for sculpt programs.

    Evaluates AST nodes by dispatching to type-specific methods. Builtins
    are bound in the global environment, so programs may shadow them.
    """

    def __init__(self, state: CompilerState, registry: Optional[BuiltinRegistry] = None):
        self.state = state
        self.registry = registry if registry is not None else get_builtin_registry()
        state.call = self.call_function

        for name in self.registry.names:
            state.reserve_name(name)
            if not state.global_env.contains(name):
                state.global_env.define(name, self.registry.get_function(name))

    def run(self, program: Program) -> None:
        """Execute a program, filling the state's buffers and uniforms."""
        try:
            self._execute_statements(program.body)
        except RecursionError:
            raise error_recursion_limit() from None
        logger.debug("executed %d statements, %d primitives",
                     len(program.body), self.state.csg.primitive_count)

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    def call_function(self, func: Value, args: List[Value]) -> Value:
        """Call a closure or builtin with already evaluated arguments."""
        if isinstance(func, BuiltinFunction):
            func.check_arity(len(args))
            return func.implementation(self.state, *args)
        if isinstance(func, Closure):
            return self._call_closure(func, args)
        raise error_not_callable("value", type_name(func))

    def _call_closure(self, closure: Closure, args: List[Value]) -> Value:
        env = closure.env.child(f"call:{closure.name or 'anonymous'}")
        for i, param in enumerate(closure.parameters):
            env.define(param, args[i] if i < len(args) else None)

        with self.state.use_environment(env):
            self._execute_statements(closure.body.statements)

        # A return inside an if branch belongs to the enclosing function
        if closure.is_branch:
            return None
        if self.state.should_return:
            value = self.state.return_value
            self.state.clear_return()
            return value
        return None

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _execute_statements(self, statements: List[Statement]) -> None:
        """Execute a statement list, hoisting its function declarations."""
        for stmt in statements:
            if isinstance(stmt, FunctionDecl):
                self._declare_function(stmt)

        for stmt in statements:
            if isinstance(stmt, FunctionDecl):
                continue
            self._execute_statement(stmt)
            if self.state.should_return:
                break

    def _execute_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, ExpressionStatement):
            self._evaluate(stmt.expression)
        elif isinstance(stmt, VarDeclaration):
            self._execute_var_declaration(stmt)
        elif isinstance(stmt, Block):
            with self.state.new_scope("block"):
                self._execute_statements(stmt.statements)
        elif isinstance(stmt, ForStatement):
            self._execute_for(stmt)
        elif isinstance(stmt, WhileStatement):
            self._execute_while(stmt)
        elif isinstance(stmt, ReturnStatement):
            value = self._evaluate(stmt.value) if stmt.value is not None else None
            self.state.signal_return(value)
        elif isinstance(stmt, FunctionDecl):
            self._declare_function(stmt)
        elif isinstance(stmt, EmptyStatement):
            pass
        else:
            raise self._located(error_not_normalized(type(stmt).__name__), stmt)

    def _declare_function(self, decl: FunctionDecl) -> None:
        closure = Closure(decl.parameters, decl.body, self.state.env, name=decl.name)
        self.state.env.define(decl.name, closure)

    def _execute_var_declaration(self, decl: VarDeclaration) -> None:
        for declarator in decl.declarators:
            value = None
            if declarator.initializer is not None:
                value = self._evaluate(declarator.initializer)
            self.state.env.define(declarator.name, value, constant=decl.kind == 'const')
            self.state.claim_temporary(declarator.name, value)

    def _loop_condition(self, condition: Optional[Expression]) -> bool:
        """Loops are unrolled, so their conditions must be known at compile time."""
        if condition is None:
            return True
        value = self._evaluate(condition)
        if not isinstance(value, Boolean):
            error = error_type(
                f"loop condition must be known at compile time. Was given: {type_name(value)}"
            )
            raise self._located(error, condition)
        return value.value

    def _execute_for(self, stmt: ForStatement) -> None:
        with self.state.new_scope("for-loop"):
            if isinstance(stmt.init, VarDeclaration):
                self._execute_var_declaration(stmt.init)
            elif stmt.init is not None:
                self._evaluate(stmt.init)

            while self._loop_condition(stmt.condition):
                self._execute_statement(stmt.body)
                if self.state.should_return:
                    return
                if stmt.update is not None:
                    self._evaluate(stmt.update)

    def _execute_while(self, stmt: WhileStatement) -> None:
        with self.state.new_scope("while-loop"):
            while self._loop_condition(stmt.condition):
                self._execute_statement(stmt.body)
                if self.state.should_return:
                    return

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def _evaluate(self, expr: Expression) -> Value:
        try:
            return self._evaluate_node(expr)
        except DslError as e:
            raise self._located(e, expr)

    def _evaluate_node(self, expr: Expression) -> Value:
        if isinstance(expr, Literal):
            return self._evaluate_literal(expr)
        if isinstance(expr, Identifier):
            return self.state.env.lookup(expr.name)
        if isinstance(expr, FunctionCall):
            return self._evaluate_call(expr)
        if isinstance(expr, MemberAccess):
            return self._evaluate_member_access(expr)
        if isinstance(expr, AssignmentExpr):
            return self._evaluate_assignment(expr)
        if isinstance(expr, FunctionExpr):
            return Closure(expr.parameters, expr.body, self.state.env,
                           name=expr.name, is_branch=expr.is_branch)
        raise error_not_normalized(type(expr).__name__)

    def _evaluate_literal(self, expr: Literal) -> Value:
        if expr.literal_type == TokenType.NUMBER_LITERAL:
            return Number(float(expr.value))
        if expr.literal_type == TokenType.BOOL_LITERAL:
            return Boolean(bool(expr.value))
        return String(expr.value)

    def _evaluate_call(self, call: FunctionCall) -> Value:
        callee = self._evaluate(call.callee)
        if not isinstance(callee, (Closure, BuiltinFunction)):
            name = call.callee.name if isinstance(call.callee, Identifier) else "expression"
            raise error_not_callable(name, type_name(callee))
        args = [self._evaluate(arg) for arg in call.arguments]
        return self.call_function(callee, args)

    def _evaluate_member_access(self, expr: MemberAccess) -> Value:
        obj = self._evaluate(expr.object)
        if not isinstance(obj, Var):
            raise error_type(f"a {type_name(obj)} has no member '{expr.member}'")
        return obj.get_component(expr.member)

    def _evaluate_assignment(self, expr: AssignmentExpr) -> Value:
        if expr.operator != '=':
            raise error_not_normalized(f"'{expr.operator}' assignment")
        value = self._evaluate(expr.value)
        target = expr.target

        if isinstance(target, MemberAccess):
            obj = self._evaluate(target.object)
            if not isinstance(obj, Var):
                raise error_type(f"a {type_name(obj)} has no member '{target.member}'")
            self.state.emit(obj.set_component(target.member, value))
            return value

        if not isinstance(target, Identifier):
            raise error_not_normalized(type(target).__name__)

        env = self.state.env
        current = env.lookup(target.name)
        if isinstance(current, Var) and env.owns_temporary(target.name, current.text):
            # The variable declared this GLSL temporary: write through to it.
            # Aliases (parameters, `y = x`) are rebound instead.
            if env.is_constant(target.name):
                raise error_type(f"assignment to constant variable '{target.name}'")
            source = to_var(value)
            if source.glsl_type is not current.glsl_type:
                raise error_wrong_dimension(
                    target.name, f"a {current.glsl_type}", type_name(value)
                )
            self.state.emit(f"{current.text} = {source.text};")
            return current

        env.assign(target.name, value)
        return value

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def _located(self, error: DslError, node: AstNode) -> DslError:
        if node.span is None:
            return error
        line = self.state.get_source_line(node.span.start.line)
        return error.locate(node.span, line, self.state.geometry_length)
