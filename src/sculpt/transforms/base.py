"""
AST transformation framework.

Transforms rewrite a parsed Program before interpretation. The
normalization passes in ``normalize.py`` are built on ``TreeTransform``,
which rebuilds every node so that a subclass only overrides the visit
methods for the node types it rewrites.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..ast import (
    Program,
    Statement, VarDeclarator, VarDeclaration, FunctionDecl, IfStatement,
    ForStatement, WhileStatement, ReturnStatement, ExpressionStatement,
    Block, EmptyStatement,
    Expression, Literal, Identifier, BinaryOp, UnaryOp, UpdateExpr,
    AssignmentExpr, FunctionCall, MemberAccess, ConditionalExpr, FunctionExpr,
)

logger = logging.getLogger(__name__)


class AstTransform(ABC):
    """
    Base class for AST transformations.

    Transforms are applied to a Program and return a (potentially modified)
    Program. Transforms can be composed in a pipeline.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this transform for debugging/logging."""
        pass

    @abstractmethod
    def transform(self, program: Program) -> Program:
        """
        Apply this transform to a program.

        Args:
            program: The input program AST

        Returns:
            The transformed program (a new tree; the input is not mutated)
        """
        pass


class TreeTransform(AstTransform):
    """
    A transform that walks the whole tree and can replace nodes.

    Subclasses override visit_* methods to transform specific node types.
    By default, nodes are rebuilt with their children visited.
    """

    def transform(self, program: Program) -> Program:
        return self.visit_program(program)

    def visit_program(self, node: Program) -> Program:
        new_body = [self.visit_statement(stmt) for stmt in node.body]
        return Program(body=new_body, span=node.span)

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def visit_statement(self, node: Statement) -> Statement:
        """Visit a statement node."""
        if isinstance(node, VarDeclaration):
            return self.visit_var_declaration(node)
        elif isinstance(node, FunctionDecl):
            return self.visit_function_decl(node)
        elif isinstance(node, IfStatement):
            return self.visit_if(node)
        elif isinstance(node, ForStatement):
            return self.visit_for(node)
        elif isinstance(node, WhileStatement):
            return self.visit_while(node)
        elif isinstance(node, ExpressionStatement):
            return self.visit_expr_statement(node)
        elif isinstance(node, ReturnStatement):
            return self.visit_return(node)
        elif isinstance(node, Block):
            return self.visit_block(node)
        elif isinstance(node, EmptyStatement):
            return node
        else:
            return node

    def visit_var_declaration(self, node: VarDeclaration) -> Statement:
        new_declarators = [self.visit_declarator(d) for d in node.declarators]
        return VarDeclaration(kind=node.kind, declarators=new_declarators, span=node.span)

    def visit_declarator(self, node: VarDeclarator) -> VarDeclarator:
        new_init = self.visit_optional(node.initializer)
        return VarDeclarator(name=node.name, initializer=new_init, span=node.span)

    def visit_function_decl(self, node: FunctionDecl) -> Statement:
        return FunctionDecl(
            name=node.name,
            parameters=list(node.parameters),
            body=self.visit_block(node.body),
            span=node.span,
        )

    def visit_if(self, node: IfStatement) -> Statement:
        new_else = self.visit_statement(node.else_branch) if node.else_branch is not None else None
        return IfStatement(
            condition=self.visit_expression(node.condition),
            then_branch=self.visit_statement(node.then_branch),
            else_branch=new_else,
            span=node.span,
        )

    def visit_for(self, node: ForStatement) -> Statement:
        if isinstance(node.init, VarDeclaration):
            new_init = self.visit_var_declaration(node.init)
        else:
            new_init = self.visit_optional(node.init)
        return ForStatement(
            init=new_init,
            condition=self.visit_optional(node.condition),
            update=self.visit_optional(node.update),
            body=self.visit_statement(node.body),
            span=node.span,
        )

    def visit_while(self, node: WhileStatement) -> Statement:
        return WhileStatement(
            condition=self.visit_expression(node.condition),
            body=self.visit_statement(node.body),
            span=node.span,
        )

    def visit_expr_statement(self, node: ExpressionStatement) -> Statement:
        new_expr = self.visit_expression(node.expression)
        return ExpressionStatement(expression=new_expr, span=node.span)

    def visit_return(self, node: ReturnStatement) -> Statement:
        return ReturnStatement(value=self.visit_optional(node.value), span=node.span)

    def visit_block(self, node: Block) -> Block:
        new_stmts = [self.visit_statement(stmt) for stmt in node.statements]
        return Block(statements=new_stmts, span=node.span)

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def visit_optional(self, node: Optional[Expression]) -> Optional[Expression]:
        return self.visit_expression(node) if node is not None else None

    def visit_expression(self, node: Expression) -> Expression:
        """Visit an expression node."""
        if isinstance(node, Literal):
            return self.visit_literal(node)
        elif isinstance(node, Identifier):
            return self.visit_identifier(node)
        elif isinstance(node, BinaryOp):
            return self.visit_binary_op(node)
        elif isinstance(node, UnaryOp):
            return self.visit_unary_op(node)
        elif isinstance(node, UpdateExpr):
            return self.visit_update(node)
        elif isinstance(node, AssignmentExpr):
            return self.visit_assignment(node)
        elif isinstance(node, FunctionCall):
            return self.visit_function_call(node)
        elif isinstance(node, MemberAccess):
            return self.visit_member_access(node)
        elif isinstance(node, ConditionalExpr):
            return self.visit_conditional(node)
        elif isinstance(node, FunctionExpr):
            return self.visit_function_expr(node)
        else:
            return node

    def visit_literal(self, node: Literal) -> Expression:
        return node

    def visit_identifier(self, node: Identifier) -> Expression:
        return node

    def visit_binary_op(self, node: BinaryOp) -> Expression:
        return BinaryOp(
            left=self.visit_expression(node.left),
            operator=node.operator,
            right=self.visit_expression(node.right),
            span=node.span,
        )

    def visit_unary_op(self, node: UnaryOp) -> Expression:
        return UnaryOp(
            operator=node.operator,
            operand=self.visit_expression(node.operand),
            span=node.span,
        )

    def visit_update(self, node: UpdateExpr) -> Expression:
        return UpdateExpr(
            operator=node.operator,
            target=self.visit_expression(node.target),
            prefix=node.prefix,
            span=node.span,
        )

    def visit_assignment(self, node: AssignmentExpr) -> Expression:
        return AssignmentExpr(
            target=self.visit_expression(node.target),
            operator=node.operator,
            value=self.visit_expression(node.value),
            span=node.span,
        )

    def visit_function_call(self, node: FunctionCall) -> Expression:
        return FunctionCall(
            callee=self.visit_expression(node.callee),
            arguments=[self.visit_expression(arg) for arg in node.arguments],
            span=node.span,
        )

    def visit_member_access(self, node: MemberAccess) -> Expression:
        new_obj = self.visit_expression(node.object)
        return MemberAccess(object=new_obj, member=node.member, span=node.span)

    def visit_conditional(self, node: ConditionalExpr) -> Expression:
        return ConditionalExpr(
            condition=self.visit_expression(node.condition),
            true_branch=self.visit_expression(node.true_branch),
            false_branch=self.visit_expression(node.false_branch),
            span=node.span,
        )

    def visit_function_expr(self, node: FunctionExpr) -> Expression:
        return FunctionExpr(
            parameters=list(node.parameters),
            body=self.visit_block(node.body),
            name=node.name,
            is_branch=node.is_branch,
            span=node.span,
        )


class TransformPipeline:
    """
    A pipeline of AST transforms to apply in sequence.
    """

    def __init__(self, transforms: List[AstTransform] = None):
        self.transforms = transforms or []

    def add(self, transform: AstTransform) -> "TransformPipeline":
        """Add a transform to the pipeline."""
        self.transforms.append(transform)
        return self

    @property
    def names(self) -> List[str]:
        return [t.name for t in self.transforms]

    def apply(self, program: Program) -> Program:
        """Apply all transforms in sequence."""
        result = program
        for transform in self.transforms:
            logger.debug("applying transform %s", transform.name)
            result = transform.transform(result)
        return result
