"""
Recursive descent parser for the sculpt DSL.

Converts a token stream into an Abstract Syntax Tree (AST). The grammar is
the JavaScript subset used by sculpt programs: declarations, functions and
arrow functions, if/else, for and while loops, and expressions.
"""

from typing import List, Optional, Union
from .tokens import Token, TokenType, SourceSpan, ASSIGNMENT_OPERATORS, is_declaration_keyword
from .ast import (
    # Expressions
    Expression, Literal, Identifier, BinaryOp, UnaryOp, UpdateExpr,
    AssignmentExpr, FunctionCall, MemberAccess, ConditionalExpr, FunctionExpr,
    # Statements
    Statement, VarDeclarator, VarDeclaration, FunctionDecl, IfStatement,
    ForStatement, WhileStatement, ReturnStatement, ExpressionStatement,
    Block, EmptyStatement, Program,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_invalid_assignment_target,
    error_illegal_return,
)


class Parser:
    """
    Recursive descent parser for the sculpt DSL.

    Usage:
        parser = Parser(tokens)
        program = parser.parse_program()

    The parser implements standard precedence climbing for binary operators:
        Lowest:  ||
                 &&
                 == != === !==
                 < > <= >=
                 + -
        Highest: * / %

    Assignment and the ?: conditional sit below ||; unary and postfix
    operators sit above the binary operators.
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.OR_OR: 1,
        TokenType.AND_AND: 2,
        TokenType.EQ: 3,
        TokenType.NE: 3,
        TokenType.STRICT_EQ: 3,
        TokenType.STRICT_NE: 3,
        TokenType.LT: 4,
        TokenType.GT: 4,
        TokenType.LE: 4,
        TokenType.GE: 4,
        TokenType.PLUS: 5,
        TokenType.MINUS: 5,
        TokenType.STAR: 6,
        TokenType.SLASH: 6,
        TokenType.PERCENT: 6,
    }

    def __init__(self, tokens: List[Token], filename: Optional[str] = None, source: Optional[str] = None):
        self.tokens = tokens
        self.filename = filename
        self.source = source
        self.pos = 0
        self._function_depth = 0
        self._lines = source.splitlines() if source is not None else []

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _peek(self, offset: int = 0) -> Token:
        """Peek at token at current position + offset."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        return self._current().type in token_types

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _source_line(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1]
        return None

    def _error(self, expected: str) -> None:
        """Raise a parser error."""
        token = self._current()
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span)
        found = f"'{token.lexeme}'" if token.lexeme else token.type.name
        raise error_unexpected_token(expected, found, token.span,
                                     self._source_line(token.span.start.line))

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the end of the previous token."""
        prev_pos = max(0, self.pos - 1)
        end_token = self.tokens[prev_pos]
        return SourceSpan(start.span.start, end_token.span.end)

    def _consume_semicolon(self) -> None:
        """Semicolons terminate statements but may be left out."""
        self._match(TokenType.SEMICOLON)

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression, including assignment."""
        return self._parse_assignment_expr()

    def _parse_assignment_expr(self) -> Expression:
        """Parse assignment (right-associative, lowest precedence)."""
        target = self._parse_conditional_expr()

        if self._current().type in ASSIGNMENT_OPERATORS:
            op = self._advance()
            if not isinstance(target, (Identifier, MemberAccess)):
                raise error_invalid_assignment_target(
                    target.span, self._source_line(target.span.start.line)
                )
            value = self._parse_assignment_expr()
            return AssignmentExpr(
                span=SourceSpan(target.span.start, value.span.end),
                target=target,
                operator=op.lexeme,
                value=value,
            )

        return target

    def _parse_conditional_expr(self) -> Expression:
        """Parse a ternary conditional (c ? a : b)."""
        condition = self._parse_binary_expr(0)

        if not self._match(TokenType.QUESTION):
            return condition

        true_branch = self._parse_assignment_expr()
        self._consume(TokenType.COLON, "':'")
        false_branch = self._parse_assignment_expr()

        return ConditionalExpr(
            span=SourceSpan(condition.span.start, false_branch.span.end),
            condition=condition,
            true_branch=true_branch,
            false_branch=false_branch,
        )

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator
            right = self._parse_binary_expr(precedence + 1)

            left = BinaryOp(
                span=SourceSpan(left.span.start, right.span.end),
                left=left,
                operator=op_token.lexeme,
                right=right,
            )

        return left

    def _parse_unary_expr(self) -> Expression:
        """Parse unary expressions (!, -, +, prefix ++ and --)."""
        if self._check_any(TokenType.BANG, TokenType.MINUS, TokenType.PLUS):
            op = self._advance()
            operand = self._parse_unary_expr()
            return UnaryOp(
                span=SourceSpan(op.span.start, operand.span.end),
                operator=op.lexeme,
                operand=operand,
            )

        if self._check_any(TokenType.PLUS_PLUS, TokenType.MINUS_MINUS):
            op = self._advance()
            target = self._parse_unary_expr()
            self._check_update_target(target)
            return UpdateExpr(
                span=SourceSpan(op.span.start, target.span.end),
                operator=op.lexeme,
                target=target,
                prefix=True,
            )

        return self._parse_postfix_expr()

    def _check_update_target(self, target: Expression) -> None:
        if not isinstance(target, (Identifier, MemberAccess)):
            raise error_invalid_assignment_target(
                target.span, self._source_line(target.span.start.line)
            )

    def _parse_postfix_expr(self) -> Expression:
        """Parse postfix expressions (calls, member access, i++)."""
        expr = self._parse_primary_expr()

        while True:
            if self._check(TokenType.LPAREN):
                expr = self._parse_call(expr)
            elif self._match(TokenType.DOT):
                member = self._consume(TokenType.IDENTIFIER, "property name")
                expr = MemberAccess(
                    span=SourceSpan(expr.span.start, member.span.end),
                    object=expr,
                    member=member.value,
                )
            elif self._check_any(TokenType.PLUS_PLUS, TokenType.MINUS_MINUS):
                self._check_update_target(expr)
                op = self._advance()
                expr = UpdateExpr(
                    span=SourceSpan(expr.span.start, op.span.end),
                    operator=op.lexeme,
                    target=expr,
                    prefix=False,
                )
            else:
                break

        return expr

    def _parse_call(self, callee: Expression) -> FunctionCall:
        """Parse function call arguments."""
        args = self._parse_arguments()
        return FunctionCall(
            span=SourceSpan(callee.span.start, self.tokens[self.pos - 1].span.end),
            callee=callee,
            arguments=args,
        )

    def _parse_arguments(self) -> List[Expression]:
        self._consume(TokenType.LPAREN, "'('")

        args = []
        if not self._check(TokenType.RPAREN):
            args.append(self._parse_assignment_expr())
            while self._match(TokenType.COMMA):
                if self._check(TokenType.RPAREN):
                    break  # Allow trailing comma
                args.append(self._parse_assignment_expr())

        self._consume(TokenType.RPAREN, "')'")
        return args

    def _parse_primary_expr(self) -> Expression:
        """Parse primary expressions (literals, identifiers, grouped, functions)."""
        token = self._current()

        if token.type in (TokenType.NUMBER_LITERAL, TokenType.STRING_LITERAL,
                          TokenType.BOOL_LITERAL):
            self._advance()
            return Literal(span=token.span, value=token.value, literal_type=token.type)

        if token.type == TokenType.IDENTIFIER:
            # Single-parameter arrow function: x => ...
            if self._peek(1).type == TokenType.ARROW:
                self._advance()
                self._advance()
                return self._parse_arrow_body(token, [token.value])
            self._advance()
            return Identifier(span=token.span, name=token.value)

        if token.type == TokenType.LPAREN:
            return self._parse_grouped_or_arrow()

        if token.type == TokenType.FUNCTION:
            return self._parse_function_expr()

        self._error("expression")

    def _parse_grouped_or_arrow(self) -> Expression:
        """Parse a parenthesized expression or an arrow function."""
        start = self._advance()  # consume '('

        if self._check(TokenType.RPAREN):
            self._advance()
            self._consume(TokenType.ARROW, "'=>'")
            return self._parse_arrow_body(start, [])

        # Could be arrow parameters or a grouped expression; look ahead
        if self._check(TokenType.IDENTIFIER):
            saved_pos = self.pos
            param_names = [self._advance().value]

            while self._match(TokenType.COMMA):
                if self._check(TokenType.IDENTIFIER):
                    param_names.append(self._advance().value)
                else:
                    break

            if self._match(TokenType.RPAREN) and self._match(TokenType.ARROW):
                return self._parse_arrow_body(start, param_names)

            self.pos = saved_pos

        expr = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        return expr

    def _parse_arrow_body(self, start: Token, parameters: List[str]) -> FunctionExpr:
        """Parse the body after '=>': either a block or a single expression."""
        self._function_depth += 1
        try:
            if self._check(TokenType.LBRACE):
                body = self._parse_block()
            else:
                expr = self._parse_assignment_expr()
                body = Block(span=expr.span, statements=[
                    ReturnStatement(span=expr.span, value=expr)
                ])
        finally:
            self._function_depth -= 1
        return FunctionExpr(span=self._span_from(start), parameters=parameters, body=body)

    def _parse_parameters(self) -> List[str]:
        self._consume(TokenType.LPAREN, "'('")
        params = []
        if not self._check(TokenType.RPAREN):
            params.append(self._consume(TokenType.IDENTIFIER, "parameter name").value)
            while self._match(TokenType.COMMA):
                params.append(self._consume(TokenType.IDENTIFIER, "parameter name").value)
        self._consume(TokenType.RPAREN, "')'")
        return params

    def _parse_function_body(self) -> Block:
        self._function_depth += 1
        try:
            return self._parse_block()
        finally:
            self._function_depth -= 1

    def _parse_function_expr(self) -> FunctionExpr:
        """Parse `function name? (params) { ... }` in expression position."""
        start = self._consume(TokenType.FUNCTION, "'function'")
        name = None
        if self._check(TokenType.IDENTIFIER):
            name = self._advance().value
        params = self._parse_parameters()
        body = self._parse_function_body()
        return FunctionExpr(span=self._span_from(start), parameters=params, body=body, name=name)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse a single statement."""
        token = self._current()

        if is_declaration_keyword(token.type):
            decl = self._parse_var_declaration()
            self._consume_semicolon()
            return decl

        if token.type == TokenType.FUNCTION and self._peek(1).type == TokenType.IDENTIFIER:
            return self._parse_function_decl()

        if token.type == TokenType.IF:
            return self._parse_if_statement()

        if token.type == TokenType.FOR:
            return self._parse_for_statement()

        if token.type == TokenType.WHILE:
            return self._parse_while_statement()

        if token.type == TokenType.RETURN:
            return self._parse_return_statement()

        if token.type == TokenType.LBRACE:
            return self._parse_block()

        if token.type == TokenType.SEMICOLON:
            self._advance()
            return EmptyStatement(span=token.span)

        expr = self._parse_expression()
        self._consume_semicolon()
        return ExpressionStatement(span=expr.span, expression=expr)

    def _parse_var_declaration(self) -> VarDeclaration:
        """Parse `let a = 1, b` without the trailing semicolon."""
        start = self._advance()  # let / const / var
        declarators = [self._parse_declarator()]
        while self._match(TokenType.COMMA):
            declarators.append(self._parse_declarator())
        return VarDeclaration(span=self._span_from(start), kind=start.lexeme,
                              declarators=declarators)

    def _parse_declarator(self) -> VarDeclarator:
        name = self._consume(TokenType.IDENTIFIER, "variable name")
        initializer = None
        if self._match(TokenType.ASSIGN):
            initializer = self._parse_assignment_expr()
        return VarDeclarator(span=self._span_from(name), name=name.value,
                             initializer=initializer)

    def _parse_function_decl(self) -> FunctionDecl:
        start = self._consume(TokenType.FUNCTION, "'function'")
        name = self._consume(TokenType.IDENTIFIER, "function name").value
        params = self._parse_parameters()
        body = self._parse_function_body()
        return FunctionDecl(span=self._span_from(start), name=name, parameters=params, body=body)

    def _parse_if_statement(self) -> IfStatement:
        start = self._consume(TokenType.IF, "'if'")
        self._consume(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        then_branch = self._parse_statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()
        return IfStatement(span=self._span_from(start), condition=condition,
                           then_branch=then_branch, else_branch=else_branch)

    def _parse_for_statement(self) -> ForStatement:
        """Parse `for (init; condition; update) body`."""
        start = self._consume(TokenType.FOR, "'for'")
        self._consume(TokenType.LPAREN, "'('")

        init: Optional[Union[VarDeclaration, Expression]] = None
        if is_declaration_keyword(self._current().type):
            init = self._parse_var_declaration()
        elif not self._check(TokenType.SEMICOLON):
            init = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';'")

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';'")

        update = None
        if not self._check(TokenType.RPAREN):
            update = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")

        body = self._parse_statement()
        return ForStatement(span=self._span_from(start), init=init, condition=condition,
                            update=update, body=body)

    def _parse_while_statement(self) -> WhileStatement:
        start = self._consume(TokenType.WHILE, "'while'")
        self._consume(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        body = self._parse_statement()
        return WhileStatement(span=self._span_from(start), condition=condition, body=body)

    def _parse_return_statement(self) -> ReturnStatement:
        start = self._consume(TokenType.RETURN, "'return'")
        if self._function_depth == 0:
            raise error_illegal_return(start.span, self._source_line(start.span.start.line))

        value = None
        if not self._check_any(TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF):
            value = self._parse_expression()
        self._consume_semicolon()
        return ReturnStatement(span=self._span_from(start), value=value)

    def _parse_block(self) -> Block:
        """Parse a braced block of statements."""
        start = self._consume(TokenType.LBRACE, "'{'")
        statements = []
        while not self._check(TokenType.RBRACE):
            if self._is_at_end():
                self._error("'}'")
            statements.append(self._parse_statement())
        self._consume(TokenType.RBRACE, "'}'")
        return Block(span=self._span_from(start), statements=statements)

    # =========================================================================
    # Top-Level Parsing
    # =========================================================================

    def parse_program(self) -> Program:
        """Parse a complete program."""
        start = self._current()
        body = []
        while not self._is_at_end():
            body.append(self._parse_statement())
        return Program(span=self._span_from(start) if body else start.span, body=body)


def parse(tokens: List[Token], filename: Optional[str] = None, source: Optional[str] = None) -> Program:
    """
    Convenience function to parse tokens into a program.

    Args:
        tokens: List of tokens from the lexer
        filename: Optional filename for error messages
        source: Optional original source code, used to quote lines in errors

    Returns:
        Parsed Program AST

    Raises:
        ParseError: If parsing fails
    """
    parser = Parser(tokens, filename, source)
    return parser.parse_program()
