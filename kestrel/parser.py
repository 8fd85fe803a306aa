"""Recursive-descent parser for the Kestrel language.

Each grammar level handles one precedence tier and defers to the next
tighter tier for its operands:

    statement      := "let" assignment | expression
    expression     := assignment
    assignment     := additive ( ASSIGNMENT additive )?
    additive       := multiplicative ( ('+'|'-') multiplicative )*
    multiplicative := primary ( ('*'|'/'|'%'|'^') primary )*
    primary        := INTEGER | FLOAT
                    | IDENTIFIER ( '(' argument_list? ')' )?
                    | '(' expression ')'
                    | '{' statement* '}'

Errors are collected per top-level statement: a failing statement is
recorded and parsing resumes with the next one.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .ast import (
    Node, IntegerLiteral, FloatLiteral, Identifier, BinaryExpression,
    AssignmentExpression, VariableDeclaration, Scope, Arguments, FunctionCall,
)
from .errors import KestrelError, KestrelParseError
from .lexer import Token, TokenType, tokenize
from .types import ErrorVal, in_i128_range

MAX_NESTING = 100

ADDITIVE_OPERATORS = ('+', '-')
MULTIPLICATIVE_OPERATORS = ('*', '/', '%', '^')


class Parser:
    def __init__(self, tokens: Sequence[Token], max_nesting: int = MAX_NESTING):
        self.tokens: List[Token] = list(tokens)
        if not self.tokens or self.tokens[-1].type is not TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(Token(TokenType.EOF, '', last.line if last else 1, last.column if last else 1))
        self.pos = 0
        self.depth = 0
        self.max_nesting = max_nesting

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        # EOF is never consumed
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def match(self, kind: TokenType, *values: str) -> bool:
        token = self.peek()
        if token.type is not kind:
            return False
        return not values or token.value in values

    def error(self, kind: str, message: str, token: Token) -> KestrelError:
        return KestrelError(ErrorVal(kind, message, token.line, token.column))

    def parse_program(self) -> Tuple[Scope, List[ErrorVal]]:
        body: List[Node] = []
        errors: List[ErrorVal] = []
        while not self.match(TokenType.EOF):
            start = self.pos
            try:
                body.append(self.parse_statement())
            except KestrelError as ex:
                errors.append(ex.err)
                # always make progress so the same error cannot repeat forever
                if self.pos == start:
                    self.advance()
        return Scope(body, line=1, column=1), errors

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.type is TokenType.KEYWORD:
            if token.value == 'let':
                return self.parse_variable_declaration()
            self.advance()
            raise self.error('NameError', f"unknown keyword '{token.value}'", token)
        return self.parse_expression()

    def parse_variable_declaration(self) -> VariableDeclaration:
        let_token = self.advance()
        node = self.parse_expression()
        if not isinstance(node, AssignmentExpression) or node.operator != '=':
            raise self.error('SyntaxError', 'expected variable assignment', let_token)
        return VariableDeclaration(node.target, node.value, line=let_token.line, column=let_token.column)

    def parse_expression(self) -> Node:
        self.depth += 1
        try:
            if self.depth > self.max_nesting:
                raise self.error('Error', 'recursion too deep', self.peek())
            return self.parse_assignment()
        finally:
            self.depth -= 1

    def parse_assignment(self) -> Node:
        target = self.parse_additive()
        if self.match(TokenType.ASSIGNMENT):
            op_token = self.advance()
            value = self.parse_additive()
            # compound assignments keep only their arithmetic character
            operator = op_token.value[0] if len(op_token.value) == 2 else '='
            return AssignmentExpression(target, operator, value, line=op_token.line, column=op_token.column)
        return target

    def parse_additive(self) -> Node:
        node = self.parse_multiplicative()
        while self.match(TokenType.OPERATOR, *ADDITIVE_OPERATORS):
            op_token = self.advance()
            right = self.parse_multiplicative()
            node = BinaryExpression(node, op_token.value, right, line=op_token.line, column=op_token.column)
        return node

    def parse_multiplicative(self) -> Node:
        node = self.parse_primary()
        while self.match(TokenType.OPERATOR, *MULTIPLICATIVE_OPERATORS):
            op_token = self.advance()
            right = self.parse_primary()
            node = BinaryExpression(node, op_token.value, right, line=op_token.line, column=op_token.column)
        return node

    def parse_primary(self) -> Node:
        token = self.advance()
        if token.type is TokenType.INTEGER:
            value = int(token.value)
            if not in_i128_range(value):
                raise self.error('SyntaxError', f"integer literal {token.value} is out of range", token)
            return IntegerLiteral(value, line=token.line, column=token.column)
        if token.type is TokenType.FLOAT:
            value = float(token.value)
            if math.isinf(value):
                raise self.error('SyntaxError', f"float literal {token.value} is out of range", token)
            return FloatLiteral(value, line=token.line, column=token.column)
        if token.type is TokenType.IDENTIFIER:
            node = Identifier(token.value, line=token.line, column=token.column)
            if self.match(TokenType.OPEN_PAREN):
                return self.parse_call(node)
            return node
        if token.type is TokenType.OPEN_PAREN:
            node = self.parse_expression()
            if not self.match(TokenType.CLOSE_PAREN):
                found = self.peek()
                raise self.error('SyntaxError', f"expected ')' but found {found.describe()}", found)
            self.advance()
            return node
        if token.type is TokenType.OPEN_BRACE:
            return self.parse_scope(token)
        raise self.error('SyntaxError', f"unexpected token {token.describe()}", token)

    def parse_scope(self, open_token: Token) -> Scope:
        self.depth += 1
        try:
            if self.depth > self.max_nesting:
                raise self.error('Error', 'recursion too deep', open_token)
            body: List[Node] = []
            while not self.match(TokenType.CLOSE_BRACE):
                if self.match(TokenType.EOF):
                    raise self.error('SyntaxError', "expected '}' but found end of input", self.peek())
                body.append(self.parse_statement())
            self.advance()
            return Scope(body, line=open_token.line, column=open_token.column)
        finally:
            self.depth -= 1

    def parse_call(self, callee: Identifier) -> FunctionCall:
        open_token = self.advance()
        items: List[Node] = []
        if not self.match(TokenType.CLOSE_PAREN):
            items.append(self.parse_expression())
            while self.match(TokenType.COMMA):
                comma = self.advance()
                if self.match(TokenType.CLOSE_PAREN) or self.match(TokenType.EOF):
                    raise self.error('SyntaxError', "expected an expression after ','", comma)
                items.append(self.parse_expression())
        if not self.match(TokenType.CLOSE_PAREN):
            found = self.peek()
            raise self.error(
                'SyntaxError',
                f"expected ')' to close the call to '{callee.name}' but found {found.describe()}",
                found,
            )
        self.advance()
        arguments = Arguments(items, line=open_token.line, column=open_token.column)
        return FunctionCall(callee, arguments, line=callee.line, column=callee.column)


def generate_ast(tokens: Sequence[Token]) -> Tuple[Scope, List[ErrorVal]]:
    """Parse a token sequence into a program ``Scope`` plus the parse errors."""
    return Parser(tokens).parse_program()


def parse_program(source: str) -> Scope:
    """Parse the given source code into a program Scope using the custom parser.

    Lexical errors propagate as :class:`KestrelError`; if the parser
    collected any errors they are raised together as
    :class:`KestrelParseError`.
    """
    tokens = tokenize(source)
    program, errors = generate_ast(tokens)
    if errors:
        raise KestrelParseError(errors)
    return program
