"""Grammar-based parser for the Kestrel language.

This module describes the Kestrel syntax as a Lark LALR grammar and
turns the resulting parse tree into the same AST classes the
recursive-descent parser in :mod:`kestrel.parser` produces. For every
valid program both front ends yield equal trees, which makes this module
a reference for the hand-written parser.

Unlike the hand-written parser this front end stops at the first error;
it is selected with ``--grammar`` on the command line.
"""

from __future__ import annotations

import math

from lark import Lark, Token, v_args
from lark.visitors import Transformer_NonRecursive
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from .ast import (
    Node, IntegerLiteral, FloatLiteral, Identifier, BinaryExpression,
    AssignmentExpression, VariableDeclaration, Scope, Arguments, FunctionCall,
)
from .errors import KestrelError
from .lexer import DIGITS, KEYWORDS, NAME_CHARS, PUNCTUATION
from .types import ErrorVal, in_i128_range


KESTREL_GRAMMAR = r"""
    ?start: program
    program: _statement*

    _statement: declaration
              | expression

    declaration: "let" sum ASSIGN sum

    // Expressions with precedence
    ?expression: sum
               | sum ASSIGN sum -> assignment
    ?sum: product
        | sum ADD_OP product -> binary
    ?product: atom
            | product MUL_OP atom -> binary
    ?atom: INT
         | FLOAT
         | NAME
         | call
         | "(" expression ")"
         | scope

    call: NAME "(" [arguments] ")"
    arguments: expression ("," expression)*
    scope: "{" _statement* "}"

    // Tokens
    ASSIGN.2: /[-+*\/%^]?=/
    ADD_OP: "+" | "-"
    MUL_OP: "*" | "/" | "%" | "^"
    FLOAT: /\d+\.\d*/
    INT: /\d+/
    NAME: /[A-Za-z_][A-Za-z0-9_]*/

    // Comments run from '#' to the next '!'
    COMMENT: /#[^!]*!/
    %ignore COMMENT
    %ignore /[ \t\r\n]+/
"""


KESTREL_PARSER = Lark(
    KESTREL_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
    lexer='basic',
)


def _syntax_error(message: str, token: Token) -> KestrelError:
    return KestrelError(ErrorVal('SyntaxError', message, token.line or 0, token.column or 0))


class ASTTransformer(Transformer_NonRecursive):
    """Transforms the raw parse tree into an AST.

    Long operator chains produce very deep trees, so the non-recursive
    transformer is used.
    """

    def program(self, items):
        return Scope(list(items), line=1, column=1)

    def declaration(self, items):
        target, op, value = items
        if op.value != '=':
            raise _syntax_error('expected variable assignment', op)
        return VariableDeclaration(target, value, line=target.line, column=target.column)

    def assignment(self, items):
        target, op, value = items
        operator = op.value[0] if len(op.value) == 2 else '='
        return AssignmentExpression(target, operator, value, line=op.line, column=op.column)

    def binary(self, items):
        left, op, right = items
        return BinaryExpression(left, str(op), right, line=op.line, column=op.column)

    def call(self, items):
        callee = items[0]
        arguments = items[1] if len(items) > 1 else Arguments([], line=callee.line, column=callee.column)
        return FunctionCall(callee, arguments, line=callee.line, column=callee.column)

    def arguments(self, items):
        first: Node = items[0]
        return Arguments(list(items), line=first.line, column=first.column)

    @v_args(meta=True)
    def scope(self, meta, items):
        return Scope(list(items), line=getattr(meta, 'line', 0), column=getattr(meta, 'column', 0))

    def INT(self, token):
        value = int(token.value)
        if not in_i128_range(value):
            raise _syntax_error(f"integer literal {token.value} is out of range", token)
        return IntegerLiteral(value, line=token.line, column=token.column)

    def FLOAT(self, token):
        value = float(token.value)
        if math.isinf(value):
            raise _syntax_error(f"float literal {token.value} is out of range", token)
        return FloatLiteral(value, line=token.line, column=token.column)

    def NAME(self, token):
        if token.value in KEYWORDS:
            raise KestrelError(ErrorVal('NameError', f"unknown keyword '{token.value}'", token.line, token.column))
        return Identifier(token.value, line=token.line, column=token.column)


def _inside_number(source: str, pos: int) -> bool:
    # a second decimal point in a digit run the hand lexer treats as one number
    start = pos
    while start > 0 and (source[start - 1] in DIGITS or source[start - 1] == '.'):
        start -= 1
    run = source[start:pos]
    if start > 0 and source[start - 1] in NAME_CHARS:
        return False
    return run[:1] in DIGITS and '.' in run


def _follows_comma(source: str, pos: int) -> bool:
    return source[:pos].rstrip().endswith(',')


def _describe_failure(ex: UnexpectedInput, source: str) -> str:
    if isinstance(ex, UnexpectedCharacters):
        if ex.char == '#':
            return 'comment not closed'
        if ex.char == '.' and _inside_number(source, ex.pos_in_stream):
            return 'number cannot contain more than one decimal point'
        if ex.char in PUNCTUATION:
            # the hand lexer accepts these and its parser rejects them
            return f"unexpected token '{ex.char}'"
        return f"invalid character {ex.char!r}"
    if isinstance(ex, UnexpectedToken):
        at_end = ex.token.type == '$END'
        pos = len(source) if at_end else ex.token.start_pos
        if (at_end or ex.token.value == ')') and _follows_comma(source, pos):
            return "expected an expression after ','"
        if at_end:
            return 'unexpected end of input'
        return f"unexpected token '{ex.token.value}'"
    return 'unexpected end of input'


def parse_with_grammar(source: str) -> Scope:
    """Parse Kestrel source code into a program Scope using the Lark grammar.

    Any syntax error is raised as a single :class:`KestrelError`.
    """
    try:
        tree = KESTREL_PARSER.parse(source)
    except UnexpectedInput as ex:
        line = max(getattr(ex, 'line', 0) or 0, 0)
        column = max(getattr(ex, 'column', 0) or 0, 0)
        raise KestrelError(ErrorVal('SyntaxError', _describe_failure(ex, source), line, column)) from None
    try:
        program = ASTTransformer().transform(tree)
    except VisitError as ex:
        if isinstance(ex.orig_exc, KestrelError):
            raise ex.orig_exc from None
        raise
    return program

