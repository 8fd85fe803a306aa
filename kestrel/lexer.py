"""Tokenizer for the Kestrel language.

The lexer makes a single left-to-right pass over the source, keeping
running line and column counters. It recognizes names, numbers,
operators, punctuation and ``#`` ... ``!`` comments. The first lexical
error aborts tokenization; no partial token list is returned.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from .errors import KestrelError
from .types import ErrorVal


class TokenType(Enum):
    OPERATOR = auto()
    INTEGER = auto()
    FLOAT = auto()
    IDENTIFIER = auto()
    DOT = auto()
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()
    OPEN_BRACKET = auto()
    CLOSE_BRACKET = auto()
    OPEN_BRACE = auto()
    CLOSE_BRACE = auto()
    KEYWORD = auto()
    ASSIGNMENT = auto()
    COMMA = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int

    def describe(self) -> str:
        if self.type is TokenType.EOF:
            return 'end of input'
        return f"'{self.value}'"


KEYWORDS = ('let', 'if', 'else', 'while', 'for')

OPERATORS = '+-*/%^'

NAME_START = frozenset(string.ascii_letters + '_')
NAME_CHARS = frozenset(string.ascii_letters + string.digits + '_')
DIGITS = frozenset(string.digits)

PUNCTUATION = {
    '(': TokenType.OPEN_PAREN,
    ')': TokenType.CLOSE_PAREN,
    '[': TokenType.OPEN_BRACKET,
    ']': TokenType.CLOSE_BRACKET,
    '{': TokenType.OPEN_BRACE,
    '}': TokenType.CLOSE_BRACE,
    '.': TokenType.DOT,
    ',': TokenType.COMMA,
}


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with ``EOF``.

    Positions are 1-based and point at the first character of each
    token. Raises :class:`KestrelError` with a ``SyntaxError`` on the
    first malformed number, unterminated comment or invalid character.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            c = source[i]
            if c == '\n' or (c == '\r' and source[i + 1:i + 2] != '\n'):
                line += 1
                col = 1
            elif c != '\r':
                col += 1
            i += 1

    def fail(message: str, at_line: int, at_col: int):
        raise KestrelError(ErrorVal('SyntaxError', message, at_line, at_col))

    while i < length:
        c = source[i]
        if c in ' \t\n\r':
            advance()
            continue
        # Comments run from '#' to the next '!'
        if c == '#':
            start_line, start_col = line, col
            advance()
            while i < length and source[i] != '!':
                advance()
            if i >= length:
                fail('comment not closed', start_line, start_col)
            advance()
            continue
        if c in NAME_START:
            start_line, start_col = line, col
            start_i = i
            while i < length and source[i] in NAME_CHARS:
                advance()
            value = source[start_i:i]
            kind = TokenType.KEYWORD if value in KEYWORDS else TokenType.IDENTIFIER
            tokens.append(Token(kind, value, start_line, start_col))
            continue
        if c in DIGITS:
            start_line, start_col = line, col
            start_i = i
            has_dot = False
            while i < length and (source[i] in DIGITS or source[i] == '.'):
                if source[i] == '.':
                    if has_dot:
                        fail('number cannot contain more than one decimal point', line, col)
                    has_dot = True
                advance()
            value = source[start_i:i]
            kind = TokenType.FLOAT if has_dot else TokenType.INTEGER
            tokens.append(Token(kind, value, start_line, start_col))
            continue
        if c in OPERATORS:
            if source[i + 1:i + 2] == '=':
                tokens.append(Token(TokenType.ASSIGNMENT, c + '=', line, col))
                advance(2)
            else:
                tokens.append(Token(TokenType.OPERATOR, c, line, col))
                advance()
            continue
        if c == '=':
            tokens.append(Token(TokenType.ASSIGNMENT, c, line, col))
            advance()
            continue
        if c in PUNCTUATION:
            tokens.append(Token(PUNCTUATION[c], c, line, col))
            advance()
            continue
        fail(f"invalid character {c!r}", line, col)
    tokens.append(Token(TokenType.EOF, '', line, col))
    return tokens
