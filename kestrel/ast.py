"""Abstract Syntax Tree (AST) definitions for the Kestrel language.

The AST classes defined in this module represent the syntactic structure
of parsed Kestrel programs. They are produced by both front ends (the
recursive-descent parser and the grammar-based parser) and consumed by
the interpreter. Every node records the source position it came from;
positions do not take part in equality, so trees built from different
front ends compare equal when their structure does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False)
    column: int = field(default=0, kw_only=True, compare=False)


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class IntegerLiteral(Node):
    value: int


@dataclass
class FloatLiteral(Node):
    value: float


@dataclass
class Identifier(Node):
    name: str


@dataclass
class BinaryExpression(Node):
    left: Node
    operator: str  # one of + - * / % ^
    right: Node


@dataclass
class AssignmentExpression(Node):
    target: Node
    operator: str  # '=' or the arithmetic character of a compound assignment
    value: Node


@dataclass
class VariableDeclaration(Node):
    name: Node  # normally an Identifier
    value: Node


@dataclass
class Scope(Node):
    body: List[Node]


@dataclass
class Arguments(Node):
    items: List[Node]


@dataclass
class FunctionCall(Node):
    callee: Node
    arguments: Arguments
