"""Runtime value definitions and helpers for Kestrel.

This module defines the runtime values produced by the Kestrel evaluator
and the error record shared by every stage of the pipeline. Values are
frozen dataclasses so that a value read out of the environment can never
alias another binding; arrays and iterables therefore hold tuples.

Native functions are represented by an opaque handle (their registered
name). The callable itself lives in a :class:`kestrel.builtin_function.Registry`
and is resolved at call time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import Node


# Integers are signed 128-bit values.
I128_MIN = -(2 ** 127)
I128_MAX = 2 ** 127 - 1

ERROR_KINDS = ('Error', 'SyntaxError', 'NameError', 'TypeError')


def in_i128_range(value: int) -> bool:
    return I128_MIN <= value <= I128_MAX


@dataclass(frozen=True)
class ErrorVal:
    """Represents a Kestrel error.

    Errors are produced by the lexer, the parser and the evaluator. They
    carry a kind (one of ``Error``, ``SyntaxError``, ``NameError`` or
    ``TypeError``), a message and the source position of the token or
    node that caused them.
    """
    name: str
    message: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.name}: {self.message} in line {self.line} column {self.column}"


class RuntimeValue:
    """Base class for all runtime values."""
    __slots__ = ()


@dataclass(frozen=True)
class NullVal(RuntimeValue):
    """Marker object for the Kestrel null value."""

    def __repr__(self) -> str:
        return 'Null'


@dataclass(frozen=True)
class IntegerVal(RuntimeValue):
    value: int


@dataclass(frozen=True)
class FloatVal(RuntimeValue):
    value: float


@dataclass(frozen=True)
class StringVal(RuntimeValue):
    value: str


@dataclass(frozen=True)
class BooleanVal(RuntimeValue):
    value: bool


@dataclass(frozen=True)
class ArrayVal(RuntimeValue):
    """An ordered sequence of evaluated values.

    Native functions receive their arguments packed into an array.
    """
    items: Tuple[RuntimeValue, ...] = ()

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class IterableVal(RuntimeValue):
    """An ordered sequence of unevaluated AST nodes."""
    nodes: Tuple['Node', ...] = ()


@dataclass(frozen=True)
class FunctionVal(RuntimeValue):
    """A user-defined function.

    Kept as a value kind only; the evaluator refuses to call it.
    """
    params: Tuple[str, ...] = ()
    body: Tuple['Node', ...] = ()


@dataclass(frozen=True)
class NativeFunctionVal(RuntimeValue):
    """Handle to a native function registered under ``name``."""
    name: str

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


def type_name(value: Any) -> str:
    """Return the Kestrel type name of a runtime value."""
    if isinstance(value, NullVal):
        return 'Null'
    if isinstance(value, IntegerVal):
        return 'Integer'
    if isinstance(value, FloatVal):
        return 'Float'
    if isinstance(value, StringVal):
        return 'String'
    if isinstance(value, BooleanVal):
        return 'Boolean'
    if isinstance(value, ArrayVal):
        return 'Array'
    if isinstance(value, IterableVal):
        return 'Iterable'
    if isinstance(value, FunctionVal):
        return 'Function'
    if isinstance(value, NativeFunctionVal):
        return 'NativeFunction'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Convert a Kestrel value to its textual form for display.

    Every value kind has a defined rendering; this is what ``print`` and
    the command-line driver show.
    """
    if isinstance(value, NullVal):
        return 'NULL'
    if isinstance(value, IntegerVal):
        return str(value.value)
    if isinstance(value, FloatVal):
        # repr keeps the trailing '.0' so floats stay distinguishable from integers
        return repr(value.value)
    if isinstance(value, StringVal):
        return value.value
    if isinstance(value, BooleanVal):
        return 'true' if value.value else 'false'
    if isinstance(value, ArrayVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, IterableVal):
        return f"<iterable of {len(value.nodes)} nodes>"
    if isinstance(value, FunctionVal):
        return f"<function({', '.join(value.params)})>"
    if isinstance(value, NativeFunctionVal):
        return f"<builtin {value.name}>"
    return str(value)
