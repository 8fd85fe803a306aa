"""Tree-walking interpreter for the Kestrel language.

The interpreter evaluates an AST produced by :mod:`kestrel.parser` (or
the grammar front end in :mod:`kestrel.grammar`) against a single flat
:class:`Environment`. Evaluation is fail fast: the first error raises a
:class:`KestrelError` and aborts the run.
"""

from __future__ import annotations

import math
import sys
from typing import Optional, TextIO

from .ast import (
    Node, StringLiteral, IntegerLiteral, FloatLiteral, Identifier,
    BinaryExpression, AssignmentExpression, VariableDeclaration, Scope,
    Arguments, FunctionCall,
)
from .builtin_function import Registry
from .environment import Environment, generate_environment
from .errors import KestrelError
from .grammar import parse_with_grammar
from .parser import parse_program
from .std.io import populate_io_registry
from .types import (
    RuntimeValue, NullVal, IntegerVal, FloatVal, StringVal, ArrayVal,
    FunctionVal, NativeFunctionVal, ErrorVal, in_i128_range, to_string, type_name,
)

MAX_DEPTH = 200

BINARY_OPERATORS = ('+', '-', '*', '/', '%', '^')


def standard_registry(stream: Optional[TextIO] = None) -> Registry:
    """Build the registry of native functions available to every program."""
    registry = Registry()
    populate_io_registry(registry, stream)
    return registry


def _truncated_mod(a: int, b: int) -> int:
    # remainder takes the sign of the dividend
    m = abs(a) % abs(b)
    return -m if a < 0 else m


class Interpreter:
    """Core interpreter that evaluates Kestrel ASTs."""
    def __init__(
        self,
        env: Optional[Environment] = None,
        registry: Optional[Registry] = None,
        debug_level: int = 0,
        debug_file: Optional[str] = 'debug.txt',
        max_depth: int = MAX_DEPTH,
        stream: Optional[TextIO] = None,
    ):
        self.registry = registry if registry is not None else standard_registry(stream)
        self.env = env if env is not None else generate_environment(self.registry)
        self.max_depth = max_depth
        self.depth = 0
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info):
        self.close()

    # Public API
    def run(self, program: Scope, env: Optional[Environment] = None) -> RuntimeValue:
        """Evaluate a whole program, logging each top-level statement."""
        if env is None:
            env = self.env
        result: RuntimeValue = NullVal()
        for stmt in program.body:
            result = self.evaluate(stmt, env)
            if self.debug_level >= 1:
                self.debug(f"line {stmt.line}: {type(stmt).__name__} -> {to_string(result)}")
        return result

    def evaluate(self, node: Node, env: Optional[Environment] = None) -> RuntimeValue:
        if env is None:
            env = self.env
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise self.error('Error', 'recursion too deep', node)
            return self._evaluate(node, env)
        finally:
            self.depth -= 1

    def _evaluate(self, node: Node, env: Environment) -> RuntimeValue:
        if isinstance(node, Scope):
            result: RuntimeValue = NullVal()
            # blocks share the caller's environment; no new frame is pushed
            for stmt in node.body:
                result = self.evaluate(stmt, env)
            return result
        if isinstance(node, IntegerLiteral):
            if not in_i128_range(node.value):
                raise self.error('Error', 'integer overflow', node)
            return IntegerVal(node.value)
        if isinstance(node, FloatLiteral):
            if math.isinf(node.value):
                raise self.error('Error', 'float overflow', node)
            return FloatVal(node.value)
        if isinstance(node, StringLiteral):
            return StringVal(node.value)
        if isinstance(node, Identifier):
            return env.get(node.name, node.line, node.column)
        if isinstance(node, VariableDeclaration):
            name = self.target_name(node.name, node)
            value = self.evaluate(node.value, env)
            env.declare(name, value, node.line, node.column)
            if self.debug_level >= 2:
                self.debug(f"declare {name}: {type_name(value)} = {to_string(value)}")
            return value
        if isinstance(node, AssignmentExpression):
            return self.evaluate_assignment(node, env)
        if isinstance(node, BinaryExpression):
            return self.evaluate_binary(node, env)
        if isinstance(node, FunctionCall):
            func = self.evaluate(node.callee, env)
            args = self.evaluate_arguments(node.arguments, env)
            return self.call_function(func, args, node)
        if isinstance(node, Arguments):
            return self.evaluate_arguments(node, env)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def error(self, kind: str, message: str, node: Optional[Node]) -> KestrelError:
        line = node.line if node is not None else 0
        column = node.column if node is not None else 0
        return KestrelError(ErrorVal(kind, message, line, column))

    def target_name(self, target: Node, node: Node) -> str:
        if not isinstance(target, Identifier):
            raise self.error('Error', f"expected an identifier, found {type(target).__name__}", node)
        return target.name

    def evaluate_assignment(self, node: AssignmentExpression, env: Environment) -> RuntimeValue:
        name = self.target_name(node.target, node)
        value = self.evaluate(node.value, env)
        if node.operator != '=':
            current = env.get(name, node.line, node.column)
            value = self.apply_binary_op(node.operator, current, value, node)
        env.assign(name, value, node.line, node.column)
        if self.debug_level >= 2:
            self.debug(f"assign {name} {node.operator} -> {to_string(value)}")
        return value

    def evaluate_binary(self, node: BinaryExpression, env: Environment) -> RuntimeValue:
        """Evaluate a left-associative operator chain.

        The left spine is folded in a loop, so only right operands add to
        the evaluation depth.
        """
        chain = []
        left: Node = node
        while isinstance(left, BinaryExpression):
            chain.append(left)
            left = left.left
        result = self.evaluate(left, env)
        for link in reversed(chain):
            right = self.evaluate(link.right, env)
            result = self.apply_binary_op(link.operator, result, right, link)
        return result

    def evaluate_arguments(self, arguments: Arguments, env: Environment) -> ArrayVal:
        return ArrayVal(tuple(self.evaluate(item, env) for item in arguments.items))

    def call_function(self, func: RuntimeValue, args: ArrayVal, node: Optional[Node] = None) -> RuntimeValue:
        if isinstance(func, NativeFunctionVal):
            builtin = self.registry.resolve(func.name)
            if builtin is None:
                raise self.error('NameError', f"native function '{func.name}' is not registered", node)
            # Check arity; None means variadic
            if builtin.arity is not None and len(args) != builtin.arity:
                raise self.error('TypeError', f"{builtin.name} expects {builtin.arity} arguments, got {len(args)}", node)
            if self.debug_level >= 3:
                self.debug(f"call {builtin.name}{to_string(args)}")
            return builtin.fn(args)
        if isinstance(func, FunctionVal):
            raise self.error('TypeError', 'user-defined functions cannot be called', node)
        raise self.error('TypeError', f"'{type_name(func)}' is not callable", node)

    def check_integer(self, result: int, node: Optional[Node]) -> IntegerVal:
        if not in_i128_range(result):
            raise self.error('Error', 'integer overflow', node)
        return IntegerVal(result)

    def check_float(self, result: float, x, y, node: Optional[Node]) -> FloatVal:
        # inf operands may legitimately produce inf
        if math.isinf(result) and not (math.isinf(x) or math.isinf(y)):
            raise self.error('Error', 'float overflow', node)
        return FloatVal(result)

    def apply_binary_op(self, op: str, a: RuntimeValue, b: RuntimeValue, node: Optional[Node] = None) -> RuntimeValue:
        if self.debug_level >= 3:
            self.debug(f"binary {to_string(a)} {op} {to_string(b)}")
        if op not in BINARY_OPERATORS:
            raise self.error('TypeError', f"unsupported operator '{op}'", node)
        numeric = (IntegerVal, FloatVal)
        if not isinstance(a, numeric) or not isinstance(b, numeric):
            raise self.error('TypeError', f"unsupported operand types for '{op}': '{type_name(a)}' and '{type_name(b)}'", node)
        both_int = isinstance(a, IntegerVal) and isinstance(b, IntegerVal)
        x, y = a.value, b.value
        if op == '+':
            return self.check_integer(x + y, node) if both_int else self.check_float(float(x) + float(y), x, y, node)
        if op == '-':
            return self.check_integer(x - y, node) if both_int else self.check_float(float(x) - float(y), x, y, node)
        if op == '*':
            return self.check_integer(x * y, node) if both_int else self.check_float(float(x) * float(y), x, y, node)
        if op == '/':
            # division always yields a Float, even for exact integer division
            if y == 0:
                raise self.error('Error', 'division by zero', node)
            return self.check_float(x / y if both_int else float(x) / float(y), x, y, node)
        if op == '%':
            # modulo only for integers
            if not both_int:
                raise self.error('TypeError', f"unsupported operand types for '%': '{type_name(a)}' and '{type_name(b)}'", node)
            if y == 0:
                raise self.error('Error', 'modulo by zero', node)
            return IntegerVal(_truncated_mod(x, y))
        # op == '^'
        if both_int and y >= 0:
            if abs(x) > 1 and y > 127:
                raise self.error('Error', 'integer overflow', node)
            return self.check_integer(x ** y, node)
        if x == 0 and y < 0:
            raise self.error('Error', 'division by zero', node)
        try:
            result = math.pow(float(x), float(y))
        except OverflowError:
            raise self.error('Error', 'float overflow', node)
        except ValueError:
            # negative base with a fractional exponent
            result = math.nan
        return FloatVal(result)


def evaluate(node: Node, env: Environment, registry: Optional[Registry] = None) -> RuntimeValue:
    """Evaluate ``node`` against ``env`` with the standard native functions."""
    return Interpreter(env=env, registry=registry).evaluate(node, env)


def run_program(
    source: str,
    interpreter: Optional[Interpreter] = None,
    use_grammar: bool = False,
    debug_level: int = 0,
) -> RuntimeValue:
    """Convenience function to parse and run a Kestrel program from source string.

    Parse errors are raised together as ``KestrelParseError`` and nothing
    is evaluated; lexical and runtime errors raise ``KestrelError``.
    """
    if use_grammar:
        program = parse_with_grammar(source)
    else:
        program = parse_program(source)
    if interpreter is None:
        interpreter = Interpreter(debug_level=debug_level)
        try:
            return interpreter.run(program)
        finally:
            interpreter.close()
    return interpreter.run(program)


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run a Kestrel file, returning the interpreter so its bindings can be inspected."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interpreter = Interpreter(debug_level=debug_level)
    try:
        run_program(source, interpreter)
    finally:
        interpreter.close()
    return interpreter
