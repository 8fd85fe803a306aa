# Kestrel language package
# This package provides a lexer, parser and tree-walking interpreter for the Kestrel language.
from .interpreter import run_program, compile_module, evaluate, Interpreter
from .errors import KestrelError, KestrelParseError

__all__ = [
    'run_program',
    'compile_module',
    'evaluate',
    'Interpreter',
    'KestrelError',
    'KestrelParseError',
]
