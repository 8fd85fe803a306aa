from .basic_io import BasicIO
from kestrel.builtin_function import BuiltinFunction, Registry
from kestrel.types import ArrayVal, NullVal, RuntimeValue
from typing import Optional, TextIO


def populate_io_registry(registry: Registry, stream: Optional[TextIO] = None) -> Registry:
        basic_io = BasicIO(stream)

        def std_print(args: ArrayVal) -> RuntimeValue:
            basic_io.write_line(basic_io.format_line(args.items))
            return NullVal()

        registry.register(BuiltinFunction('print', None, std_print))

        return registry
