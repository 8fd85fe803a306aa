from typing import Dict, Optional
from kestrel.builtin_function import Registry
from kestrel.errors import KestrelError
from kestrel.types import ErrorVal, NativeFunctionVal, RuntimeValue


class Environment:
    """The name to value binding table shared by a whole program run.

    There is a single flat table: blocks do not push or pop frames, so a
    declaration inside ``{ }`` stays visible after the block ends.
    """
    def __init__(self, values: Optional[Dict[str, RuntimeValue]] = None):
        self.values: Dict[str, RuntimeValue] = dict(values or {})

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def declare(self, name: str, value: RuntimeValue, line: int = 0, column: int = 0):
        if name in self.values:
            raise KestrelError(ErrorVal('NameError', f"'{name}' is already declared", line, column))
        self.values[name] = value

    def assign(self, name: str, value: RuntimeValue, line: int = 0, column: int = 0):
        if name not in self.values:
            raise KestrelError(ErrorVal('NameError', f"'{name}' is undefined", line, column))
        self.values[name] = value

    def lookup(self, name: str) -> Optional[RuntimeValue]:
        # values are immutable, so handing out the stored object never aliases
        return self.values.get(name)

    def get(self, name: str, line: int = 0, column: int = 0) -> RuntimeValue:
        value = self.lookup(name)
        if value is None:
            raise KestrelError(ErrorVal('NameError', f"'{name}' is undefined", line, column))
        return value


def generate_environment(registry: Registry) -> Environment:
    """Create a fresh environment holding a handle for every registered native."""
    env = Environment()
    for name in registry.names():
        env.values[name] = NativeFunctionVal(name)
    return env
