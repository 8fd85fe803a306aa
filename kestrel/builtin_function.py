from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from kestrel.types import ArrayVal, RuntimeValue


@dataclass
class BuiltinFunction:
    name: str
    arity: Optional[int]  # None means variadic
    fn: Callable[[ArrayVal], RuntimeValue]

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass
class Registry:
    """Maps native function names to their implementations."""
    functions: Dict[str, BuiltinFunction] = field(default_factory=dict)

    def register(self, function: BuiltinFunction):
        self.functions[function.name] = function

    def resolve(self, name: str) -> Optional[BuiltinFunction]:
        return self.functions.get(name)

    def names(self) -> List[str]:
        return list(self.functions)
