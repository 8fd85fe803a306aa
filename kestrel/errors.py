from typing import List
from kestrel.types import ErrorVal


class KestrelError(Exception):
    """Exception type used to propagate Kestrel errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(str(err))
        self.err = err


class KestrelParseError(KestrelError):
    """Raised when parsing collected one or more errors.

    The parser keeps going after a failing statement, so there may be
    several errors; the first one is exposed as ``err``.
    """
    def __init__(self, errors: List[ErrorVal]):
        super().__init__(errors[0])
        self.errors = list(errors)

    def __str__(self) -> str:
        return '\n'.join(str(e) for e in self.errors)
