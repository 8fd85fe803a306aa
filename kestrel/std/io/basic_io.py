import sys
from typing import Iterable, Optional, TextIO
from kestrel.types import RuntimeValue, to_string


class BasicIO:
    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # resolved lazily so redirected stdout (e.g. under capsys) is honoured
        return self._stream if self._stream is not None else sys.stdout

    def format_line(self, values: Iterable[RuntimeValue], separator: str = ', ') -> str:
        return separator.join(to_string(v) for v in values)

    def write_line(self, text: str):
        self.stream.write(text + '\n')
        self.stream.flush()
