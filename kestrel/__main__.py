"""CLI entry point for the Kestrel interpreter.

Usage:
    python -m kestrel [-v|-vv|-vvv] [--grammar] <program_file>
    python -m kestrel [-v...] [--grammar]

Options:
  -v              Increase debug verbosity (can be repeated)
  --debug-file    Where debug information is written (default: debug.txt)
  --max-depth     Maximum evaluation depth before a program is aborted
  --grammar       Parse with the Lark grammar instead of the hand-written parser

Without a program file an interactive prompt is started; every line is
run against the same environment and non-null results are printed.
Parse errors are all reported and nothing is evaluated; lexical and
runtime errors stop the program at the first one.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, TextIO

from .errors import KestrelError, KestrelParseError
from .interpreter import Interpreter, MAX_DEPTH, run_program
from .types import NullVal, to_string

PROMPT = '> '


def report(ex: KestrelError, stream: TextIO) -> None:
    errors = ex.errors if isinstance(ex, KestrelParseError) else [ex.err]
    for err in errors:
        print(err, file=stream)


def run_file(path: Path, interpreter: Interpreter, use_grammar: bool) -> int:
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()
    try:
        run_program(source, interpreter, use_grammar=use_grammar)
    except KestrelError as ex:
        report(ex, sys.stderr)
        return 1
    return 0


def repl(interpreter: Interpreter, use_grammar: bool, stdin: Optional[TextIO] = None) -> int:
    stdin = stdin if stdin is not None else sys.stdin
    while True:
        sys.stdout.write(PROMPT)
        sys.stdout.flush()
        line = stdin.readline()
        if not line:
            sys.stdout.write('\n')
            return 0
        line = line.strip()
        if line in ('exit', 'quit'):
            return 0
        if not line:
            continue
        try:
            result = run_program(line, interpreter, use_grammar=use_grammar)
        except KestrelError as ex:
            report(ex, sys.stderr)
            continue
        if not isinstance(result, NullVal):
            print(to_string(result))


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Kestrel language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='file receiving debug output (default: debug.txt)')
    parser.add_argument('--max-depth', type=int, default=MAX_DEPTH, help='maximum evaluation depth')
    parser.add_argument('--grammar', action='store_true', help='parse with the Lark grammar front end')
    parser.add_argument('program', nargs='?', help='Kestrel program file to execute')
    args = parser.parse_args(argv)

    if args.max_depth < 1:
        parser.error('--max-depth must be positive')

    interpreter = Interpreter(debug_level=args.v, debug_file=args.debug_file, max_depth=args.max_depth)
    try:
        if not args.program:
            return repl(interpreter, args.grammar)
        program_file = Path(args.program)
        if not program_file.exists():
            print(f"Error: file {program_file} not found", file=sys.stderr)
            return 1
        return run_file(program_file, interpreter, args.grammar)
    finally:
        interpreter.close()


if __name__ == '__main__':
    sys.exit(main())
