from pathlib import Path
from kestrel.interpreter import Interpreter
from kestrel.parser import parse_program
from kestrel.types import IntegerVal

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3_block_shares_environment(capsys):
    with open(EXAMPLES / 'program_3.kes', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '15, 5'
    assert interp.env.get('step') == IntegerVal(5)
