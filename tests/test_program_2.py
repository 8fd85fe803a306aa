from pathlib import Path
from kestrel.interpreter import Interpreter
from kestrel.parser import parse_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2_division_and_modulo(capsys):
    with open(EXAMPLES / 'program_2.kes', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    # 7 / 2 is a float even though both operands are integers
    assert out == '3.5, 1'
