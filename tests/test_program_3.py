from pathlib import Path

from plc.interpreter import parse_program, Analyzer, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3_list_sum(capsys):
    with open(EXAMPLES / 'program_3.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    Analyzer().analyze(ast)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().split('\n')
    assert out == ['[3, 10, 4, 1, 5]', '23']
