"""CLI entry point for the PLC interpreter.

Usage:
    python -m plc [-v|-vv|-vvv] [--check] <program_file>
    python -m plc [-v...] --emit-ast <program_file>
    python -m plc [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --check       Only parse and type check the program
  --emit-ast    Parse the given .plc file and emit an AST JSON file
  --ast         Check and execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Analysis and runtime errors are reported on
stderr and the process exits with status 1.
"""

import argparse
import json
import sys
from pathlib import Path

from .analyzer import Analyzer
from .ast_json import ast_to_obj, ast_from_obj
from .errors import AnalysisError, ParseError, PlcError
from .interpreter import Interpreter
from .parser import parse_program


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def check_and_run(ast_source, debug_level: int, check_only: bool) -> None:
    try:
        Analyzer().analyze(ast_source)
    except AnalysisError as e:
        print(f"Analysis error: {e}", file=sys.stderr)
        sys.exit(1)
    if check_only:
        return
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(ast_source)
    except PlcError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='plc', description="PLC language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--check', action='store_true', help='type check the program without running it')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit AST JSON for the given .plc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='PLC program file (.plc) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_file(program_file)
        try:
            ast_source = parse_program(source)
        except ParseError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_source), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        data = json.loads(read_file(Path(args.ast)))
        check_and_run(ast_from_obj(data), args.v, args.check)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_file(Path(args.program))
    try:
        ast_source = parse_program(source)
    except ParseError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)
    check_and_run(ast_source, args.v, args.check)


if __name__ == '__main__':
    main()
