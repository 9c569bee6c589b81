# PLC language package
# This package provides a parser, a static type checker and an interpreter
# for the PLC scripting language.
from .analyzer import Analyzer, analyze_program
from .errors import AnalysisError, PlcError, PlcRuntimeError
from .interpreter import Interpreter, run_program, run_file
from .parser import parse_program

__all__ = [
    'Analyzer',
    'analyze_program',
    'Interpreter',
    'parse_program',
    'run_program',
    'run_file',
    'PlcError',
    'AnalysisError',
    'PlcRuntimeError',
]
