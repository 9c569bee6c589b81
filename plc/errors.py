from dataclasses import dataclass
from typing import Any, Optional


class PlcError(Exception):
    """Base class for every error raised while checking or running a program."""
    def __init__(self, message: str, node: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.node = node

    @property
    def name(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"


class ParseError(PlcError):
    """Raised when source text does not match the grammar."""


###############################################################################
# Static (analyzer) errors
###############################################################################

class AnalysisError(PlcError):
    """Raised by the type checker. Analysis stops at the first one."""


class DuplicateBindingError(AnalysisError):
    pass


class UnresolvedNameError(AnalysisError):
    pass


class TypeMismatchError(AnalysisError):
    pass


class MissingTypeError(AnalysisError):
    pass


class SwitchStructureError(AnalysisError):
    pass


class LiteralRangeError(AnalysisError):
    pass


class UnknownOperatorError(AnalysisError):
    pass


class MissingEntryPointError(AnalysisError):
    pass


class InvalidStatementError(AnalysisError):
    pass


class InvalidExpressionError(AnalysisError):
    pass


###############################################################################
# Runtime (interpreter) errors
###############################################################################

class PlcRuntimeError(PlcError):
    """Raised by the interpreter. Aborts the whole run."""


class ImmutableAssignmentError(PlcRuntimeError):
    pass


class IndexOutOfRangeError(PlcRuntimeError):
    pass


class RuntimeUnresolvedNameError(PlcRuntimeError):
    pass


class RuntimeDuplicateBindingError(PlcRuntimeError):
    pass


class RuntimeTypeError(PlcRuntimeError):
    pass


class ArithmeticTypeError(RuntimeTypeError):
    pass


class InvalidArithmeticError(PlcRuntimeError):
    pass


class InternalConsistencyError(PlcRuntimeError):
    pass


@dataclass
class ReturnSignal:
    """Result of executing a RETURN; carried up to the enclosing call."""
    value: Any
