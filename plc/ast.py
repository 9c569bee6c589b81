"""Abstract Syntax Tree (AST) definitions for PLC.

The parser builds these nodes; the analyzer then fills in the annotation
slots (`type` on every expression, `variable`/`function` on nodes that bind
or refer to names). Annotation slots are excluded from `__init__` and from
equality so that two parses of the same text compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from .environment import Function as FunctionBinding, Variable
    from .types import Type


def _annotation():
    return field(default=None, init=False, compare=False, repr=False)


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


###############################################################################
# Expressions
###############################################################################

@dataclass
class Expression(Node):
    type: Optional['Type'] = _annotation()


@dataclass
class Literal(Expression):
    value: Any  # NilVal, bool, int, Decimal, CharVal or str


@dataclass
class Group(Expression):
    expression: Expression


@dataclass
class Binary(Expression):
    operator: str
    left: Expression
    right: Expression


@dataclass
class Access(Expression):
    name: str
    offset: Optional[Expression] = None
    variable: Optional['Variable'] = _annotation()


@dataclass
class Call(Expression):
    name: str
    arguments: List[Expression] = field(default_factory=list)
    function: Optional['FunctionBinding'] = _annotation()


@dataclass
class ListLiteral(Expression):
    elements: List[Expression] = field(default_factory=list)


###############################################################################
# Statements
###############################################################################

@dataclass
class Statement(Node):
    pass


@dataclass
class ExpressionStmt(Statement):
    expression: Expression


@dataclass
class Declaration(Statement):
    name: str
    type_name: Optional[str] = None
    value: Optional[Expression] = None
    variable: Optional['Variable'] = _annotation()


@dataclass
class Assignment(Statement):
    receiver: Expression  # must be an Access
    value: Expression


@dataclass
class If(Statement):
    condition: Expression
    then_statements: List[Statement]
    else_statements: List[Statement] = field(default_factory=list)


@dataclass
class Case(Statement):
    value: Optional[Expression]  # None marks the default case
    statements: List[Statement]


@dataclass
class Switch(Statement):
    condition: Expression
    cases: List[Case]


@dataclass
class While(Statement):
    condition: Expression
    statements: List[Statement]


@dataclass
class Return(Statement):
    value: Expression


###############################################################################
# Top level
###############################################################################

@dataclass
class Global(Node):
    name: str
    mutable: bool
    type_name: Optional[str] = None
    value: Optional[Expression] = None
    variable: Optional['Variable'] = _annotation()


@dataclass
class Parameter:
    name: str
    type_name: str
    variable: Optional['Variable'] = _annotation()


@dataclass
class Function(Node):
    name: str
    parameters: List[Parameter]
    return_type_name: Optional[str]
    statements: List[Statement]
    function: Optional['FunctionBinding'] = _annotation()


@dataclass
class Source(Node):
    globals: List[Global] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)
