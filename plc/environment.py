from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import DuplicateBindingError, UnresolvedNameError
from .types import Type
from .values import NIL


@dataclass(eq=False)
class Variable:
    """A name binding. Compared and hashed by identity, so the analyzer's
    binding for a declaration can key that declaration's runtime values."""
    name: str
    type: Optional[Type]
    mutable: bool
    value: Any = NIL


@dataclass
class Function:
    name: str
    arity: int
    parameter_types: List[Type]
    return_type: Optional[Type]
    fn: Callable[[List[Any]], Any] = field(repr=False)


class Scope:
    """A node in the chain of name bindings.

    Variables are keyed by name and functions by (name, arity), so functions
    may be overloaded on arity only. Lookups walk outward through parents and
    the innermost binding wins. A parent may be shared by many children.
    """
    unresolved_error = UnresolvedNameError
    duplicate_error = DuplicateBindingError

    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[Tuple[str, int], Function] = {}

    def child(self) -> 'Scope':
        return type(self)(parent=self)

    def define_variable(self, name: str, type_: Optional[Type], mutable: bool, value: Any = NIL,
                        redefine: bool = False, node: Any = None) -> Variable:
        if name in self.variables and not redefine:
            raise self.duplicate_error(f'variable {name} already defined in this scope', node)
        variable = Variable(name, type_, mutable, value)
        self.variables[name] = variable
        return variable

    def lookup_variable(self, name: str, node: Any = None) -> Variable:
        if name in self.variables:
            return self.variables[name]
        if self.parent:
            return self.parent.lookup_variable(name, node)
        raise self.unresolved_error(f'undefined variable {name}', node)

    def define_function(self, name: str, arity: int, parameter_types: List[Type],
                        return_type: Optional[Type], fn: Callable[[List[Any]], Any],
                        node: Any = None) -> Function:
        key = (name, arity)
        if key in self.functions:
            raise self.duplicate_error(f'function {name}/{arity} already defined in this scope', node)
        function = Function(name, arity, parameter_types, return_type, fn)
        self.functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int, node: Any = None) -> Function:
        key = (name, arity)
        if key in self.functions:
            return self.functions[key]
        if self.parent:
            return self.parent.lookup_function(name, arity, node)
        raise self.unresolved_error(f'undefined function {name}/{arity}', node)
