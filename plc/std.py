from typing import Any, List

from .environment import Scope
from .types import ANY, NIL as NIL_TYPE
from .values import NIL, to_string


def std_print(args: List[Any]) -> Any:
    print(to_string(args[0]))
    return NIL


def populate_standard_scope(scope: Scope) -> Scope:
    """Register the built-in functions available to every program."""
    scope.define_function('print', 1, [ANY], NIL_TYPE, std_print)
    return scope
