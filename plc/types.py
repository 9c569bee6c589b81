"""Static type registry for PLC.

The language has a small, closed set of primitive types. They are not
arranged in a general subtyping lattice: two abstract types (`Any` and
`Comparable`) each accept a fixed set of other types, and every concrete
type accepts only itself. Types are singletons and compare by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

from .errors import TypeMismatchError, UnresolvedNameError


@dataclass(frozen=True)
class Type:
    """A primitive PLC type, e.g. `Type('Integer')`."""
    name: str

    def __repr__(self) -> str:
        return self.name


ANY = Type('Any')
NIL = Type('Nil')
COMPARABLE = Type('Comparable')
BOOLEAN = Type('Boolean')
INTEGER = Type('Integer')
DECIMAL = Type('Decimal')
CHARACTER = Type('Character')
STRING = Type('String')

TYPES: Dict[str, Type] = {t.name: t for t in (
    ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING,
)}

# Types with a special accepted set; all others accept only themselves.
ACCEPTS: Dict[Type, FrozenSet[Type]] = {
    ANY: frozenset({ANY, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING}),
    COMPARABLE: frozenset({COMPARABLE, INTEGER, DECIMAL, CHARACTER, STRING}),
    NIL: frozenset({NIL}),
}


def get_type(name: str, node: Optional[Any] = None) -> Type:
    if name not in TYPES:
        raise UnresolvedNameError(f'unknown type {name}', node)
    return TYPES[name]


def is_assignable(target: Type, source: Type) -> bool:
    if target in ACCEPTS:
        return source in ACCEPTS[target]
    return target == source


def require_assignable(target: Type, source: Type, node: Optional[Any] = None) -> None:
    """Raise TypeMismatchError unless a `source` value may be stored as `target`."""
    if not is_assignable(target, source):
        raise TypeMismatchError(f'expected {target}, got {source}', node)
