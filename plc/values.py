"""Runtime values and numeric helpers for the PLC interpreter.

Values are represented with plain Python objects where one fits:

- Nil       -> `NilVal` (all instances are equal; use `NIL`)
- Boolean   -> `bool`
- Integer   -> `int` (arbitrary precision)
- Decimal   -> `decimal.Decimal` (arbitrary precision, base 10)
- Character -> `CharVal`
- String    -> `str`
- List      -> `ListVal`, a mutable sequence shared by reference

Because `bool` is a subclass of `int`, code that dispatches on runtime
values must test for booleans before integers. `is_integer` does this.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import (
    Context, Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN, ROUND_HALF_EVEN,
)
from typing import Any, List

DECIMAL_PRECISION = 34

# +, - and * on decimals are exact; only division needs rounding.
EXACT_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)
DIVISION_CONTEXT = Context(prec=DECIMAL_PRECISION, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class NilVal:
    """The PLC `NIL` value."""
    def __repr__(self) -> str:
        return 'NIL'


NIL = NilVal()


@dataclass(frozen=True, order=True)
class CharVal:
    """A single character. Kept distinct from one-character strings."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class ListVal:
    """A PLC list. Bindings share the same instance, so indexed assignment
    through one variable is visible through every other reference."""
    items: List[Any] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the PLC type tag of a runtime value."""
    if isinstance(value, NilVal):
        return 'Nil'
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, Decimal):
        return 'Decimal'
    if isinstance(value, CharVal):
        return 'Character'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ListVal):
        return 'List'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Textual form of a value, as written by `print` and used by `+`."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    return str(value)


def equal_values(a: Any, b: Any) -> bool:
    """Structural equality. Values of different tags are never equal."""
    if type_name(a) != type_name(b):
        return False
    if isinstance(a, ListVal):
        if len(a) != len(b):
            return False
        return all(equal_values(x, y) for x, y in zip(a.items, b.items))
    return a == b


def is_comparable(value: Any) -> bool:
    return type_name(value) in ('Integer', 'Decimal', 'Character', 'String')


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison of two comparable values with the same tag."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def divide_integers(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def divide_decimals(a: Decimal, b: Decimal) -> Decimal:
    return DIVISION_CONTEXT.divide(a, b)


def power(base: int, exponent: int) -> int:
    """Exact exponentiation by repeated squaring; `exponent` must be >= 0."""
    result = 1
    while exponent > 0:
        if exponent & 1:
            result *= base
        base *= base
        exponent >>= 1
    return result
