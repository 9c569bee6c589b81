import pytest

from plc.errors import TypeMismatchError, UnresolvedNameError
from plc.types import (
    ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING,
    get_type, is_assignable, require_assignable,
)

CONCRETE = [BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING]


def test_get_type():
    assert get_type('Integer') is INTEGER
    assert get_type('Any') is ANY
    with pytest.raises(UnresolvedNameError):
        get_type('integer')


@pytest.mark.parametrize('source', [ANY, COMPARABLE] + CONCRETE)
def test_any_accepts_everything_but_nil(source):
    assert is_assignable(ANY, source)


def test_any_rejects_nil():
    assert not is_assignable(ANY, NIL)


@pytest.mark.parametrize('source, expected', [
    (COMPARABLE, True),
    (INTEGER, True),
    (DECIMAL, True),
    (CHARACTER, True),
    (STRING, True),
    (BOOLEAN, False),
    (ANY, False),
    (NIL, False),
])
def test_comparable(source, expected):
    assert is_assignable(COMPARABLE, source) is expected


def test_nil_accepts_only_nil():
    assert is_assignable(NIL, NIL)
    assert not any(is_assignable(NIL, t) for t in CONCRETE + [ANY])


@pytest.mark.parametrize('target', CONCRETE)
def test_concrete_types_accept_only_themselves(target):
    for source in CONCRETE + [ANY, COMPARABLE, NIL]:
        assert is_assignable(target, source) is (source == target)


def test_require_assignable():
    require_assignable(COMPARABLE, INTEGER)
    with pytest.raises(TypeMismatchError) as info:
        require_assignable(BOOLEAN, STRING, node='here')
    assert info.value.node == 'here'
    assert info.value.message == 'expected Boolean, got String'
