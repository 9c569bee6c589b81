import pytest

from plc.analyzer import Analyzer
from plc.ast import (
    Source, Function, ExpressionStmt, Return, Switch, Case, Literal, Binary,
    Call,
)
from plc.errors import (
    AnalysisError, DuplicateBindingError, InvalidExpressionError,
    InvalidStatementError, LiteralRangeError, MissingEntryPointError,
    MissingTypeError, SwitchStructureError, TypeMismatchError,
    UnknownOperatorError, UnresolvedNameError,
)
from plc.parser import parse_program
from plc.types import ANY, BOOLEAN, COMPARABLE, DECIMAL, INTEGER, NIL, STRING


def analyze(source: str):
    return Analyzer().analyze(parse_program(source))


def program(body: str, globals_: str = '', functions: str = '') -> str:
    return f"""
{globals_}
{functions}
FUN main(): Integer DO
{body}
    RETURN 0;
END
"""


def main_statements(source):
    return next(f for f in source.functions if f.name == 'main').statements


def print_call(text):
    return ExpressionStmt(Call('print', [Literal(text)]))


def hand_built(*statements):
    body = list(statements) + [Return(Literal(0))]
    return Source([], [Function('main', [], 'Integer', body)])


def test_minimal_program_passes():
    analyze(program('print("hi");'))


def test_missing_main():
    with pytest.raises(MissingEntryPointError):
        analyze('FUN helper(): Integer DO RETURN 1; END')


def test_main_with_parameters_is_not_an_entry_point():
    with pytest.raises(MissingEntryPointError):
        analyze('FUN main(x: Integer): Integer DO RETURN x; END')


def test_other_errors_surface_before_missing_main():
    with pytest.raises(TypeMismatchError):
        analyze('FUN f(): Integer DO RETURN "x"; END')


def test_main_must_return_integer():
    with pytest.raises(TypeMismatchError):
        analyze('FUN main(): String DO RETURN "x"; END')


def test_main_without_return_type():
    analyze('FUN main() DO print("x"); END')


@pytest.mark.parametrize('declaration, error', [
    ('LET x: Comparable = 1;', None),
    ('LET x: Any = "s";', None),
    ('LET x: Decimal = 1.5;', None),
    ('LET x: Boolean = "yes";', TypeMismatchError),
    ('LET x: Integer = 1.0;', TypeMismatchError),
    ('LET x: Comparable = TRUE;', TypeMismatchError),
    ('LET x: Nil = NIL;', None),
    ('LET x: Any = NIL;', TypeMismatchError),
    ('LET x;', MissingTypeError),
    ('LET x: Number = 1;', UnresolvedNameError),
])
def test_declaration_assignability(declaration, error):
    source = program(declaration)
    if error is None:
        analyze(source)
    else:
        with pytest.raises(error):
            analyze(source)


def test_declaration_adopts_declared_type():
    source = analyze(program('LET x: Comparable = 1;\n    LET y = "s";\n    LET z: Integer;'))
    x, y, z = main_statements(source)[:3]
    assert x.variable.type == COMPARABLE
    assert x.value.type == INTEGER
    assert y.variable.type == STRING
    assert z.variable.type == INTEGER


def test_duplicate_in_same_scope():
    with pytest.raises(DuplicateBindingError):
        analyze(program('LET x = 1;\n    LET x = 2;'))


def test_shadowing_in_nested_block():
    source = analyze(program('LET x = 1;\n    IF TRUE DO\n        LET x = "s";\n        print(x);\n    END'))
    inner_print = main_statements(source)[1].then_statements[1]
    assert inner_print.expression.arguments[0].type == STRING


def test_parameter_shadowed_by_let_is_duplicate():
    with pytest.raises(DuplicateBindingError):
        analyze(program('', functions='FUN f(x: Integer) DO LET x = 2; END'))


def test_duplicate_global():
    with pytest.raises(DuplicateBindingError):
        analyze(program('', globals_='VAR x: Integer = 1;\nVAL x: Integer = 2;'))


def test_duplicate_function_same_arity():
    functions = 'FUN f() DO print(1); END\nFUN f() DO print(2); END'
    with pytest.raises(DuplicateBindingError):
        analyze(program('', functions=functions))


def test_overloading_by_arity():
    functions = (
        'FUN f(x: Integer): Integer DO RETURN x; END\n'
        'FUN f(x: Integer, y: Integer): Integer DO RETURN x + y; END'
    )
    source = analyze(program('print(f(1));\n    print(f(1, 2));', functions=functions))
    first, second = main_statements(source)[:2]
    assert first.expression.arguments[0].function.arity == 1
    assert second.expression.arguments[0].function.arity == 2


def test_unresolved_variable():
    with pytest.raises(UnresolvedNameError):
        analyze(program('print(missing);'))


def test_unresolved_function_arity():
    with pytest.raises(UnresolvedNameError):
        analyze(program('print(1, 2);'))


def test_global_cannot_call_function_declared_later():
    source = program('', globals_='VAR x: Integer = f();', functions='FUN f(): Integer DO RETURN 1; END')
    with pytest.raises(UnresolvedNameError):
        analyze(source)


def test_functions_see_globals():
    source = analyze(program('print(limit);', globals_='VAL limit: Integer = 3;'))
    access = main_statements(source)[0].expression.arguments[0]
    assert access.variable is source.globals[0].variable
    assert access.variable.mutable is False


def test_recursion_resolves():
    functions = 'FUN f(n: Integer): Integer DO RETURN f(n); END'
    analyze(program('', functions=functions))


def test_if_condition_must_be_boolean():
    with pytest.raises(TypeMismatchError):
        analyze(program('IF 1 DO print(1); END'))


def test_if_then_block_must_not_be_empty():
    with pytest.raises(InvalidStatementError):
        analyze(program('IF TRUE DO ELSE print(1); END'))


def test_while_condition_must_be_boolean():
    with pytest.raises(TypeMismatchError):
        analyze(program('WHILE "yes" DO print(1); END'))


def test_switch_last_case_with_value():
    source = hand_built(Switch(Literal(1), [
        Case(Literal(1), [print_call('one')]),
        Case(Literal(2), [print_call('two')]),
    ]))
    with pytest.raises(SwitchStructureError):
        Analyzer().analyze(source)


def test_switch_missing_value_on_non_final_case():
    source = hand_built(Switch(Literal(1), [
        Case(None, [print_call('default')]),
        Case(None, [print_call('other')]),
    ]))
    with pytest.raises(SwitchStructureError):
        Analyzer().analyze(source)


def test_switch_well_formed():
    source = hand_built(Switch(Literal(1), [
        Case(Literal(1), [print_call('one')]),
        Case(None, [print_call('default')]),
    ]))
    Analyzer().analyze(source)


def test_switch_case_type_mismatch():
    with pytest.raises(TypeMismatchError):
        analyze(program('SWITCH 1 CASE "a": print(1); DEFAULT print(2); END'))


@pytest.mark.parametrize('literal, error', [
    ('2147483647', None),
    ('-2147483648', None),
    ('2147483648', LiteralRangeError),
    ('-2147483649', LiteralRangeError),
])
def test_integer_literal_range(literal, error):
    source = program(f'LET x = {literal};')
    if error is None:
        analyze(source)
    else:
        with pytest.raises(error):
            analyze(source)


@pytest.mark.parametrize('expression, expected', [
    ('1 + 2', INTEGER),
    ('1.5 * 2.0', DECIMAL),
    ('"a" + 1', STRING),
    ('1 + "a"', STRING),
    ('"n=" + 1.5', STRING),
    ('2 ^ 3', INTEGER),
    ('1 < 2', BOOLEAN),
    ('"a" == "b"', BOOLEAN),
    ("'a' != 'b'", BOOLEAN),
    ('TRUE && FALSE || TRUE', BOOLEAN),
    ('[1, 2]', INTEGER),
    ('["a", 1]', STRING),
    ('[]', ANY),
])
def test_expression_types(expression, expected):
    source = analyze(program(f'LET r = {expression};'))
    assert main_statements(source)[0].variable.type == expected


@pytest.mark.parametrize('expression', [
    '1 + 1.0',
    '1.0 - 1',
    '1 == 1.0',
    'TRUE == TRUE',
    'TRUE && 1',
    '2.0 ^ 3',
    "'a' + 'b'",
    'TRUE + FALSE',
])
def test_binary_type_mismatch(expression):
    with pytest.raises(TypeMismatchError):
        analyze(program(f'LET r = {expression};'))


def test_unknown_operator():
    source = hand_built(ExpressionStmt(Call('print', [Binary('%', Literal(1), Literal(2))])))
    with pytest.raises(UnknownOperatorError):
        Analyzer().analyze(source)


def test_list_index_must_be_integer():
    with pytest.raises(TypeMismatchError):
        analyze(program('print(xs["a"]);', globals_='LIST xs: Integer = [1];'))


def test_list_global_element_type():
    analyze(program('', globals_='LIST xs: Integer = [1, 2];'))
    analyze(program('', globals_='LIST xs: Any = [];'))
    with pytest.raises(TypeMismatchError):
        analyze(program('', globals_='LIST xs: Integer = ["a"];'))
    with pytest.raises(TypeMismatchError):
        analyze(program('', globals_='LIST xs: Integer = [];'))


def test_call_argument_mismatch():
    functions = 'FUN f(x: Integer): Integer DO RETURN x; END'
    with pytest.raises(TypeMismatchError):
        analyze(program('print(f("s"));', functions=functions))


def test_print_rejects_nil():
    with pytest.raises(TypeMismatchError):
        analyze(program('print(NIL);'))


def test_nested_return_checked_against_function():
    functions = 'FUN f(): Integer DO\n IF TRUE DO RETURN "s"; END\n RETURN 1;\nEND'
    with pytest.raises(TypeMismatchError):
        analyze(program('', functions=functions))


def test_return_in_function_without_return_type():
    with pytest.raises(TypeMismatchError):
        analyze(program('', functions='FUN f() DO RETURN 1; END'))


def test_expression_statement_must_be_call():
    with pytest.raises(InvalidStatementError):
        analyze(program('1 + 2;'))


def test_assignment_receiver_must_be_access():
    with pytest.raises(InvalidStatementError):
        analyze(program('f() = 1;', functions='FUN f(): Integer DO RETURN 1; END'))


def test_group_must_wrap_binary():
    with pytest.raises(InvalidExpressionError):
        analyze(program('LET x = (1);'))


def test_assignment_type_mismatch():
    with pytest.raises(TypeMismatchError):
        analyze(program('LET x = 1;\n    x = "s";'))


def test_assignment_to_immutable_passes_analysis():
    analyze(program('x = 2;', globals_='VAL x: Integer = 1;'))


def test_every_expression_is_annotated():
    source = analyze(program('LET r = (1 + 2) * 3;'))
    value = main_statements(source)[0].value
    assert value.type == INTEGER
    assert value.left.type == INTEGER
    assert value.left.expression.type == INTEGER
    assert value.right.type == INTEGER


def test_print_binding_annotated():
    source = analyze(program('print("x");'))
    call = main_statements(source)[0].expression
    assert call.function.name == 'print'
    assert call.type == NIL


def test_analysis_errors_carry_node():
    with pytest.raises(AnalysisError) as info:
        analyze(program('print(missing);'))
    assert info.value.node.name == 'missing'
    assert str(info.value).startswith('UnresolvedNameError: ')


def test_list_literal_typed_by_first_element_even_when_any():
    source = analyze(program('LET xs = [a, 2];', globals_='VAR a: Any = 1;'))
    declaration = main_statements(source)[0]
    assert declaration.value.type == ANY
    assert declaration.value.elements[1].type == INTEGER
    with pytest.raises(TypeMismatchError):
        analyze(program('', globals_='VAR a: Any = 1;\nLIST xs: Integer = [a, 2];'))
