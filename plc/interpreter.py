"""Tree-walking interpreter for PLC.

The interpreter executes a `Source` that has already passed the analyzer.
It keeps its own chain of `RuntimeScope`s, separate from the one the
analyzer built. Statement execution returns `None` when control falls
through and a `ReturnSignal` when a RETURN was executed; every block loop
hands a `ReturnSignal` straight back to its caller, so a return unwinds
nested IF/SWITCH/WHILE bodies up to the enclosing function call.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from .analyzer import Analyzer
from .ast import (
    Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, While, Return, Expression, Literal, Group,
    Binary, Access, Call, ListLiteral,
)
from .environment import Function as FunctionBinding, Scope, Variable
from .errors import (
    ArithmeticTypeError, ImmutableAssignmentError, IndexOutOfRangeError,
    InternalConsistencyError, InvalidArithmeticError, ReturnSignal,
    RuntimeDuplicateBindingError, RuntimeTypeError, RuntimeUnresolvedNameError,
)
from .parser import parse_program
from .std import populate_standard_scope
from .types import get_type
from .values import (
    EXACT_CONTEXT, NIL, ListVal, compare_values, divide_decimals, divide_integers,
    equal_values, is_comparable, is_integer, power, to_string, type_name,
)


class RuntimeScope(Scope):
    """Scope used while executing; reports failures as runtime errors.

    Besides the name table, each scope maps the analyzer's `Variable` for a
    declaration to the variable holding that declaration's value in this
    frame. An access annotated by the analyzer is resolved through that map,
    so it always reaches the declaration the analyzer chose even when a
    later declaration in a shared loop scope reuses the name.
    """
    unresolved_error = RuntimeUnresolvedNameError
    duplicate_error = RuntimeDuplicateBindingError

    def __init__(self, parent: Optional['RuntimeScope'] = None):
        super().__init__(parent)
        self.bindings: Dict[Variable, Variable] = {}

    def bind_variable(self, binding: Optional[Variable], name: str, mutable: bool, value: Any,
                      redefine: bool = False, node: Any = None) -> Variable:
        type_ = binding.type if binding is not None else None
        variable = self.define_variable(name, type_, mutable, value, redefine=redefine, node=node)
        if binding is not None:
            self.bindings[binding] = variable
        return variable

    def resolve_variable(self, binding: Optional[Variable], name: str, node: Any = None) -> Variable:
        # Unchecked trees carry no binding and fall back to lookup by name
        if binding is None:
            return self.lookup_variable(name, node)
        scope = self
        while scope is not None:
            if binding in scope.bindings:
                return scope.bindings[binding]
            scope = scope.parent
        raise self.unresolved_error(f'undefined variable {name}', node)


class FunctionValue:
    """Represents a user-defined PLC function closed over its defining scope."""
    def __init__(self, node: Function, env: RuntimeScope):
        self.node = node
        self.env = env

    @property
    def name(self) -> str:
        return self.node.name

    def __repr__(self) -> str:
        return f"<function {self.name}/{len(self.node.parameters)}>"


class Interpreter:
    """Core interpreter that executes a checked PLC AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.global_env = self.standard_scope()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None

    @staticmethod
    def standard_scope() -> RuntimeScope:
        return populate_standard_scope(RuntimeScope())

    def debug(self, msg: str):
        # Debug output only ever goes to the debug file, never to program stdout
        if self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    # Public API
    def run(self, source: Source, env: Optional[RuntimeScope] = None) -> Any:
        """Execute globals, define functions, then call main/0 and return its result.

        Without an explicit `env` every run starts from a fresh global scope,
        so one interpreter may run several programs in turn.
        """
        if env is None:
            env = self.global_env = self.standard_scope()
        if self.debug_level > 0:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
        try:
            for global_ in source.globals:
                self.execute_global(global_, env)
            for function in source.functions:
                self.define_function(function, env)
            try:
                main = env.lookup_function('main', 0)
            except RuntimeUnresolvedNameError:
                raise InternalConsistencyError('main/0 function not found', source)
            return self.call_function(main, [])
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def execute_global(self, node: Global, env: RuntimeScope):
        value = self.evaluate(node.value, env) if node.value is not None else NIL
        env.bind_variable(node.variable, node.name, node.mutable, value, node=node)
        if self.debug_level >= 2:
            self.debug(f"global {node.name} = {to_string(value)}")

    def define_function(self, node: Function, env: RuntimeScope):
        parameter_types = [get_type(p.type_name, node) for p in node.parameters]
        return_type = get_type(node.return_type_name, node) if node.return_type_name is not None else None
        env.define_function(node.name, len(node.parameters), parameter_types, return_type,
                            FunctionValue(node, env), node=node)
        if self.debug_level >= 2:
            self.debug(f"define function {node.name}/{len(node.parameters)}")

    def execute_block(self, statements: List[Statement], env: RuntimeScope) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Statement, env: RuntimeScope) -> Optional[ReturnSignal]:
        if isinstance(node, ExpressionStmt):
            self.evaluate(node.expression, env)
            return None
        if isinstance(node, Declaration):
            value = self.evaluate(node.value, env) if node.value is not None else NIL
            # A loop body re-executes its declarations in the same scope
            env.bind_variable(node.variable, node.name, True, value, redefine=True, node=node)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name} = {to_string(value)}")
            return None
        if isinstance(node, Assignment):
            self.assign(node, env)
            return None
        if isinstance(node, If):
            condition = self.require_boolean(self.evaluate(node.condition, env), node.condition)
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_string(condition)}")
            branch = node.then_statements if condition else node.else_statements
            return self.execute_block(branch, env.child())
        if isinstance(node, Switch):
            condition = self.evaluate(node.condition, env)
            default = None
            for case in node.cases:
                if case.value is None:
                    default = case
                    continue
                if equal_values(self.evaluate(case.value, env), condition):
                    if self.debug_level >= 3:
                        self.debug(f"switch {to_string(condition)} -> case")
                    return self.execute_block(case.statements, env.child())
            if default is None:
                return None
            if self.debug_level >= 3:
                self.debug(f"switch {to_string(condition)} -> default")
            return self.execute_block(default.statements, env.child())
        if isinstance(node, While):
            # One scope for the whole loop, shared by every iteration
            loop_env = env.child()
            while True:
                condition = self.require_boolean(self.evaluate(node.condition, loop_env), node.condition)
                if self.debug_level >= 3:
                    self.debug(f"while condition -> {to_string(condition)}")
                if not condition:
                    break
                result = self.execute_block(node.statements, loop_env)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        if isinstance(node, Return):
            return ReturnSignal(self.evaluate(node.value, env))
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expression, env: RuntimeScope) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Group):
            return self.evaluate(node.expression, env)
        if isinstance(node, Binary):
            return self.evaluate_binary(node, env)
        if isinstance(node, Access):
            variable = env.resolve_variable(node.variable, node.name, node)
            if node.offset is None:
                return variable.value
            items = self.require_list(variable.value, node)
            index = self.require_index(items, self.evaluate(node.offset, env), node)
            return items.items[index]
        if isinstance(node, Call):
            args = [self.evaluate(arg, env) for arg in node.arguments]
            function = env.lookup_function(node.name, len(args), node)
            return self.call_function(function, args)
        if isinstance(node, ListLiteral):
            return ListVal([self.evaluate(element, env) for element in node.elements])
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def assign(self, node: Assignment, env: RuntimeScope):
        receiver = node.receiver
        if not isinstance(receiver, Access):
            raise RuntimeTypeError('invalid assignment target', node)
        variable = env.resolve_variable(receiver.variable, receiver.name, receiver)
        value = self.evaluate(node.value, env)
        if not variable.mutable:
            raise ImmutableAssignmentError(f'cannot assign to immutable {variable.name}', node)
        if receiver.offset is None:
            variable.value = value
            return
        items = self.require_list(variable.value, receiver)
        index = self.require_index(items, self.evaluate(receiver.offset, env), receiver)
        # Mutates the list in place; every binding sharing it sees the change
        items.items[index] = value

    def call_function(self, function: FunctionBinding, args: List[Any]) -> Any:
        fn = function.fn
        if self.debug_level >= 1:
            self.debug(f"call {function.name}({', '.join(to_string(a) for a in args)})")
        if isinstance(fn, FunctionValue):
            call_env = fn.env.child()
            for parameter, arg in zip(fn.node.parameters, args):
                call_env.bind_variable(parameter.variable, parameter.name, True, arg)
            result = self.execute_block(fn.node.statements, call_env)
            if isinstance(result, ReturnSignal):
                return result.value
            return NIL
        return fn(args)

    def require_boolean(self, value: Any, node: Expression) -> bool:
        if not isinstance(value, bool):
            raise RuntimeTypeError(f'expected Boolean, got {type_name(value)}', node)
        return value

    def require_list(self, value: Any, node: Expression) -> ListVal:
        if not isinstance(value, ListVal):
            raise RuntimeTypeError(f'cannot index type {type_name(value)}', node)
        return value

    def require_index(self, items: ListVal, index: Any, node: Expression) -> int:
        if not is_integer(index):
            raise RuntimeTypeError(f'list index must be Integer, got {type_name(index)}', node)
        if index < 0 or index >= len(items):
            raise IndexOutOfRangeError(f'list index {index} out of range for length {len(items)}', node)
        return index

    def evaluate_binary(self, node: Binary, env: RuntimeScope) -> Any:
        op = node.operator
        # Short-circuit for && and ||
        if op == '&&':
            if not self.require_boolean(self.evaluate(node.left, env), node.left):
                return False
            return self.require_boolean(self.evaluate(node.right, env), node.right)
        if op == '||':
            if self.require_boolean(self.evaluate(node.left, env), node.left):
                return True
            return self.require_boolean(self.evaluate(node.right, env), node.right)
        left = self.evaluate(node.left, env)
        right = self.evaluate(node.right, env)
        return self.apply_binary_op(op, left, right, node)

    def apply_binary_op(self, op: str, a: Any, b: Any, node: Optional[Binary] = None) -> Any:
        if op == '==':
            return equal_values(a, b)
        if op == '!=':
            return not equal_values(a, b)
        if op in ('<', '>'):
            if not (is_comparable(a) and type_name(a) == type_name(b)):
                raise ArithmeticTypeError(f'cannot compare {type_name(a)} with {type_name(b)}', node)
            order = compare_values(a, b)
            return order < 0 if op == '<' else order > 0
        if op == '+' and (isinstance(a, str) or isinstance(b, str)):
            return to_string(a) + to_string(b)
        if op in ('+', '-', '*', '/'):
            if is_integer(a) and is_integer(b):
                if op == '+':
                    return a + b
                if op == '-':
                    return a - b
                if op == '*':
                    return a * b
                if b == 0:
                    raise InvalidArithmeticError('division by zero', node)
                return divide_integers(a, b)
            if isinstance(a, Decimal) and isinstance(b, Decimal):
                if op == '+':
                    return EXACT_CONTEXT.add(a, b)
                if op == '-':
                    return EXACT_CONTEXT.subtract(a, b)
                if op == '*':
                    return EXACT_CONTEXT.multiply(a, b)
                if b.is_zero():
                    raise InvalidArithmeticError('division by zero', node)
                return divide_decimals(a, b)
            raise ArithmeticTypeError(f'unsupported {op} for {type_name(a)} and {type_name(b)}', node)
        if op == '^':
            if not (is_integer(a) and is_integer(b)):
                raise ArithmeticTypeError(f'unsupported ^ for {type_name(a)} and {type_name(b)}', node)
            if b < 0:
                raise InvalidArithmeticError(f'negative exponent {b}', node)
            return power(a, b)
        raise RuntimeTypeError(f'unknown operator {op}', node)


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to parse, check and run a PLC program from source text."""
    ast_source = parse_program(source)
    Analyzer().analyze(ast_source)
    interpreter = Interpreter(debug_level=debug_level)
    return interpreter.run(ast_source)


def run_file(file_path: str, debug_level: int = 0) -> Any:
    """Parse, check and run a PLC file, returning the result of main."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
