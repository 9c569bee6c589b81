"""Static type checker for PLC.

The analyzer walks a parsed `Source` exactly once, top-down and left to
right. Every expression node is annotated with its resolved `Type`, and
every `Access`/`Call` (as well as every `Global`, `Declaration` and
`Function`) with the binding it resolves to. The walk stops at the first
violation by raising one of the `AnalysisError` subclasses in
`plc.errors`; nothing is accumulated or recovered.

Immutability is not checked here. Assigning to a `VAL` passes analysis and
fails at run time with `ImmutableAssignmentError`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from .ast import (
    Node, Source, Global, Function, Statement, ExpressionStmt, Declaration,
    Assignment, If, Switch, While, Return, Expression, Literal, Group,
    Binary, Access, Call, ListLiteral,
)
from .environment import Scope
from .errors import (
    InvalidExpressionError, InvalidStatementError, LiteralRangeError,
    MissingEntryPointError, MissingTypeError, SwitchStructureError,
    TypeMismatchError, UnknownOperatorError,
)
from .std import populate_standard_scope
from .types import (
    Type, ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING,
    get_type, require_assignable,
)
from .values import CharVal, NilVal

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


class Analyzer:
    """Type checks a program and annotates its AST in place."""
    def __init__(self, parent: Optional[Scope] = None):
        self.scope = Scope(parent)
        populate_standard_scope(self.scope)
        # Binding of the function whose body is being walked
        self.function = None

    def analyze(self, source: Source) -> Source:
        for global_ in source.globals:
            self.check_global(global_, self.scope)
        main_found = False
        for function in source.functions:
            if function.name == 'main' and not function.parameters:
                main_found = True
                if function.return_type_name is not None and function.return_type_name != INTEGER.name:
                    raise TypeMismatchError('main/0 must return Integer', function)
            self.check_function(function, self.scope)
        if not main_found:
            raise MissingEntryPointError('main/0 function not found', source)
        return source

    def check_global(self, node: Global, scope: Scope):
        declared = get_type(node.type_name, node) if node.type_name is not None else None
        value_type = self.check_expr(node.value, scope) if node.value is not None else None
        if declared is not None and value_type is not None:
            require_assignable(declared, value_type, node)
        type_ = declared or value_type
        if type_ is None:
            raise MissingTypeError(f'global {node.name} has neither a type nor a value', node)
        node.variable = scope.define_variable(node.name, type_, node.mutable, node=node)

    def check_function(self, node: Function, scope: Scope):
        parameter_types = [get_type(p.type_name, node) for p in node.parameters]
        return_type = get_type(node.return_type_name, node) if node.return_type_name is not None else NIL
        # Defined before the body is walked so that it may call itself
        node.function = scope.define_function(
            node.name, len(node.parameters), parameter_types, return_type,
            lambda args: NIL, node=node,
        )
        body_scope = scope.child()
        for parameter, type_ in zip(node.parameters, parameter_types):
            parameter.variable = body_scope.define_variable(parameter.name, type_, True, node=node)
        enclosing, self.function = self.function, node.function
        try:
            self.check_block(node.statements, body_scope)
        finally:
            self.function = enclosing

    def check_block(self, statements: List[Statement], scope: Scope):
        for stmt in statements:
            self.check(stmt, scope)

    def check(self, node: Statement, scope: Scope):
        if isinstance(node, ExpressionStmt):
            if not isinstance(node.expression, Call):
                raise InvalidStatementError('expression statement must be a function call', node)
            self.check_expr(node.expression, scope)
            return
        if isinstance(node, Declaration):
            value_type = self.check_expr(node.value, scope) if node.value is not None else None
            type_: Optional[Type] = value_type
            if node.type_name is not None:
                type_ = get_type(node.type_name, node)
                if value_type is not None:
                    require_assignable(type_, value_type, node)
            if type_ is None:
                raise MissingTypeError(f'variable {node.name} has neither a type nor a value', node)
            node.variable = scope.define_variable(node.name, type_, True, node=node)
            return
        if isinstance(node, Assignment):
            if not isinstance(node.receiver, Access):
                raise InvalidStatementError('assignment receiver must be a variable access', node)
            receiver_type = self.check_expr(node.receiver, scope)
            value_type = self.check_expr(node.value, scope)
            require_assignable(receiver_type, value_type, node)
            return
        if isinstance(node, If):
            self.require_condition(node.condition, scope, 'if')
            if not node.then_statements:
                raise InvalidStatementError('if statement has no then statements', node)
            self.check_block(node.then_statements, scope.child())
            self.check_block(node.else_statements, scope.child())
            return
        if isinstance(node, Switch):
            condition_type = self.check_expr(node.condition, scope)
            if not node.cases:
                raise SwitchStructureError('switch statement has no default case', node)
            last = len(node.cases) - 1
            for i, case in enumerate(node.cases):
                if case.value is not None:
                    if i == last:
                        raise SwitchStructureError('default case has a value', case)
                    require_assignable(condition_type, self.check_expr(case.value, scope), case)
                elif i != last:
                    raise SwitchStructureError('missing case value', case)
                self.check_block(case.statements, scope.child())
            return
        if isinstance(node, While):
            self.require_condition(node.condition, scope, 'while')
            self.check_block(node.statements, scope.child())
            return
        if isinstance(node, Return):
            value_type = self.check_expr(node.value, scope)
            require_assignable(self.function.return_type, value_type, node)
            return
        raise NotImplementedError(f"check: unexpected node type {type(node)}")

    def require_condition(self, condition: Expression, scope: Scope, what: str):
        type_ = self.check_expr(condition, scope)
        if type_ != BOOLEAN:
            raise TypeMismatchError(f'{what} condition must be Boolean, got {type_}', condition)

    def check_expr(self, node: Expression, scope: Scope) -> Type:
        node.type = self.resolve_type(node, scope)
        return node.type

    def resolve_type(self, node: Expression, scope: Scope) -> Type:
        if isinstance(node, Literal):
            return self.literal_type(node)
        if isinstance(node, Group):
            if not isinstance(node.expression, Binary):
                raise InvalidExpressionError('grouped expression must be a binary expression', node)
            return self.check_expr(node.expression, scope)
        if isinstance(node, Binary):
            return self.binary_type(node, scope)
        if isinstance(node, Access):
            if node.offset is not None:
                offset_type = self.check_expr(node.offset, scope)
                if offset_type != INTEGER:
                    raise TypeMismatchError(f'list index must be Integer, got {offset_type}', node)
            node.variable = scope.lookup_variable(node.name, node)
            return node.variable.type
        if isinstance(node, Call):
            function = scope.lookup_function(node.name, len(node.arguments), node)
            for argument, parameter_type in zip(node.arguments, function.parameter_types):
                require_assignable(parameter_type, self.check_expr(argument, scope), argument)
            node.function = function
            return function.return_type
        if isinstance(node, ListLiteral):
            if not node.elements:
                return ANY
            # Typed by the first element only; the rest are visited unchecked
            type_ = self.check_expr(node.elements[0], scope)
            for element in node.elements[1:]:
                self.check_expr(element, scope)
            return type_
        raise NotImplementedError(f"check_expr: unexpected node type {type(node)}")

    def literal_type(self, node: Literal) -> Type:
        value = node.value
        if isinstance(value, NilVal):
            return NIL
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, int):
            if not INT_MIN <= value <= INT_MAX:
                raise LiteralRangeError(f'integer literal {value} exceeds 32-bit range', node)
            return INTEGER
        if isinstance(value, Decimal):
            if not value.is_finite() or abs(float(value)) == float('inf'):
                raise LiteralRangeError(f'decimal literal {value} is not representable', node)
            return DECIMAL
        if isinstance(value, CharVal):
            return CHARACTER
        if isinstance(value, str):
            return STRING
        raise TypeMismatchError(f'unsupported literal {value!r}', node)

    def binary_type(self, node: Binary, scope: Scope) -> Type:
        op = node.operator
        left = self.check_expr(node.left, scope)
        right = self.check_expr(node.right, scope)
        if op in ('&&', '||'):
            require_assignable(BOOLEAN, left, node.left)
            require_assignable(BOOLEAN, right, node.right)
            return BOOLEAN
        if op in ('<', '>', '==', '!='):
            require_assignable(COMPARABLE, left, node.left)
            require_assignable(COMPARABLE, right, node.right)
            if left != right:
                raise TypeMismatchError(f'cannot compare {left} with {right}', node)
            return BOOLEAN
        if op == '+':
            if left == STRING or right == STRING:
                return STRING
            return self.numeric_type(node, left, right)
        if op in ('-', '*', '/'):
            return self.numeric_type(node, left, right)
        if op == '^':
            require_assignable(INTEGER, left, node.left)
            require_assignable(INTEGER, right, node.right)
            return INTEGER
        raise UnknownOperatorError(f'unknown operator {op}', node)

    def numeric_type(self, node: Binary, left: Type, right: Type) -> Type:
        if left not in (INTEGER, DECIMAL):
            raise TypeMismatchError(f'operator {node.operator} expects Integer or Decimal, got {left}', node.left)
        require_assignable(left, right, node.right)
        return left


def analyze_program(source: Node) -> Source:
    """Convenience function to type check a parsed program."""
    return Analyzer().analyze(source)
