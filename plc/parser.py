"""Parser for the PLC language.

Source text is fed into a Lark LALR parser configured with the grammar
below, and the resulting parse tree is transformed into the AST defined in
`plc.ast` by `ASTTransformer`. Keywords are upper case (`FUN`, `LET`,
`IF`, ...); identifiers may contain `-` and `_` and may start with `@`.

The `parse_program` function is the public entry point and returns a
`Source` AST node representing the entire source file.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .ast import (
    Source, Global, Function, Parameter, ExpressionStmt, Declaration,
    Assignment, If, Case, Switch, While, Return, Literal, Group, Binary,
    Access, Call, ListLiteral,
)
from .errors import ParseError
from .values import NIL, CharVal


PLC_GRAMMAR = r"""
    start: global_decl* function*

    ?global_decl: list_global | mutable_global | immutable_global
    list_global: "LIST" IDENT ":" IDENT "=" "[" [arguments] "]" ";"
    mutable_global: "VAR" IDENT ":" IDENT ["=" expression] ";"
    immutable_global: "VAL" IDENT ":" IDENT "=" expression ";"

    function: "FUN" IDENT "(" [parameters] ")" [":" IDENT] "DO" block "END"
    parameters: parameter ("," parameter)*
    parameter: IDENT ":" IDENT

    block: statement*

    ?statement: declaration_stmt
              | switch_stmt
              | if_stmt
              | while_stmt
              | return_stmt
              | assignment_stmt
              | expression_stmt

    declaration_stmt: "LET" IDENT [":" IDENT] ["=" expression] ";"
    switch_stmt: "SWITCH" expression case_stmt* default_stmt "END"
    case_stmt: "CASE" expression ":" block
    default_stmt: "DEFAULT" block
    if_stmt: "IF" expression "DO" block ["ELSE" block] "END"
    while_stmt: "WHILE" expression "DO" block "END"
    return_stmt: "RETURN" expression ";"
    assignment_stmt: expression "=" expression ";"
    expression_stmt: expression ";"

    // Expressions with precedence
    ?expression: logical
    ?logical: comparison ((AND | OR) comparison)*
    ?comparison: additive ((LT | GT | EQ | NE) additive)*
    ?additive: multiplicative ((PLUS | MINUS) multiplicative)*
    ?multiplicative: primary ((STAR | SLASH | CARET) primary)*
    ?primary: literal
            | group
            | call
            | access
            | list_literal
    group: "(" expression ")"
    call: IDENT "(" [arguments] ")"
    access: IDENT ["[" expression "]"]
    list_literal: "[" [arguments] "]"
    arguments: expression ("," expression)*
    literal: NIL
           | TRUE
           | FALSE
           | [MINUS] INTEGER
           | [MINUS] DECIMAL
           | CHARACTER
           | STRING

    // Tokens
    NIL: "NIL"
    TRUE: "TRUE"
    FALSE: "FALSE"
    IDENT: /[A-Za-z@][A-Za-z0-9_-]*/
    DECIMAL.2: /(0|[1-9][0-9]*)\.[0-9]+/
    INTEGER: /0|[1-9][0-9]*/
    CHARACTER: /'([^'\n\r\\]|\\[bnrt'"\\])'/
    STRING: /"([^"\n\r\\]|\\[bnrt'"\\])*"/
    AND: "&&"
    OR: "||"
    EQ: "=="
    NE: "!="
    LT: "<"
    GT: ">"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    CARET: "^"

    %import common.WS
    %ignore WS
"""


PLC_PARSER = Lark(
    PLC_GRAMMAR,
    parser='lalr',
    maybe_placeholders=True,
)

ESCAPES = {
    'b': '\b',
    'n': '\n',
    'r': '\r',
    't': '\t',
    "'": "'",
    '"': '"',
    '\\': '\\',
}


def unescape(body: str) -> str:
    """Replace backslash escapes in the body of a character or string literal."""
    result: List[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == '\\':
            result.append(ESCAPES[body[i + 1]])
            i += 2
            continue
        result.append(c)
        i += 1
    return ''.join(result)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def start(self, items):
        globals_ = [item for item in items if isinstance(item, Global)]
        functions = [item for item in items if isinstance(item, Function)]
        return Source(globals_, functions)

    def list_global(self, items):
        name, type_name, elements = items
        return Global(str(name), True, str(type_name), ListLiteral(elements or []))

    def mutable_global(self, items):
        name, type_name, value = items
        return Global(str(name), True, str(type_name), value)

    def immutable_global(self, items):
        name, type_name, value = items
        return Global(str(name), False, str(type_name), value)

    def function(self, items):
        name, parameters, return_type, statements = items
        return Function(
            name=str(name),
            parameters=parameters or [],
            return_type_name=str(return_type) if return_type is not None else None,
            statements=statements,
        )

    def parameters(self, items):
        return list(items)

    def parameter(self, items):
        return Parameter(str(items[0]), str(items[1]))

    def block(self, items):
        return list(items)

    def declaration_stmt(self, items):
        name, type_name, value = items
        return Declaration(str(name), str(type_name) if type_name is not None else None, value)

    def switch_stmt(self, items):
        return Switch(items[0], list(items[1:]))

    def case_stmt(self, items):
        return Case(items[0], items[1])

    def default_stmt(self, items):
        return Case(None, items[0])

    def if_stmt(self, items):
        condition, then_statements, else_statements = items
        return If(condition, then_statements, else_statements or [])

    def while_stmt(self, items):
        return While(items[0], items[1])

    def return_stmt(self, items):
        return Return(items[0])

    def assignment_stmt(self, items):
        return Assignment(items[0], items[1])

    def expression_stmt(self, items):
        return ExpressionStmt(items[0])

    # Expressions
    def binary(self, items):
        # items pattern: expr (op expr)*, folded left-associatively
        left = items[0]
        for i in range(1, len(items), 2):
            left = Binary(str(items[i]), left, items[i + 1])
        return left

    logical = comparison = additive = multiplicative = binary

    def group(self, items):
        return Group(items[0])

    def call(self, items):
        name, arguments = items
        return Call(str(name), arguments or [])

    def access(self, items):
        name, offset = items
        return Access(str(name), offset)

    def list_literal(self, items):
        return ListLiteral(items[0] or [])

    def arguments(self, items):
        return list(items)

    def literal(self, items):
        tokens = [item for item in items if item is not None]
        negative = tokens[0].type == 'MINUS'
        token = tokens[-1]
        if token.type == 'NIL':
            return Literal(NIL)
        if token.type in ('TRUE', 'FALSE'):
            return Literal(token.type == 'TRUE')
        if token.type == 'INTEGER':
            value = int(token.value)
            return Literal(-value if negative else value)
        if token.type == 'DECIMAL':
            value = Decimal(token.value)
            return Literal(-value if negative else value)
        if token.type == 'CHARACTER':
            return Literal(CharVal(unescape(token.value[1:-1])))
        if token.type == 'STRING':
            return Literal(unescape(token.value[1:-1]))
        raise NotImplementedError(f"unknown literal token {token}")


def parse_program(source: str) -> Source:
    """Parse PLC source code into a `Source` AST node.

    Syntax errors reported by Lark are raised as `ParseError`.
    """
    try:
        tree = PLC_PARSER.parse(source)
    except LarkError as e:
        raise ParseError(str(e)) from e
    return ASTTransformer().transform(tree)
