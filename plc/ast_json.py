"""JSON serialization/deserialization for the PLC AST.

This module converts between PLC AST dataclasses and plain Python
dict/list structures suitable for JSON encoding, so that an AST produced
by another front end can be checked and executed. Literal values are
tagged with their kind because JSON cannot tell a Character from a
String or a Decimal from a float. Analyzer annotations are not written.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Source,
    Global,
    Parameter,
    Function,
    ExpressionStmt,
    Declaration,
    Assignment,
    If,
    Case,
    Switch,
    While,
    Return,
    Literal,
    Group,
    Binary,
    Access,
    Call,
    ListLiteral,
)
from .values import NIL, CharVal, NilVal


def literal_to_obj(value: Any) -> Dict[str, Any]:
    if isinstance(value, NilVal):
        return {"kind": "Nil", "value": None}
    if isinstance(value, bool):
        return {"kind": "Boolean", "value": value}
    if isinstance(value, int):
        return {"kind": "Integer", "value": str(value)}
    if isinstance(value, Decimal):
        return {"kind": "Decimal", "value": str(value)}
    if isinstance(value, CharVal):
        return {"kind": "Character", "value": value.value}
    if isinstance(value, str):
        return {"kind": "String", "value": value}
    raise TypeError(f"Unsupported literal value: {value!r}")


def literal_from_obj(o: Dict[str, Any]) -> Any:
    kind = o["kind"]
    if kind == "Nil":
        return NIL
    if kind == "Boolean":
        return bool(o["value"])
    if kind == "Integer":
        return int(o["value"])
    if kind == "Decimal":
        return Decimal(o["value"])
    if kind == "Character":
        return CharVal(o["value"])
    if kind == "String":
        return o["value"]
    raise ValueError(f"Unknown literal kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Source):
        return {"type": "Source", "globals": ast_to_obj(node.globals), "functions": ast_to_obj(node.functions)}
    if isinstance(node, Global):
        return {
            "type": "Global",
            "name": node.name,
            "mutable": node.mutable,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Parameter):
        return {"type": "Parameter", "name": node.name, "type_name": node.type_name}
    if isinstance(node, Function):
        return {
            "type": "Function",
            "name": node.name,
            "parameters": ast_to_obj(node.parameters),
            "return_type_name": node.return_type_name,
            "statements": ast_to_obj(node.statements),
        }
    if isinstance(node, ExpressionStmt):
        return {"type": "ExpressionStmt", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Declaration):
        return {
            "type": "Declaration",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "receiver": ast_to_obj(node.receiver), "value": ast_to_obj(node.value)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_statements": ast_to_obj(node.then_statements),
            "else_statements": ast_to_obj(node.else_statements),
        }
    if isinstance(node, Case):
        return {"type": "Case", "value": ast_to_obj(node.value), "statements": ast_to_obj(node.statements)}
    if isinstance(node, Switch):
        return {"type": "Switch", "condition": ast_to_obj(node.condition), "cases": ast_to_obj(node.cases)}
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "statements": ast_to_obj(node.statements)}
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": literal_to_obj(node.value)}
    if isinstance(node, Group):
        return {"type": "Group", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Binary):
        return {"type": "Binary", "operator": node.operator, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Access):
        return {"type": "Access", "name": node.name, "offset": ast_to_obj(node.offset)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "arguments": ast_to_obj(node.arguments)}
    if isinstance(node, ListLiteral):
        return {"type": "ListLiteral", "elements": ast_to_obj(node.elements)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Source":
        return Source(globals=ast_from_obj(obj["globals"]), functions=ast_from_obj(obj["functions"]))
    if t == "Global":
        return Global(
            name=obj["name"],
            mutable=bool(obj["mutable"]),
            type_name=obj.get("type_name"),
            value=ast_from_obj(obj.get("value")),
        )
    if t == "Parameter":
        return Parameter(name=obj["name"], type_name=obj["type_name"])
    if t == "Function":
        return Function(
            name=obj["name"],
            parameters=ast_from_obj(obj["parameters"]),
            return_type_name=obj.get("return_type_name"),
            statements=ast_from_obj(obj["statements"]),
        )
    if t == "ExpressionStmt":
        return ExpressionStmt(expression=ast_from_obj(obj["expression"]))
    if t == "Declaration":
        return Declaration(name=obj["name"], type_name=obj.get("type_name"), value=ast_from_obj(obj.get("value")))
    if t == "Assignment":
        return Assignment(receiver=ast_from_obj(obj["receiver"]), value=ast_from_obj(obj["value"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_statements=ast_from_obj(obj["then_statements"]),
            else_statements=ast_from_obj(obj.get("else_statements") or []),
        )
    if t == "Case":
        return Case(value=ast_from_obj(obj.get("value")), statements=ast_from_obj(obj["statements"]))
    if t == "Switch":
        return Switch(condition=ast_from_obj(obj["condition"]), cases=ast_from_obj(obj["cases"]))
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), statements=ast_from_obj(obj["statements"]))
    if t == "Return":
        return Return(value=ast_from_obj(obj["value"]))
    if t == "Literal":
        return Literal(value=literal_from_obj(obj["value"]))
    if t == "Group":
        return Group(expression=ast_from_obj(obj["expression"]))
    if t == "Binary":
        return Binary(operator=obj["operator"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Access":
        return Access(name=obj["name"], offset=ast_from_obj(obj.get("offset")))
    if t == "Call":
        return Call(name=obj["name"], arguments=ast_from_obj(obj["arguments"]))
    if t == "ListLiteral":
        return ListLiteral(elements=ast_from_obj(obj["elements"]))

    raise ValueError(f"Unknown AST node type: {t}")
