"""Render query AST trees as GraphQL documents."""

import re
from typing import Any

from .query_ast import ConditionalGroup, EnumValue, LeafNode, ObjectNode, QueryNode, RawValue

INDENT = "  "


def serialize(root: ObjectNode) -> str:
    """Render a root node (``query`` or ``mutation``) as GraphQL text.

    Traversal is depth-first in children insertion order, so the same tree
    always produces the same text.
    """
    return "\n".join(_serialize_node(root, 0))


def _serialize_node(node: QueryNode, level: int) -> list[str]:
    indent = INDENT * level

    if isinstance(node, LeafNode):
        if node.alias:
            return [f"{indent}{node.alias}: {node.name}"]
        return [f"{indent}{node.name}"]

    if isinstance(node, ConditionalGroup):
        lines = []
        for type_name, branch in node.branches.items():
            lines.append(f"{indent}... on {type_name} {{")
            lines.extend(_serialize_children(branch, level + 1))
            lines.append(f"{indent}}}")
        return lines

    if isinstance(node, ObjectNode):
        key = f"{node.alias}: {node.name}" if node.alias else node.name
        if node.arguments:
            key = f"{key}({serialize_arguments(node.arguments)})"
        lines = [f"{indent}{key} {{"]
        lines.extend(_serialize_children(node, level + 1))
        lines.append(f"{indent}}}")
        return lines

    raise TypeError(f"Unsupported query node: {type(node).__name__}")


def _serialize_children(node: ObjectNode, level: int) -> list[str]:
    lines = []
    for child in node.children.values():
        lines.extend(_serialize_node(child, level))
    return lines


def serialize_arguments(arguments: dict[str, Any]) -> str:
    """Build an argument list: ``stage: DRAFT, first: 100``"""
    return ", ".join(f"{name}: {serialize_value(value)}" for name, value in arguments.items())


def serialize_value(value: Any) -> str:
    """Encode a Python value as a GraphQL literal."""
    if isinstance(value, (EnumValue, RawValue)):
        return str(value)
    if value is None:
        return "null"
    # bool before int, True is an int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(serialize_value(v) for v in value)}]"
    if isinstance(value, dict):
        return serialize_object(value)
    raise TypeError(f"Cannot serialize argument value of type {type(value).__name__}")


def serialize_object(obj: dict[str, Any]) -> str:
    """Encode a mapping as ``{ key: value, ... }``."""
    fields = ", ".join(f"{key}: {serialize_value(value)}" for key, value in obj.items())
    return f"{{ {fields} }}"


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\b": "\\b", "\f": "\\f"}
# Control characters other than tab are not allowed raw in a string value
_NEEDS_ESCAPE = re.compile(r'[\\"\x00-\x08\x0a-\x1f]')


def _escape_char(match: re.Match) -> str:
    char = match.group()
    return _ESCAPES.get(char) or f"\\u{ord(char):04x}"


def _quote(value: str) -> str:
    return f'"{_NEEDS_ESCAPE.sub(_escape_char, value)}"'


def collapse_whitespace(query: str | None) -> str:
    """Collapse a multi-line query into a single line for log output."""
    if not query:
        return ""
    return re.sub(r"\s+", " ", query.replace("\n", "")).strip()
