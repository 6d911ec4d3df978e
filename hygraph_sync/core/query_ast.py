"""Query AST nodes.

A compiled query is a tree of three node kinds: objects with a nested
selection, conditional groups (inline fragments keyed by type name) and
leaves. The tree is built by the query builder and rendered once by the
serializer.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class EnumValue:
    """An argument value emitted without quotes, e.g. ``DRAFT``."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RawValue:
    """A pre-rendered argument literal emitted verbatim, e.g. a where filter."""
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class LeafNode:
    """A scalar selection, optionally aliased."""
    name: str
    alias: str | None = None


@dataclass
class ObjectNode:
    """A field with a nested selection set."""
    name: str
    children: dict[str, "QueryNode"] = field(default_factory=dict)
    arguments: dict[str, Any] = field(default_factory=dict)
    alias: str | None = None

    def add(self, node: "QueryNode", key: str | None = None) -> "ObjectNode":
        """Add a child node, keyed by its name unless a key is given."""
        if key is None:
            key = node.name if not isinstance(node, ConditionalGroup) else ON_KEY
        self.children[key] = node
        return self


@dataclass
class ConditionalGroup:
    """Type-conditional branches, rendered as ``... on Type { ... }``."""
    branches: dict[str, ObjectNode] = field(default_factory=dict)


QueryNode = Union[ObjectNode, ConditionalGroup, LeafNode]

# Key under which a conditional group is stored in its parent's children
ON_KEY = "__on"


def leaves(*names: str) -> dict[str, LeafNode]:
    """Build a children map of plain leaves."""
    return {name: LeafNode(name) for name in names}
