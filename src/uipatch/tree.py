"""UI tree snapshots.

A tree is a flat mapping of element keys to elements plus the key of the
root element. Children are referenced by key and only resolved when the
tree is rendered, so a snapshot may be "not ready" (missing root) or carry
forward references and orphans at any point during streaming.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

WAITING_PLACEHOLDER = "// waiting..."

_EMPTY: Mapping[str, Any] = MappingProxyType({})


# ─────────────────────────────────────────────────────────────────────────────
# Element
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, eq=True)
class Element:
    """One node of the UI tree.

    Attributes:
        key: Unique element key
        type: Component kind tag ("Form", "Input", ...)
        props: Opaque component props (read-only view)
        children: Ordered child keys, or None for leaf components
    """

    key: str
    type: str
    props: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    children: tuple[str, ...] | None = None

    @classmethod
    def from_value(cls, key: str, value: Any) -> Element | None:
        """Build an element from an opaque JSON value.

        Returns None when the value is not a JSON object. Props are not
        validated; missing fields fall back to neutral defaults.
        """
        if not isinstance(value, Mapping):
            return None

        element_key = value.get("key")
        element_type = value.get("type")
        props = value.get("props")
        children = value.get("children")

        return cls(
            key=element_key if isinstance(element_key, str) else key,
            type=element_type if isinstance(element_type, str) else "",
            props=MappingProxyType(dict(props)) if isinstance(props, Mapping) else _EMPTY,
            children=(
                tuple(c for c in children if isinstance(c, str))
                if isinstance(children, list)
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "type": self.type,
            "props": dict(self.props),
        }
        if self.children is not None:
            data["children"] = list(self.children)
        return data


# ─────────────────────────────────────────────────────────────────────────────
# Tree
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, eq=True)
class Tree:
    """Immutable tree snapshot.

    `elements` is a read-only view. New snapshots are produced by the
    reducer and share every unmodified Element with their predecessor.
    """

    root: str = ""
    elements: Mapping[str, Element] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def empty(cls) -> Tree:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tree:
        """Build a snapshot from its JSON shape ({"root": ..., "elements": {...}})."""
        root = data.get("root")
        elements: dict[str, Element] = {}
        for key, value in (data.get("elements") or {}).items():
            element = Element.from_value(key, value)
            if element is not None:
                elements[key] = element
        return cls(
            root=root if isinstance(root, str) else "",
            elements=MappingProxyType(elements),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "elements": {key: el.to_dict() for key, el in self.elements.items()},
        }

    def with_root(self, root: str) -> Tree:
        return Tree(root=root, elements=self.elements)

    def with_element(self, key: str, element: Element) -> Tree:
        """Return a new snapshot with `key` replaced by `element`.

        Only the outer mapping is copied; other elements are shared.
        """
        elements = dict(self.elements)
        elements[key] = element
        return Tree(root=self.root, elements=MappingProxyType(elements))


# ─────────────────────────────────────────────────────────────────────────────
# Render-side resolution
# ─────────────────────────────────────────────────────────────────────────────


def root_element(tree: Tree | None) -> Element | None:
    """Get the root element, or None if the tree is not ready to render."""
    if tree is None or not tree.root:
        return None
    return tree.elements.get(tree.root)


def is_ready(tree: Tree | None) -> bool:
    return root_element(tree) is not None


def resolve_children(tree: Tree, element: Element) -> list[Element]:
    """Resolve child keys to elements, dropping keys not added yet."""
    return [
        tree.elements[key] for key in element.children or () if key in tree.elements
    ]


def walk(tree: Tree) -> Iterable[tuple[int, Element]]:
    """Yield (depth, element) pairs reachable from the root, depth-first.

    Mapping keys already visited are skipped so cyclic references terminate.
    Elements are tracked by the key they are stored under, not by their own
    `key` field, which may repeat.
    """
    if not is_ready(tree):
        return

    seen: set[str] = set()
    stack: list[tuple[int, str]] = [(0, tree.root)]
    while stack:
        depth, key = stack.pop()
        if key in seen:
            continue
        seen.add(key)
        element = tree.elements[key]
        yield depth, element
        children = [k for k in element.children or () if k in tree.elements]
        stack.extend((depth + 1, child) for child in reversed(children))


def tree_to_json(tree: Tree | None, indent: int = 2) -> str:
    """Render a snapshot as indented JSON for display."""
    if tree is None:
        return WAITING_PLACEHOLDER
    return json.dumps(tree.to_dict(), indent=indent)
