"""Tree reducer: (snapshot, patch) -> snapshot.

Pure and total. Unsupported or malformed patches return the input snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable

from .parser import Patch, PatchOp
from .tree import Element, Tree

ROOT_PATH = "/root"
ELEMENTS_PREFIX = "/elements/"

_ELEMENT_OPS = frozenset({PatchOp.SET.value, PatchOp.ADD.value})


def element_key(path: str) -> str | None:
    """Extract the element key from an `/elements/{key}` path."""
    if not path.startswith(ELEMENTS_PREFIX):
        return None
    key = path[len(ELEMENTS_PREFIX) :].split("/")[0]
    return key or None


def apply_patch(tree: Tree, patch: Patch) -> Tree:
    """Apply one patch, returning a new snapshot.

    `/root` replaces the root key whatever the op. `/elements/{key}` with
    op "set" or "add" replaces the whole element at that key.
    """
    if patch.path is None:
        return tree

    if patch.path == ROOT_PATH:
        value = patch.value
        return tree.with_root("" if value is None else str(value))

    key = element_key(patch.path)
    if key is None or patch.op not in _ELEMENT_OPS:
        return tree

    element = Element.from_value(key, patch.value)
    if element is None:
        return tree

    return tree.with_element(key, element)


def apply_patches(tree: Tree, patches: Iterable[Patch]) -> Tree:
    for patch in patches:
        tree = apply_patch(tree, patch)
    return tree
