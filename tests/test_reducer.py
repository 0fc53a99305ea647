"""Tests for the tree reducer."""

from uipatch.parser import Patch, parse_patch
from uipatch.reducer import apply_patch, apply_patches, element_key
from uipatch.tree import Element, Tree, is_ready, resolve_children, root_element

FORM = {"key": "form", "type": "Form", "props": {"title": "Contact Us"}, "children": []}


class TestElementKey:
    def test_first_segment(self):
        assert element_key("/elements/form") == "form"
        assert element_key("/elements/form/props/title") == "form"

    def test_not_an_element_path(self):
        assert element_key("/root") is None
        assert element_key("/elements/") is None
        assert element_key("elements/form") is None


class TestApplyPatch:
    def test_set_root(self):
        tree = apply_patch(Tree.empty(), Patch("set", "/root", "form"))
        assert tree.root == "form"

    def test_root_any_op(self):
        tree = apply_patch(Tree.empty(), Patch("add", "/root", "form"))
        assert tree.root == "form"

    def test_root_none_value_clears(self):
        tree = apply_patch(Tree(root="form"), Patch("set", "/root", None))
        assert tree.root == ""

    def test_root_non_string_coerced(self):
        tree = apply_patch(Tree.empty(), Patch("set", "/root", 7))
        assert tree.root == "7"

    def test_add_element(self):
        tree = apply_patch(Tree.empty(), Patch("add", "/elements/form", FORM))
        assert tree.elements["form"].type == "Form"

    def test_set_element(self):
        tree = apply_patch(Tree.empty(), Patch("set", "/elements/form", FORM))
        assert tree.elements["form"].props["title"] == "Contact Us"

    def test_element_is_fully_replaced(self):
        tree = apply_patch(
            Tree.empty(),
            Patch("add", "/elements/form", {**FORM, "children": ["name"]}),
        )
        tree = apply_patch(
            tree,
            Patch("add", "/elements/form", {"key": "form", "type": "Form"}),
        )
        el = tree.elements["form"]
        assert el.children is None
        assert dict(el.props) == {}

    def test_input_snapshot_unchanged(self):
        before = Tree.empty()
        after = apply_patch(before, Patch("add", "/elements/form", FORM))
        assert len(before.elements) == 0
        assert after is not before

    def test_unsupported_op_ignored(self):
        tree = Tree.empty()
        assert apply_patch(tree, Patch("remove", "/elements/form", FORM)) is tree
        assert apply_patch(tree, Patch(None, "/elements/form", FORM)) is tree

    def test_missing_path_ignored(self):
        tree = Tree(root="form")
        assert apply_patch(tree, Patch("set", None, "x")) is tree

    def test_unknown_path_ignored(self):
        tree = Tree.empty()
        assert apply_patch(tree, Patch("set", "/meta/title", "x")) is tree

    def test_non_object_element_value_ignored(self):
        tree = Tree.empty()
        assert apply_patch(tree, Patch("add", "/elements/form", "Form")) is tree
        assert apply_patch(tree, Patch("add", "/elements/form", None)) is tree


class TestApplyPatches:
    def test_forward_reference_resolves_later(self):
        lines = [
            '{"op":"set","path":"/root","value":"form"}',
            '{"op":"add","path":"/elements/form","value":{"key":"form","type":"Form","children":["name"]}}',
        ]
        tree = Tree.empty()
        snapshots = []
        for line in lines:
            tree = apply_patch(tree, parse_patch(line))
            snapshots.append(tree)

        assert not is_ready(snapshots[0])
        assert is_ready(snapshots[1])
        assert resolve_children(snapshots[1], root_element(snapshots[1])) == []

        tree = apply_patch(
            tree,
            parse_patch('{"op":"add","path":"/elements/name","value":{"key":"name","type":"Input"}}'),
        )
        assert [c.key for c in resolve_children(tree, root_element(tree))] == ["name"]

    def test_order_matters(self):
        patches = [Patch("set", "/root", "a"), Patch("set", "/root", "b")]
        assert apply_patches(Tree.empty(), patches).root == "b"
        assert apply_patches(Tree.empty(), reversed(patches)).root == "a"

    def test_empty_iterable(self):
        tree = Tree(root="form")
        assert apply_patches(tree, []) is tree

    def test_leaves_elements_unchanged_across_patches(self):
        first = Element.from_value("name", {"type": "Input"})
        tree = Tree.empty().with_element("name", first)
        tree = apply_patches(
            tree,
            [Patch("add", "/elements/email", {"type": "Input"}), Patch("set", "/root", "x")],
        )
        assert tree.elements["name"] is first
