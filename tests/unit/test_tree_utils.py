import pytest
from splay_bridge.descriptor import element, fragment, null
from splay_bridge.runtime.tree import compact, find, get_used_types, transform, validate, walk


def _tree():
    return element(
        "root",
        {"title": "t"},
        element("a", {}, element("a1"), element("a2")),
        fragment(element("b1"), null()),
        element("c"),
    )


def test_walk_is_preorder_with_paths():
    seen = []
    walk(_tree(), lambda node, path: seen.append((node.type, path)))
    assert seen == [
        ("root", ()),
        ("a", (0,)),
        ("a1", (0, 0)),
        ("a2", (0, 1)),
        ("__fragment__", (1,)),
        ("b1", (1, 0)),
        ("__null__", (1, 1)),
        ("c", (2,)),
    ]


def test_walk_visits_each_node_once_on_deep_tree():
    node = element("leaf")
    for _ in range(3000):
        node = element("wrap", {}, node)
    count = []
    walk(node, lambda n, p: count.append(1))
    assert len(count) == 3001


def test_transform_returns_new_tree_and_keeps_original():
    original = _tree()

    def upper(node):
        return node.replace(type=node.type.upper()) if not node.type.startswith("__") else node

    out = transform(original, upper)
    assert out.type == "ROOT"
    assert [c.type for c in out.children] == ["A", "__fragment__", "C"]
    assert original.type == "root"
    assert original.children[0].type == "a"


def test_transform_recurses_into_rewritten_children():
    def expand(node):
        if node.type == "slot":
            return node.replace(type="box", children=(element("slot-child"),))
        return node

    visited = []

    def record(node):
        visited.append(node.type)
        return expand(node)

    out = transform(element("root", {}, element("slot")), record)
    assert visited == ["root", "slot", "slot-child"]
    assert out.children[0].children[0].type == "slot-child"


def test_find_returns_preorder_matches():
    tree = _tree()
    found = find(tree, lambda n: n.type.startswith("a"))
    assert [n.type for n in found] == ["a", "a1", "a2"]
    assert find(tree, lambda n: n.type == "missing") == []


def test_get_used_types_includes_sentinels():
    assert get_used_types(_tree()) == {"root", "a", "a1", "a2", "__fragment__", "b1", "__null__", "c"}


def test_validate_all_known():
    result = validate(_tree(), {"root", "a", "a1", "a2", "b1", "c"})
    assert result.valid is True
    assert result.unknown_types == set()


def test_validate_reports_deduplicated_unknowns():
    tree = element("root", {}, element("X"), element("X"), element("Y"))
    result = validate(tree, {"root"})
    assert result.valid is False
    assert result.unknown_types == {"X", "Y"}


def test_compact_drops_empty_values_but_keeps_falsy_scalars():
    d = element(
        "card",
        {"a": None, "b": "", "c": {}, "d": [], "e": (), "zero": 0, "no": False, "keep": "x", "nested": {"k": None}},
        element("child", {"x": None, "y": 1}),
    )
    out = compact(d)
    assert out.props == {"zero": 0, "no": False, "keep": "x", "nested": {"k": None}}
    assert out.children[0].props == {"y": 1}


def test_compact_keeps_children_lists():
    d = element("list", {}, element("item", {"v": ""}))
    out = compact(d)
    assert len(out.children) == 1
    assert out.children[0].props == {}


def test_compact_is_idempotent():
    d = _tree().replace(props={"a": "", "b": 0, "c": [1]})
    once = compact(d)
    assert compact(once) == once


def test_transform_cannot_write_through_to_original_props():
    original = _tree()

    def touch(node):
        node.props["touched"] = True
        return node

    with pytest.raises(TypeError):
        transform(original, touch)
    assert original.props == {"title": "t"}

    out = transform(original, lambda n: n.replace(props={**n.props, "touched": True}) if n.type == "root" else n)
    assert out.props == {"title": "t", "touched": True}
    assert original.props == {"title": "t"}
