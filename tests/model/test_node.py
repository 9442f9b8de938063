"""Tests for the observable Node and ListNode tree."""

import pytest

from trellis.model.node import ListNode, Node


# --- Node basics ---


def test_node_set_and_get():
    node = Node()
    node.title = "Doing"
    assert node.title == "Doing"


def test_node_get_missing_returns_none():
    node = Node()
    assert node.nonexistent is None


def test_node_set_none_deletes():
    node = Node(content="write tests")
    node.content = None
    assert node.content is None
    assert "content" not in node


def test_node_auto_wrap_dict():
    node = Node()
    node.meta = {"owner": "alice"}
    assert isinstance(node.meta, Node)
    assert node.meta.owner == "alice"
    assert node.meta._parent is node


def test_node_equal_value_emits_nothing():
    node = Node(order=1)
    events = []
    node.watch("order", lambda *a: events.append(a))
    node.order = 1
    assert events == []


def test_node_path_nested():
    root = Node()
    root.lists = ListNode()
    root.lists["L1"] = {"title": "Todo"}
    assert root.lists["L1"].path == "lists.L1"


def test_node_clear_removes_everything():
    events = []
    node = Node(id="b1", name="Board")
    node.watch("name", lambda n, k, old, new: events.append((old, new)))
    node.clear()
    assert list(node.keys()) == []
    assert events == [("Board", None)]


# --- Watchers ---


def test_watch_fires_on_change():
    events = []
    node = Node(order=0)
    node.watch("order", lambda n, k, old, new: events.append((n, k, old, new)))
    node.order = 3
    assert events == [(node, "order", 0, 3)]


def test_unwatch_stops_events_and_is_idempotent():
    events = []
    node = Node()
    unwatch = node.watch("title", lambda n, k, old, new: events.append(1))
    node.title = "A"
    unwatch()
    unwatch()
    node.title = "B"
    assert len(events) == 1


def test_change_bubbles_to_ancestors():
    events = []
    root = Node(lists=ListNode())
    root.lists["L1"] = {"title": "Todo"}
    root.watch("lists", lambda n, k, old, new: events.append((k, old, new)))
    root.lists["L1"].title = "Done"
    assert events == [("title", "Todo", "Done")]


# --- ListNode ---


def test_listnode_of_preserves_order():
    ln = ListNode.of([("b", 2), ("a", 1), ("c", 3)])
    assert ln.keys() == ["b", "a", "c"]
    assert list(ln) == [2, 1, 3]


def test_listnode_delete():
    ln = ListNode.of([("a", 1), ("b", 2)])
    ln["a"] = None
    assert ln.keys() == ["b"]
    assert "a" not in ln


def test_listnode_delete_missing_is_noop():
    ln = ListNode()
    events = []
    ln.watch("ghost", lambda *a: events.append(a))
    ln["ghost"] = None
    assert events == []


def test_listnode_replace_equal_values_by_key():
    ln = ListNode.of([("a", 1), ("b", 1)])
    ln["b"] = None
    assert ln.items() == [("a", 1)]


def test_listnode_reorder_fires_star_event():
    events = []
    ln = ListNode.of([("a", 1), ("b", 2), ("c", 3)])
    ln.watch("*", lambda n, k, old, new: events.append((old, new)))
    ln.reorder(["c", "a", "b"])
    assert ln.keys() == ["c", "a", "b"]
    assert list(ln) == [3, 1, 2]
    assert events == [(["a", "b", "c"], ["c", "a", "b"])]


def test_listnode_reorder_same_order_is_silent():
    events = []
    ln = ListNode.of([("a", 1), ("b", 2)])
    ln.watch("*", lambda *args: events.append(1))
    ln.reorder(["a", "b"])
    assert events == []


def test_listnode_reorder_rejects_unknown_keys():
    ln = ListNode.of([("a", 1), ("b", 2)])
    with pytest.raises(KeyError):
        ln.reorder(["a", "z"])


# --- update ---


def test_update_keeps_node_identity_and_watchers():
    events = []
    old = ListNode.of([("a", Node(order=0)), ("b", Node(order=1))])
    a = old["a"]
    a.watch("order", lambda n, k, o, new: events.append(new))

    new = ListNode.of([("b", Node(order=0)), ("a", Node(order=1))])
    old.update(new)

    assert old.keys() == ["b", "a"]
    assert old["a"] is a
    assert a.order == 1
    assert events == [1]


def test_update_adds_and_removes():
    old = ListNode.of([("a", 1), ("b", 2)])
    old.update(ListNode.of([("b", 2), ("c", 3)]))
    assert old.items() == [("b", 2), ("c", 3)]


def test_node_update_removes_missing_keys():
    node = Node(a=1, b=2)
    node.update(Node(a=1))
    assert "b" not in node
