"""Tests for the board index."""

from trellis.model.index import BoardIndex
from trellis.model.records import Board


def test_replace_and_read():
    index = BoardIndex()
    index.replace([Board("b1", "Work", "alice"), Board("b2", "Home", "alice")])
    assert len(index) == 2
    assert "b1" in index
    assert index.get("b2").name == "Home"
    assert index.get("nope") is None


def test_duplicate_ids_collapse():
    index = BoardIndex()
    index.replace([Board("b1", "Old", "alice"), Board("b1", "New", "alice")])
    assert [b.name for b in index.boards()] == ["New"]


def test_replace_drops_missing_boards_and_notifies():
    events = []
    index = BoardIndex()
    index.replace([Board("b1", "Work", "alice"), Board("b2", "Home", "alice")])
    index.watch(lambda n, k, old, new: events.append(k))
    index.replace([Board("b2", "Home", "alice")])
    assert [b.id for b in index.boards()] == ["b2"]
    assert "b1" in events


def test_rename_updates_in_place():
    index = BoardIndex()
    index.replace([Board("b1", "Work", "alice")])
    node = index.root.boards["b1"]
    index.replace([Board("b1", "Job", "alice")])
    assert index.root.boards["b1"] is node
    assert node.name == "Job"
