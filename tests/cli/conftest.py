"""Shared fixtures for CLI tests."""

import pytest
from git import Repo

from trellis.git import write_config_key
from trellis.paths import Paths
from trellis.store.base import Op
from trellis.store.gitstore import GitStore


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo."""
    repo = Repo.init(tmp_path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test")
        cw.set_value("user", "email", "test@example.com")
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    write_config_key(tmp_path, "user", "alice")
    return tmp_path


@pytest.fixture
def initialized_repo(empty_repo):
    """Create a repo holding board b1: lists todo/doing/done, two cards in todo."""
    paths = Paths()
    ops = [Op("set", paths.board("alice", "b1"), {"name": "Test Board", "owner": "alice", "createdAt": None})]
    for order, (list_id, title) in enumerate([("todo", "Todo"), ("doing", "Doing"), ("done", "Done")]):
        ops.append(Op("set", paths.list("b1", list_id), {"boardId": "b1", "title": title, "order": order}))
    for order, (card_id, content) in enumerate([("c1", "First card"), ("c2", "Second card")]):
        ops.append(Op("set", paths.card("todo", card_id), {"listId": "todo", "content": content, "order": order}))
    GitStore(empty_repo).commit_sync(ops)
    return empty_repo


@pytest.fixture
def layout(initialized_repo):
    """Read back {list_id: [card_id, ...]} for board b1, in rank order."""

    def _read():
        store = GitStore(initialized_repo)
        paths = Paths()
        lists = sorted(store.query_sync(paths.lists("b1")), key=lambda d: d.fields["order"])
        result = {}
        for doc in lists:
            cards = sorted(store.query_sync(paths.cards(doc.id)), key=lambda d: d.fields["order"])
            result[doc.id] = [c.id for c in cards]
        return result

    return _read
