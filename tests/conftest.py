"""Shared fixtures: an in-memory store seeded with readable ids."""

import pytest

from trellis.paths import Paths
from trellis.store.memory import MemoryStore

OWNER = "alice"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def paths():
    return Paths()


@pytest.fixture
def seed(store, paths):
    """Write a board whose list and card ids equal their titles/contents.

    lists is {list_id: [card_id, ...]} in rank order.
    """

    async def _seed(board_id="b1", lists=None, name="Board", owner=OWNER):
        await store.set(paths.board(owner, board_id), {"name": name, "owner": owner, "createdAt": None})
        for i, (list_id, cards) in enumerate((lists or {}).items()):
            await store.set(paths.list(board_id, list_id), {"boardId": board_id, "title": list_id, "order": i})
            for j, card_id in enumerate(cards):
                await store.set(paths.card(list_id, card_id), {"listId": list_id, "content": card_id, "order": j})
        return board_id

    return _seed


@pytest.fixture
def card_orders(store, paths):
    """Async reader: [(card_id, order), ...] for a list, sorted by order."""

    async def _read(list_id):
        docs = await store.query(paths.cards(list_id))
        return sorted(((d.id, d.fields["order"]) for d in docs), key=lambda pair: pair[1])

    return _read


@pytest.fixture
def list_orders(store, paths):
    """Async reader: [(list_id, order), ...] for a board, sorted by order."""

    async def _read(board_id):
        docs = await store.query(paths.lists(board_id))
        return sorted(((d.id, d.fields["order"]) for d in docs), key=lambda pair: pair[1])

    return _read
