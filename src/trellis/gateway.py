"""Writes to the document store: creation, renames, rank deltas and deletes.

Every public operation handles its own failures: the error is logged,
recorded on the status node, and the operation returns None/False.
Nothing is retried and nothing raises past the operation.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Iterable

from trellis.model.node import Node
from trellis.model.records import Board, BoardList, Card, next_order
from trellis.model.reorder import RankDelta
from trellis.paths import Paths
from trellis.status import new_status, record_failure
from trellis.store.base import DocumentStore

logger = logging.getLogger(__name__)


def _guarded(action: str, default=None):
    def decorate(fn):
        @functools.wraps(fn)
        async def wrapper(self, *args, **kwargs):
            try:
                return await fn(self, *args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("%s failed", action)
                record_failure(self.status, action, exc)
                return default

        return wrapper

    return decorate


class PersistenceGateway:
    def __init__(self, store: DocumentStore, paths: Paths, status: Node | None = None):
        self.store = store
        self.paths = paths
        self.status = status if status is not None else new_status()

    # --- create ---

    @_guarded("create board")
    async def create_board(self, owner: str, name: str) -> str | None:
        board = Board(id="", name=name, owner=owner, created_at=datetime.now(timezone.utc))
        return await self.store.create(self.paths.boards(owner), board.to_fields())

    @_guarded("create list")
    async def create_list(self, board_id: str, title: str) -> str | None:
        collection = self.paths.lists(board_id)
        siblings = await self.store.query(collection)
        order = next_order(BoardList.from_doc(d.id, d.fields).order for d in siblings)
        return await self.store.create(collection, BoardList("", board_id, title, order).to_fields())

    @_guarded("create card")
    async def create_card(self, list_id: str, content: str) -> str | None:
        collection = self.paths.cards(list_id)
        siblings = await self.store.query(collection)
        order = next_order(Card.from_doc(d.id, d.fields).order for d in siblings)
        return await self.store.create(collection, Card("", list_id, content, order).to_fields())

    # --- rename ---

    @_guarded("rename list", default=False)
    async def rename_list(self, board_id: str, list_id: str, title: str) -> bool:
        await self.store.update(self.paths.list(board_id, list_id), {"title": title})
        return True

    @_guarded("edit card", default=False)
    async def edit_card(self, list_id: str, card_id: str, content: str) -> bool:
        await self.store.update(self.paths.card(list_id, card_id), {"content": content})
        return True

    # --- reorder ---

    @_guarded("reorder", default=False)
    async def commit_deltas(self, deltas: Iterable[RankDelta]) -> bool:
        """Write every delta in one batch.

        A card that changed lists is deleted from the old list's
        collection and written into the new one within the same batch.
        The batch is rejected if the card is no longer where the move
        found it, so a card another writer moved or deleted stays put.
        """
        batch = self.store.batch()
        for d in deltas:
            if d.kind == "list":
                batch.update(self.paths.list(d.parent_id, d.id), {"order": d.order})
            elif d.moved_from is not None:
                batch.require(self.paths.card(d.moved_from, d.id))
                batch.delete(self.paths.card(d.moved_from, d.id))
                fields = {**(d.fields or {}), "listId": d.parent_id, "order": d.order}
                batch.set(self.paths.card(d.parent_id, d.id), fields)
            else:
                batch.update(self.paths.card(d.parent_id, d.id), {"order": d.order})
        await batch.commit()
        return True

    # --- delete ---

    @_guarded("delete card", default=False)
    async def delete_card(self, list_id: str, card_id: str) -> bool:
        await self.store.delete(self.paths.card(list_id, card_id))
        return True

    @_guarded("delete list", default=False)
    async def delete_list(self, board_id: str, list_id: str) -> bool:
        """Delete a list and all of its cards in one batch."""
        cards = await self.store.query(self.paths.cards(list_id))
        batch = self.store.batch()
        for doc in cards:
            batch.delete(doc.path)
        batch.delete(self.paths.list(board_id, list_id))
        await batch.commit()
        return True

    @_guarded("delete board", default=False)
    async def delete_board(self, owner: str, board_id: str) -> bool:
        """Delete a board: cards, then lists, then the board document.

        Not atomic. Each list is cleared concurrently with separate
        writes; a failure part-way leaves whatever was not yet deleted.
        """
        lists = await self.store.query(self.paths.lists(board_id))

        async def drop_list(doc):
            cards = await self.store.query(self.paths.cards(doc.id))
            await asyncio.gather(*(self.store.delete(card.path) for card in cards))
            await self.store.delete(doc.path)

        await asyncio.gather(*(drop_list(doc) for doc in lists))
        await self.store.delete(self.paths.board(owner, board_id))
        return True
