"""Snapshot sync: keep the board index and the open board in step with the store.

Every change notification for the open board triggers a full re-read
(board, lists by rank, each list's cards by rank) that replaces the
hierarchy wholesale. Local optimistic state not yet in the store is
overwritten; whichever write or snapshot lands last wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from trellis.model.hierarchy import HierarchyStore
from trellis.model.index import BoardIndex
from trellis.model.node import Node
from trellis.model.records import Board, BoardList, BoardTree, Card, ListTree, by_order
from trellis.paths import Paths
from trellis.status import new_status, record_failure
from trellis.store.base import DocumentStore

logger = logging.getLogger(__name__)


class Coalescer:
    """Run an async job on demand; triggers during a run fold into one rerun."""

    def __init__(self, job: Callable[[], Awaitable[None]]):
        self._job = job
        self._task: asyncio.Task | None = None
        self._again = False

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> asyncio.Task:
        if self.busy:
            self._again = True
            return self._task
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def _run(self) -> None:
        while True:
            self._again = False
            await self._job()
            if not self._again:
                return

    def cancel(self) -> None:
        if self.busy:
            self._task.cancel()
        self._task = None
        self._again = False

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.shield(self._task)


async def read_board_tree(store: DocumentStore, paths: Paths, owner: str, board_id: str) -> BoardTree | None:
    """Read one board's whole hierarchy, or None if the board is gone."""
    fields = await store.read(paths.board(owner, board_id))
    if fields is None:
        return None
    board = Board.from_doc(board_id, fields)
    list_docs = await store.query(paths.lists(board_id))
    lists = by_order(BoardList.from_doc(d.id, d.fields) for d in list_docs)
    card_docs = await asyncio.gather(*(store.query(paths.cards(lst.id)) for lst in lists))
    return BoardTree(
        board=board,
        lists=tuple(
            ListTree(lst, tuple(by_order(Card.from_doc(d.id, d.fields) for d in docs)))
            for lst, docs in zip(lists, card_docs)
        ),
    )


class SnapshotSync:
    def __init__(
        self,
        store: DocumentStore,
        paths: Paths,
        owner: str,
        hierarchy: HierarchyStore,
        index: BoardIndex,
        status: Node | None = None,
    ):
        self.store = store
        self.paths = paths
        self.owner = owner
        self.hierarchy = hierarchy
        self.index = index
        self.status = status if status is not None else new_status()
        self.board_id: str | None = None
        self._generation = 0
        self._board_subs: list[Callable[[], None]] = []
        self._card_subs: dict[str, Callable[[], None]] = {}
        self._index_unsub: Callable[[], None] | None = None
        self._boards = Coalescer(self._load_boards)
        self._rebuild = Coalescer(self._rebuild_once)

    # --- board index ---

    def watch_boards(self) -> asyncio.Task:
        """Subscribe to the user's boards and start the first load."""
        if self._index_unsub is None:
            self._index_unsub = self.store.subscribe(self.paths.boards(self.owner), self._on_boards_change)
        return self._boards.trigger()

    def _on_boards_change(self, changed: list[str]) -> None:
        self._boards.trigger()

    async def _load_boards(self) -> None:
        try:
            docs = await self.store.query(self.paths.boards(self.owner))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("loading boards for %s failed", self.owner)
            record_failure(self.status, "load boards", exc)
            return
        self.index.replace(Board.from_doc(d.id, d.fields) for d in docs)

    # --- open board ---

    def open(self, board_id: str) -> asyncio.Task:
        """Subscribe to board_id and its descendants, dropping any previous board."""
        self.close()
        self.board_id = board_id
        self._board_subs = [
            self.store.subscribe(self.paths.board(self.owner, board_id), self._on_board_change),
            self.store.subscribe(self.paths.lists(board_id), self._on_board_change),
        ]
        return self._rebuild.trigger()

    def _on_board_change(self, changed: list[str]) -> None:
        logger.debug("board %s changed: %s", self.board_id, changed)
        self._rebuild.trigger()

    async def _rebuild_once(self) -> None:
        board_id, generation = self.board_id, self._generation
        if board_id is None:
            return
        try:
            tree = await read_board_tree(self.store, self.paths, self.owner, board_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("snapshot of board %s failed", board_id)
            record_failure(self.status, "load board", exc)
            return
        if generation != self._generation:
            logger.debug("discarding snapshot of closed board %s", board_id)
            return
        self.hierarchy.replace(tree)
        self._track_lists(tree)

    def _track_lists(self, tree: BoardTree | None) -> None:
        """Hold exactly one card subscription per list currently on the board.

        Cards written to a new list between reading it and subscribing to
        it were missed, so any new subscription schedules one more rebuild.
        """
        wanted = {lt.list.id for lt in tree.lists} if tree is not None else set()
        for list_id in set(self._card_subs) - wanted:
            self._card_subs.pop(list_id)()
        added = wanted - set(self._card_subs)
        for list_id in added:
            self._card_subs[list_id] = self.store.subscribe(self.paths.cards(list_id), self._on_board_change)
        if added:
            self._rebuild.trigger()

    async def settle(self) -> None:
        """Wait for any running board index load and board rebuild."""
        await self._boards.wait()
        await self._rebuild.wait()

    # --- teardown ---

    def close(self) -> None:
        """Release the open board's subscriptions and clear the hierarchy."""
        self._generation += 1
        for unsubscribe in self._board_subs:
            unsubscribe()
        for unsubscribe in self._card_subs.values():
            unsubscribe()
        self._board_subs = []
        self._card_subs = {}
        self._rebuild.cancel()
        if self.board_id is not None:
            self.board_id = None
            self.hierarchy.replace(None)

    def shutdown(self) -> None:
        """Release every subscription."""
        self.close()
        if self._index_unsub is not None:
            self._index_unsub()
            self._index_unsub = None
        self._boards.cancel()
