"""One interactive session against one user's boards.

Gestures and commands come in here. Moves are computed by the rank
engine, shown immediately in the hierarchy, and persisted in the
background; snapshot sync later replaces the hierarchy with whatever
the store holds.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from trellis.drag import DragEnd, to_move
from trellis.gateway import PersistenceGateway
from trellis.model.hierarchy import HierarchyStore
from trellis.model.index import BoardIndex
from trellis.model.reorder import CardMove, ListMove, move_card, move_list
from trellis.paths import DEFAULT_APP_ID, Paths
from trellis.status import FAILED, READY, new_status, record_failure
from trellis.store.base import DocumentStore
from trellis.sync import SnapshotSync

logger = logging.getLogger(__name__)


class BoardSession:
    def __init__(self, store: DocumentStore, owner: str, app_id: str = DEFAULT_APP_ID):
        self.store = store
        self.owner = owner
        self.paths = Paths(app_id)
        self.status = new_status()
        self.hierarchy = HierarchyStore()
        self.index = BoardIndex()
        self.gateway = PersistenceGateway(store, self.paths, self.status)
        self.sync = SnapshotSync(store, self.paths, owner, self.hierarchy, self.index, self.status)
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, store: DocumentStore, config: dict[str, Any]) -> BoardSession:
        return cls(store, owner=config["user"], app_id=config["app_id"])

    @property
    def active_board_id(self) -> str | None:
        return self.sync.board_id

    # --- lifecycle ---

    async def start(self) -> bool:
        """Check the store is reachable and start following the user's boards.

        On failure the status goes to "failed" and stays there; there is
        no automatic retry.
        """
        try:
            await self.store.query(self.paths.boards(self.owner))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("document store unreachable")
            record_failure(self.status, "start", exc)
            self.status.state = FAILED
            return False
        await self.sync.watch_boards()
        self.status.state = READY
        return True

    async def open_board(self, board_id: str) -> None:
        """Open board_id and wait for its first snapshot.

        Returns early, without raising, if another open or a close
        supersedes this one before the snapshot lands.
        """
        rebuild = self.sync.open(board_id)
        try:
            await asyncio.shield(rebuild)
        except asyncio.CancelledError:
            if not rebuild.cancelled():
                raise
            logger.debug("opening board %s was superseded", board_id)

    def close_board(self) -> None:
        self.sync.close()

    def close(self) -> None:
        """End the session: drop subscriptions, leave in-flight writes running."""
        self.sync.shutdown()

    async def drain(self) -> None:
        """Wait for every background write, then for the resulting snapshots."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        await self.sync.settle()

    def _dispatch(self, coro: Awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        self.status.pending = len(self._tasks)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self.status.pending = len(self._tasks)

    # --- moves ---

    def apply(self, request: ListMove | CardMove | None) -> asyncio.Task | None:
        """Run a move: re-rank, update the hierarchy, commit in the background.

        Returns the commit task, or None when nothing moved.
        """
        if request is None or not self.hierarchy.loaded:
            return None
        if isinstance(request, ListMove):
            sequence, deltas = move_list(self.hierarchy.list_records(), request.list_id, request.target_index)
            if not deltas:
                return None
            self.hierarchy.apply_lists(sequence)
        else:
            lists = {
                request.source_list_id: self.hierarchy.card_records(request.source_list_id),
                request.target_list_id: self.hierarchy.card_records(request.target_list_id),
            }
            sequences, deltas = move_card(request, lists)
            if not deltas:
                return None
            self.hierarchy.apply_cards(sequences)
        logger.debug("committing %d rank changes", len(deltas))
        return self._dispatch(self.gateway.commit_deltas(deltas))

    def move_list(self, list_id: str, target_index: int) -> asyncio.Task | None:
        return self.apply(ListMove(list_id, target_index))

    def move_card(self, card_id: str, target_list_id: str, target_index: int) -> asyncio.Task | None:
        source = self.hierarchy.find_card_list(card_id)
        if source is None:
            raise KeyError(card_id)
        return self.apply(CardMove(card_id, source, target_list_id, target_index))

    def drop(self, event: DragEnd) -> asyncio.Task | None:
        return self.apply(to_move(event, self.hierarchy))

    # --- other mutations ---

    def add_board(self, name: str) -> asyncio.Task | None:
        """Create a board and open it once it exists."""
        if not name:
            return None

        async def create():
            board_id = await self.gateway.create_board(self.owner, name)
            if board_id is not None:
                await self.open_board(board_id)
            return board_id

        return self._dispatch(create())

    def add_list(self, title: str) -> asyncio.Task | None:
        if not title or self.active_board_id is None:
            return None
        return self._dispatch(self.gateway.create_list(self.active_board_id, title))

    def add_card(self, list_id: str, content: str) -> asyncio.Task | None:
        if not content or self.active_board_id is None:
            return None
        return self._dispatch(self.gateway.create_card(list_id, content))

    def rename_list(self, list_id: str, title: str) -> asyncio.Task | None:
        if not title or self.active_board_id is None:
            return None
        return self._dispatch(self.gateway.rename_list(self.active_board_id, list_id, title))

    def edit_card(self, card_id: str, content: str) -> asyncio.Task | None:
        list_id = self.hierarchy.find_card_list(card_id)
        if not content or list_id is None:
            return None
        return self._dispatch(self.gateway.edit_card(list_id, card_id, content))

    def remove_card(self, card_id: str) -> asyncio.Task | None:
        list_id = self.hierarchy.find_card_list(card_id)
        if list_id is None:
            return None
        return self._dispatch(self.gateway.delete_card(list_id, card_id))

    def remove_list(self, list_id: str) -> asyncio.Task | None:
        if self.active_board_id is None:
            return None
        return self._dispatch(self.gateway.delete_list(self.active_board_id, list_id))

    def remove_board(self, board_id: str) -> asyncio.Task:
        """Cascade-delete a board, then close it if it was the open one."""

        async def delete():
            deleted = await self.gateway.delete_board(self.owner, board_id)
            if deleted and self.active_board_id == board_id:
                self.close_board()
            return deleted

        return self._dispatch(delete())
