"""The current user's boards, for the board picker."""

from __future__ import annotations

from typing import Iterable

from trellis.model.node import ListNode, Node
from trellis.model.records import Board


class BoardIndex:
    """Flat set of boards keyed by id; replaced wholesale on each change."""

    def __init__(self) -> None:
        self.root = Node(boards=ListNode())

    def replace(self, boards: Iterable[Board]) -> None:
        fresh = ListNode.of(
            (b.id, Node(id=b.id, name=b.name, owner=b.owner, created_at=b.created_at)) for b in boards
        )
        self.root.boards.update(fresh)

    def boards(self) -> tuple[Board, ...]:
        return tuple(self._record(n) for n in self.root.boards)

    def get(self, board_id: str) -> Board | None:
        node = self.root.boards[board_id]
        return self._record(node) if node is not None else None

    def __contains__(self, board_id: str) -> bool:
        return board_id in self.root.boards

    def __len__(self) -> int:
        return len(self.root.boards)

    def watch(self, callback):
        """Fire callback on any board added, removed, renamed or reordered."""
        return self.root.watch("boards", callback)

    @staticmethod
    def _record(node: Node) -> Board:
        return Board(id=node.id, name=node.name or "", owner=node.owner or "", created_at=node.created_at)
