"""In-memory projection of the open board.

Written by exactly two parties: snapshot sync (wholesale replace) and
the optimistic step right after a move (partial replace of the touched
sequences). Everything else only reads and watches.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Mapping, Sequence

from trellis.errors import ConcurrentMutation
from trellis.model.node import ListNode, Node
from trellis.model.records import Board, BoardList, BoardTree, Card, ListTree


def card_node(card: Card) -> Node:
    return Node(id=card.id, content=card.content, order=card.order, list_id=card.list_id)


def list_node(tree: ListTree) -> Node:
    lst = tree.list
    return Node(
        id=lst.id,
        title=lst.title,
        order=lst.order,
        board_id=lst.board_id,
        cards=ListNode.of((c.id, card_node(c)) for c in tree.cards),
    )


def board_node(tree: BoardTree) -> Node:
    board = tree.board
    return Node(
        id=board.id,
        name=board.name,
        owner=board.owner,
        created_at=board.created_at,
        lists=ListNode.of((lt.list.id, list_node(lt)) for lt in tree.lists),
    )


def _card_record(node: Node) -> Card:
    return Card(id=node.id, list_id=node.list_id, content=node.content or "", order=node.order)


def _list_record(node: Node) -> BoardList:
    return BoardList(id=node.id, board_id=node.board_id, title=node.title or "", order=node.order)


class HierarchyStore:
    """The open board's lists and cards, observable by the rendering layer."""

    def __init__(self) -> None:
        self.root = Node()
        self._writing = False

    @contextmanager
    def _mutation(self):
        if self._writing:
            raise ConcurrentMutation("hierarchy is already being updated")
        self._writing = True
        try:
            yield
        finally:
            self._writing = False

    @property
    def board_id(self) -> str | None:
        return self.root.id

    @property
    def loaded(self) -> bool:
        return self.root.id is not None

    def watch(self, key: str, callback):
        """Watch a top-level key ("lists", "name", ...). Returns an unwatch callable."""
        return self.root.watch(key, callback)

    def replace(self, tree: BoardTree | None) -> None:
        """Swap in a freshly read board, or clear when tree is None."""
        with self._mutation():
            if tree is None or self.root.id != tree.board.id:
                self.root.clear()
            if tree is not None:
                self.root.update(board_node(tree))

    def apply_lists(self, sequence: Sequence[BoardList]) -> None:
        """Optimistically install a re-ranked list sequence."""
        with self._mutation():
            lists = self.root.lists
            if lists is None:
                raise KeyError("no board loaded")
            for rec in sequence:
                node = lists[rec.id]
                if node is None:
                    raise KeyError(rec.id)
                node.order = rec.order
            lists.reorder(rec.id for rec in sequence)

    def apply_cards(self, sequences: Mapping[str, Sequence[Card]]) -> None:
        """Optimistically install re-ranked card sequences for the touched lists.

        A card that appears in a different list than before is moved
        there, keeping its node (and any watchers on it).
        """
        with self._mutation():
            touched = {}
            for list_id in sequences:
                node = self.root.lists[list_id] if self.root.lists is not None else None
                if node is None:
                    raise KeyError(list_id)
                touched[list_id] = node.cards

            existing = {key: card for cards in touched.values() for key, card in cards.items()}

            for list_id, seq in sequences.items():
                wanted = {c.id for c in seq}
                cards = touched[list_id]
                for key in cards.keys():
                    if key not in wanted:
                        cards[key] = None

            for list_id, seq in sequences.items():
                cards = touched[list_id]
                for rec in seq:
                    node = existing.get(rec.id)
                    if node is None:
                        node = card_node(rec)
                    node.order = rec.order
                    node.list_id = rec.list_id
                    if rec.id not in cards:
                        cards[rec.id] = node
                cards.reorder(c.id for c in seq)

    def list_records(self) -> tuple[BoardList, ...]:
        if self.root.lists is None:
            return ()
        return tuple(_list_record(n) for n in self.root.lists)

    def card_records(self, list_id: str) -> tuple[Card, ...]:
        node = self.root.lists[list_id] if self.root.lists is not None else None
        if node is None:
            raise KeyError(list_id)
        return tuple(_card_record(c) for c in node.cards)

    def card_sequences(self) -> dict[str, tuple[Card, ...]]:
        return {lst.id: self.card_records(lst.id) for lst in self.list_records()}

    def find_card_list(self, card_id: str) -> str | None:
        for lst in self.root.lists or ():
            if card_id in lst.cards:
                return lst.id
        return None

    def snapshot(self) -> BoardTree | None:
        """Freeze the current contents back into records."""
        if not self.loaded:
            return None
        board = Board(
            id=self.root.id,
            name=self.root.name or "",
            owner=self.root.owner or "",
            created_at=self.root.created_at,
        )
        return BoardTree(
            board=board,
            lists=tuple(ListTree(_list_record(n), self.card_records(n.id)) for n in self.root.lists or ()),
        )
