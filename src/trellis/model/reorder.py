"""Rank reassignment for list and card moves.

Everything here is pure: inputs are never mutated, and the returned
deltas are absolute positions, so committing them twice is harmless.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from trellis.model.records import BoardList, Card


@dataclass(frozen=True)
class ListMove:
    list_id: str
    target_index: int


@dataclass(frozen=True)
class CardMove:
    card_id: str
    source_list_id: str
    target_list_id: str
    target_index: int

    @property
    def cross_list(self) -> bool:
        return self.source_list_id != self.target_list_id


@dataclass(frozen=True)
class RankDelta:
    """One document write produced by a move.

    kind is "list" or "card". parent_id is the owning board (lists) or
    list (cards) after the move. A relocated card also carries
    moved_from and its full document fields.
    """

    kind: str
    id: str
    parent_id: str
    order: int
    moved_from: str | None = None
    fields: dict[str, Any] | None = None


def clamp(index: int, low: int, high: int) -> int:
    return max(low, min(index, high))


def _index_of(sequence: Sequence, item_id: str) -> int:
    for i, item in enumerate(sequence):
        if item.id == item_id:
            return i
    raise KeyError(item_id)


def rerank(sequence: Sequence) -> tuple:
    """Assign order = position, reusing records whose rank is already right."""
    return tuple(item if item.order == i else replace(item, order=i) for i, item in enumerate(sequence))


def _array_move(sequence: Sequence, old: int, new: int) -> list:
    items = list(sequence)
    items.insert(new, items.pop(old))
    return items


def _changed(before: Sequence, after: Sequence) -> list:
    """Records in after whose order differs from their rank in before."""
    previous = {item.id: item.order for item in before}
    return [item for item in after if previous.get(item.id) != item.order]


def move_list(
    sequence: Sequence[BoardList],
    list_id: str,
    target_index: int,
) -> tuple[Sequence[BoardList], tuple[RankDelta, ...]]:
    """Move one list to target_index and re-rank the board's lists.

    Returns the input sequence and no deltas when the list would not move.
    """
    old = _index_of(sequence, list_id)
    new = clamp(target_index, 0, len(sequence) - 1)
    if old == new:
        return sequence, ()
    ranked = rerank(_array_move(sequence, old, new))
    deltas = tuple(RankDelta("list", lst.id, lst.board_id, lst.order) for lst in _changed(sequence, ranked))
    return ranked, deltas


def move_card(
    request: CardMove,
    lists: Mapping[str, Sequence[Card]],
) -> tuple[dict[str, Sequence[Card]], tuple[RankDelta, ...]]:
    """Move a card within its list or into another list.

    lists maps list id to that list's cards in rank order; only the
    source and target entries are read. Returns the new sequences for
    the touched lists and the deltas to persist.
    """
    source = lists[request.source_list_id]
    old = _index_of(source, request.card_id)

    if not request.cross_list:
        new = clamp(request.target_index, 0, len(source) - 1)
        if old == new:
            return {request.source_list_id: source}, ()
        ranked = rerank(_array_move(source, old, new))
        deltas = tuple(RankDelta("card", c.id, c.list_id, c.order) for c in _changed(source, ranked))
        return {request.source_list_id: ranked}, deltas

    target = lists[request.target_list_id]
    card = replace(source[old], list_id=request.target_list_id)
    remaining = rerank([c for i, c in enumerate(source) if i != old])
    k = clamp(request.target_index, 0, len(target))
    inserted = rerank([*target[:k], card, *target[k:]])

    deltas = [RankDelta("card", c.id, c.list_id, c.order) for c in _changed(source, remaining)]
    previous = {c.id: c.order for c in target}
    for c in inserted:
        if c.id == card.id:
            deltas.append(
                RankDelta(
                    "card",
                    c.id,
                    c.list_id,
                    c.order,
                    moved_from=request.source_list_id,
                    fields=c.to_fields(),
                )
            )
        elif previous[c.id] != c.order:
            deltas.append(RankDelta("card", c.id, c.list_id, c.order))

    return {request.source_list_id: remaining, request.target_list_id: inserted}, tuple(deltas)
