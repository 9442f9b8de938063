"""Translate a finished drag gesture into a move request."""

from __future__ import annotations

from dataclasses import dataclass

from trellis.model.hierarchy import HierarchyStore
from trellis.model.reorder import CardMove, ListMove

LIST = "list"
CARD = "card"


@dataclass(frozen=True)
class DragEnd:
    """What was dragged (active) and what it was dropped on (over).

    The *_list_id fields name the list a card belongs to; for a list
    they are unused.
    """

    active_id: str
    active_kind: str
    over_id: str | None = None
    over_kind: str | None = None
    active_list_id: str | None = None
    over_list_id: str | None = None


def _index(ids: list[str], item_id: str) -> int | None:
    try:
        return ids.index(item_id)
    except ValueError:
        return None


def to_move(event: DragEnd, hierarchy: HierarchyStore) -> ListMove | CardMove | None:
    """Resolve a drop against the current hierarchy.

    Dropping onto itself, onto nothing, or a list onto a card is not a
    move. A card dropped on another card takes that card's position; a
    card dropped on a list is appended to it.
    """
    if event.over_id is None or event.active_id == event.over_id:
        return None
    list_ids = [lst.id for lst in hierarchy.list_records()]

    if event.active_kind == LIST:
        if event.over_kind != LIST or event.active_id not in list_ids:
            return None
        target = _index(list_ids, event.over_id)
        return ListMove(event.active_id, target) if target is not None else None

    if event.active_kind != CARD:
        return None

    source = event.active_list_id or hierarchy.find_card_list(event.active_id)
    if source not in list_ids:
        return None

    if event.over_kind == LIST:
        if event.over_id not in list_ids:
            return None
        return CardMove(event.active_id, source, event.over_id, len(hierarchy.card_records(event.over_id)))

    if event.over_kind != CARD:
        return None
    target_list = event.over_list_id or hierarchy.find_card_list(event.over_id)
    if target_list not in list_ids:
        return None
    target = _index([c.id for c in hierarchy.card_records(target_list)], event.over_id)
    if target is None:
        return None
    return CardMove(event.active_id, source, target_list, target)
