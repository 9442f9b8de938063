"""Persisted entities and their document shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Board:
    id: str
    name: str
    owner: str
    created_at: datetime | None = None

    def to_fields(self) -> dict[str, Any]:
        return {"name": self.name, "owner": self.owner, "createdAt": self.created_at}

    @classmethod
    def from_doc(cls, doc_id: str, fields: dict[str, Any]) -> Board:
        return cls(
            id=doc_id,
            name=fields.get("name", ""),
            owner=fields.get("owner", ""),
            created_at=fields.get("createdAt"),
        )


@dataclass(frozen=True)
class BoardList:
    id: str
    board_id: str
    title: str
    order: int = 0

    def to_fields(self) -> dict[str, Any]:
        return {"boardId": self.board_id, "title": self.title, "order": self.order}

    @classmethod
    def from_doc(cls, doc_id: str, fields: dict[str, Any]) -> BoardList:
        return cls(
            id=doc_id,
            board_id=fields.get("boardId", ""),
            title=fields.get("title", ""),
            order=int(fields.get("order", 0)),
        )


@dataclass(frozen=True)
class Card:
    id: str
    list_id: str
    content: str
    order: int = 0

    def to_fields(self) -> dict[str, Any]:
        return {"listId": self.list_id, "content": self.content, "order": self.order}

    @classmethod
    def from_doc(cls, doc_id: str, fields: dict[str, Any]) -> Card:
        return cls(
            id=doc_id,
            list_id=fields.get("listId", ""),
            content=fields.get("content", ""),
            order=int(fields.get("order", 0)),
        )


@dataclass(frozen=True)
class ListTree:
    list: BoardList
    cards: tuple[Card, ...] = ()


@dataclass(frozen=True)
class BoardTree:
    """One board with its lists and their cards, each level sorted by order."""

    board: Board
    lists: tuple[ListTree, ...] = field(default_factory=tuple)

    def find_list(self, list_id: str) -> ListTree | None:
        for lt in self.lists:
            if lt.list.id == list_id:
                return lt
        return None


def by_order(records):
    """Sort records ascending by rank; ties fall back to id so output is stable."""
    return sorted(records, key=lambda r: (r.order, r.id))


def next_order(orders) -> int:
    """Rank for a newly created sibling: one past the highest, or 0 when empty."""
    orders = list(orders)
    return max(orders) + 1 if orders else 0
