"""Board model: records, rank engine and observable projections."""

from trellis.model.hierarchy import HierarchyStore
from trellis.model.index import BoardIndex
from trellis.model.node import ListNode, Node
from trellis.model.records import Board, BoardList, BoardTree, Card, ListTree
from trellis.model.reorder import CardMove, ListMove, RankDelta, move_card, move_list

__all__ = [
    "Board",
    "BoardIndex",
    "BoardList",
    "BoardTree",
    "Card",
    "CardMove",
    "HierarchyStore",
    "ListMove",
    "ListNode",
    "ListTree",
    "Node",
    "RankDelta",
    "move_card",
    "move_list",
]
