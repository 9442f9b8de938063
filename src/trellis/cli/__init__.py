"""CLI argument parser and dispatch for trellis."""

import argparse

from trellis.cli.board import board_add, board_list, board_rm, board_show
from trellis.cli.card import card_add, card_edit, card_move, card_rm
from trellis.cli.init import init_store
from trellis.cli.lists import list_add, list_move, list_rename, list_rm
from trellis.cli.watch import watch


def _position(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("positions start at 1")
    return n


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", help="Path to git repository (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    parser = argparse.ArgumentParser(
        prog="trellis",
        description="Kanban boards with ranked lists and cards, synced through a document store",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Initialize the store branch", parents=[common])
    init_p.set_defaults(func=init_store)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_list_p = board_verbs.add_parser("list", help="List your boards", parents=[common])
    board_list_p.set_defaults(func=board_list)

    board_add_p = board_verbs.add_parser("add", help="Create a board", parents=[common])
    board_add_p.add_argument("name", help="Board name")
    board_add_p.set_defaults(func=board_add)

    board_show_p = board_verbs.add_parser("show", help="Show a board's lists and cards", parents=[common])
    board_show_p.add_argument("id", help="Board ID")
    board_show_p.set_defaults(func=board_show)

    board_rm_p = board_verbs.add_parser("rm", help="Delete a board and everything on it", parents=[common])
    board_rm_p.add_argument("id", help="Board ID")
    board_rm_p.set_defaults(func=board_rm)

    # board with no verb = list
    board_p.set_defaults(func=board_list)

    # --- list ---
    list_p = nouns.add_parser("list", help="List operations", parents=[common])
    list_verbs = list_p.add_subparsers(dest="verb")

    list_add_p = list_verbs.add_parser("add", help="Append a list to a board", parents=[common])
    list_add_p.add_argument("board", help="Board ID")
    list_add_p.add_argument("title", help="List title")
    list_add_p.set_defaults(func=list_add)

    list_rename_p = list_verbs.add_parser("rename", help="Rename a list", parents=[common])
    list_rename_p.add_argument("board", help="Board ID")
    list_rename_p.add_argument("id", help="List ID")
    list_rename_p.add_argument("title", help="New title")
    list_rename_p.set_defaults(func=list_rename)

    list_move_p = list_verbs.add_parser("move", help="Move a list", parents=[common])
    list_move_p.add_argument("board", help="Board ID")
    list_move_p.add_argument("id", help="List ID")
    list_move_p.add_argument("--position", type=_position, required=True, help="New position (1-indexed)")
    list_move_p.set_defaults(func=list_move)

    list_rm_p = list_verbs.add_parser("rm", help="Delete a list and its cards", parents=[common])
    list_rm_p.add_argument("board", help="Board ID")
    list_rm_p.add_argument("id", help="List ID")
    list_rm_p.set_defaults(func=list_rm)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_add_p = card_verbs.add_parser("add", help="Append a card to a list", parents=[common])
    card_add_p.add_argument("board", help="Board ID")
    card_add_p.add_argument("list", help="List ID")
    card_add_p.add_argument("content", help="Card text")
    card_add_p.set_defaults(func=card_add)

    card_edit_p = card_verbs.add_parser("edit", help="Replace a card's text", parents=[common])
    card_edit_p.add_argument("board", help="Board ID")
    card_edit_p.add_argument("id", help="Card ID")
    card_edit_p.add_argument("content", help="New card text")
    card_edit_p.set_defaults(func=card_edit)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common])
    card_move_p.add_argument("board", help="Board ID")
    card_move_p.add_argument("id", help="Card ID")
    card_move_p.add_argument("--list", dest="list", required=True, help="Target list ID")
    card_move_p.add_argument("--position", type=_position, help="Position in list (1-indexed, default: end)")
    card_move_p.set_defaults(func=card_move)

    card_rm_p = card_verbs.add_parser("rm", help="Delete a card", parents=[common])
    card_rm_p.add_argument("board", help="Board ID")
    card_rm_p.add_argument("id", help="Card ID")
    card_rm_p.set_defaults(func=card_rm)

    # --- watch ---
    watch_p = nouns.add_parser("watch", help="Print a board whenever it changes", parents=[common])
    watch_p.add_argument("board", help="Board ID")
    watch_p.add_argument("--interval", type=float, help="Poll interval in seconds (default: trellis.poll-interval)")
    watch_p.add_argument("--limit", type=int, help="Stop after printing this many snapshots")
    watch_p.set_defaults(func=watch)

    return parser
