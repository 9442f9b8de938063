"""Shared helpers for CLI command handlers."""

import json
import sys
from pathlib import Path

from trellis.git import is_git_repo, read_config
from trellis.model.records import BoardTree
from trellis.session import BoardSession
from trellis.store.gitstore import GitStore


def open_store_or_die(repo: str, json_mode: bool) -> tuple[GitStore, dict]:
    """Open the git-backed store at repo. Exit 1 with message if it isn't a repo."""
    repo_path = Path(repo).resolve()
    if not is_git_repo(repo_path):
        error(f"{repo_path} is not a git repository (run 'trellis init')", json_mode)
    config = read_config(repo_path)
    return GitStore(repo_path, branch=config["branch"]), config


async def start_session(args) -> BoardSession:
    """Open the store and start a session for the configured user."""
    store, config = open_store_or_die(args.repo, args.json)
    session = BoardSession.from_config(store, config)
    if not await session.start():
        error(session.status.error or "could not start session", args.json)
    return session


async def open_board_or_die(session: BoardSession, board_id: str, json_mode: bool) -> BoardTree:
    """Open a board and return its snapshot. Exit 1 listing boards if not found."""
    await session.open_board(board_id)
    tree = session.hierarchy.snapshot()
    if tree is not None:
        return tree
    available = [f"  {b.id}  {b.name}" for b in session.index.boards()]
    msg = f"Board '{board_id}' not found."
    if available:
        msg += " Available:\n" + "\n".join(available)
    error(msg, json_mode)


def find_list(tree: BoardTree, list_id: str, json_mode: bool):
    """Lookup a list on an open board. Exit 1 listing available lists if not found."""
    found = tree.find_list(list_id)
    if found is not None:
        return found
    available = [f"  {lt.list.id}  {lt.list.title}" for lt in tree.lists]
    msg = f"List '{list_id}' not found. Available:\n" + "\n".join(available)
    error(msg, json_mode)


def find_card(tree: BoardTree, card_id: str, json_mode: bool):
    """Lookup a card on an open board. Exit 1 if not found."""
    for lt in tree.lists:
        for card in lt.cards:
            if card.id == card_id:
                return card
    error(f"Card '{card_id}' not found.", json_mode)


def fail_if_errored(session: BoardSession, result, json_mode: bool) -> None:
    """Exit 1 with the recorded failure when a background write came back empty."""
    if result is None or result is False:
        error(session.status.error or "operation failed", json_mode)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def tree_to_dict(tree: BoardTree) -> dict:
    """Board snapshot as plain JSON-able data."""
    return {
        "id": tree.board.id,
        "name": tree.board.name,
        "created_at": tree.board.created_at.isoformat() if tree.board.created_at else None,
        "lists": [
            {
                "id": lt.list.id,
                "title": lt.list.title,
                "order": lt.list.order,
                "cards": [{"id": c.id, "content": c.content, "order": c.order} for c in lt.cards],
            }
            for lt in tree.lists
        ],
    }


def format_tree(tree: BoardTree) -> str:
    """Board snapshot as indented text, lists and cards in rank order."""
    lines = [f"{tree.board.name}  ({tree.board.id})"]
    for lt in tree.lists:
        cards = "card" if len(lt.cards) == 1 else "cards"
        lines.append(f"  {lt.list.order}  {lt.list.title:<16} {len(lt.cards)} {cards}  ({lt.list.id})")
        for card in lt.cards:
            lines.append(f"      {card.order}  {card.content}  ({card.id})")
    return "\n".join(lines)
