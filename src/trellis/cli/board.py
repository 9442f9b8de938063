"""Handlers for 'trellis board' commands."""

import asyncio

from trellis.cli._common import (
    error,
    fail_if_errored,
    format_tree,
    open_board_or_die,
    output_json,
    output_result,
    start_session,
    tree_to_dict,
)


def board_list(args) -> int:
    """List the user's boards."""
    return asyncio.run(_board_list(args))


async def _board_list(args) -> int:
    session = await start_session(args)
    boards = sorted(session.index.boards(), key=lambda b: (b.name, b.id))
    session.close()

    if args.json:
        output_json([{"id": b.id, "name": b.name, "owner": b.owner} for b in boards])
    elif not boards:
        print("no boards")
    else:
        for b in boards:
            print(f"{b.id}  {b.name}")
    return 0


def board_add(args) -> int:
    """Create a board."""
    return asyncio.run(_board_add(args))


async def _board_add(args) -> int:
    session = await start_session(args)
    task = session.add_board(args.name)
    if task is None:
        error("board name must not be empty", args.json)
    board_id = await task
    await session.drain()
    session.close()
    fail_if_errored(session, board_id, args.json)

    output_result({"id": board_id, "name": args.name}, f"Created board {board_id} ({args.name})", args.json)
    return 0


def board_show(args) -> int:
    """Print a board with its lists and cards."""
    return asyncio.run(_board_show(args))


async def _board_show(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.id, args.json)
    session.close()

    if args.json:
        output_json(tree_to_dict(tree))
    else:
        print(format_tree(tree))
    return 0


def board_rm(args) -> int:
    """Delete a board with all of its lists and cards."""
    return asyncio.run(_board_rm(args))


async def _board_rm(args) -> int:
    session = await start_session(args)
    if args.id not in session.index:
        error(f"Board '{args.id}' not found.", args.json)
    deleted = await session.remove_board(args.id)
    await session.drain()
    session.close()
    fail_if_errored(session, deleted, args.json)

    output_result({"id": args.id, "deleted": True}, f"Deleted board {args.id}", args.json)
    return 0
