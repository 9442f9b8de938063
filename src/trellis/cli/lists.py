"""Handlers for 'trellis list' commands."""

import asyncio

from trellis.cli._common import (
    error,
    fail_if_errored,
    find_list,
    open_board_or_die,
    output_result,
    start_session,
)


def list_add(args) -> int:
    """Append a list to a board."""
    return asyncio.run(_list_add(args))


async def _list_add(args) -> int:
    session = await start_session(args)
    await open_board_or_die(session, args.board, args.json)
    task = session.add_list(args.title)
    if task is None:
        error("list title must not be empty", args.json)
    list_id = await task
    await session.drain()
    session.close()
    fail_if_errored(session, list_id, args.json)

    output_result(
        {"id": list_id, "board": args.board, "title": args.title},
        f"Created list {list_id} ({args.title})",
        args.json,
    )
    return 0


def list_rename(args) -> int:
    """Rename a list."""
    return asyncio.run(_list_rename(args))


async def _list_rename(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_list(tree, args.id, args.json)
    task = session.rename_list(args.id, args.title)
    if task is None:
        error("list title must not be empty", args.json)
    renamed = await task
    await session.drain()
    session.close()
    fail_if_errored(session, renamed, args.json)

    output_result({"id": args.id, "title": args.title}, f"Renamed list {args.id} to {args.title}", args.json)
    return 0


def list_move(args) -> int:
    """Move a list to a new position (1-indexed)."""
    return asyncio.run(_list_move(args))


async def _list_move(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_list(tree, args.id, args.json)
    ids = [lt.list.id for lt in tree.lists]
    task = session.move_list(args.id, args.position - 1)
    if task is None:
        session.close()
        text = f"List {args.id} already at position {ids.index(args.id) + 1}"
        output_result({"id": args.id, "moved": False}, text, args.json)
        return 0

    moved = await task
    await session.drain()
    session.close()
    fail_if_errored(session, moved, args.json)

    output_result({"id": args.id, "moved": True}, f"Moved list {args.id} to position {args.position}", args.json)
    return 0


def list_rm(args) -> int:
    """Delete a list and its cards."""
    return asyncio.run(_list_rm(args))


async def _list_rm(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_list(tree, args.id, args.json)
    deleted = await session.remove_list(args.id)
    await session.drain()
    session.close()
    fail_if_errored(session, deleted, args.json)

    output_result({"id": args.id, "deleted": True}, f"Deleted list {args.id}", args.json)
    return 0
