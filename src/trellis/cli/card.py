"""Handlers for 'trellis card' commands."""

import asyncio

from trellis.cli._common import (
    error,
    fail_if_errored,
    find_card,
    find_list,
    open_board_or_die,
    output_result,
    start_session,
)


def card_add(args) -> int:
    """Append a card to a list."""
    return asyncio.run(_card_add(args))


async def _card_add(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    target = find_list(tree, args.list, args.json)
    task = session.add_card(args.list, args.content)
    if task is None:
        error("card content must not be empty", args.json)
    card_id = await task
    await session.drain()
    session.close()
    fail_if_errored(session, card_id, args.json)

    output_result(
        {"id": card_id, "list": {"id": args.list, "title": target.list.title}, "content": args.content},
        f"Created card {card_id} in {target.list.title}",
        args.json,
    )
    return 0


def card_edit(args) -> int:
    """Replace a card's content."""
    return asyncio.run(_card_edit(args))


async def _card_edit(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_card(tree, args.id, args.json)
    task = session.edit_card(args.id, args.content)
    if task is None:
        error("card content must not be empty", args.json)
    edited = await task
    await session.drain()
    session.close()
    fail_if_errored(session, edited, args.json)

    output_result({"id": args.id, "content": args.content}, f"Updated card {args.id}", args.json)
    return 0


def card_move(args) -> int:
    """Move a card within its list or to another list."""
    return asyncio.run(_card_move(args))


async def _card_move(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_card(tree, args.id, args.json)
    target = find_list(tree, args.list, args.json)

    index = args.position - 1 if args.position is not None else len(target.cards)
    task = session.move_card(args.id, args.list, index)
    if task is None:
        session.close()
        output_result({"id": args.id, "moved": False}, f"Card {args.id} already in place", args.json)
        return 0

    moved = await task
    await session.drain()
    session.close()
    fail_if_errored(session, moved, args.json)

    output_result(
        {"id": args.id, "moved": True, "list": {"id": args.list, "title": target.list.title}},
        f"Moved card {args.id} to {target.list.title}",
        args.json,
    )
    return 0


def card_rm(args) -> int:
    """Delete a card."""
    return asyncio.run(_card_rm(args))


async def _card_rm(args) -> int:
    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    find_card(tree, args.id, args.json)
    deleted = await session.remove_card(args.id)
    await session.drain()
    session.close()
    fail_if_errored(session, deleted, args.json)

    output_result({"id": args.id, "deleted": True}, f"Deleted card {args.id}", args.json)
    return 0
