"""Handler for 'trellis watch'."""

import asyncio
import logging
from pathlib import Path

from trellis.cli._common import format_tree, open_board_or_die, output_json, start_session, tree_to_dict
from trellis.git import read_config

logger = logging.getLogger(__name__)


def watch(args) -> int:
    """Print a board, then print it again every time the store changes it."""
    try:
        return asyncio.run(_watch(args))
    except KeyboardInterrupt:
        logger.info("stopped")
        return 0


def _show(tree, json_mode: bool) -> None:
    if json_mode:
        output_json(tree_to_dict(tree))
    else:
        print(format_tree(tree), flush=True)


async def _watch(args) -> int:
    interval = args.interval
    if interval is None:
        interval = read_config(Path(args.repo).resolve())["poll_interval"]

    session = await start_session(args)
    tree = await open_board_or_die(session, args.board, args.json)
    _show(tree, args.json)
    shown = 1

    changed = asyncio.Event()
    session.hierarchy.watch("lists", lambda *_: changed.set())
    session.hierarchy.watch("name", lambda *_: changed.set())
    session.hierarchy.watch("id", lambda *_: changed.set())
    poller = asyncio.create_task(session.store.watch(interval))

    try:
        while args.limit is None or shown < args.limit:
            await changed.wait()
            changed.clear()
            await session.sync.settle()
            tree = session.hierarchy.snapshot()
            if tree is None:
                print(f"Board {args.board} was deleted")
                break
            _show(tree, args.json)
            shown += 1
    finally:
        poller.cancel()
        session.close()
    return 0
