"""Tests for CLI argument parsing."""

import pytest

from trellis.cli import build_parser
from trellis.cli.board import board_list
from trellis.cli.card import card_move
from trellis.cli.watch import watch


def test_bare_board_lists_boards():
    args = build_parser().parse_args(["board"])
    assert args.func is board_list


def test_card_move_args():
    args = build_parser().parse_args(["card", "move", "b1", "c1", "--list", "L2", "--position", "3", "--json"])
    assert args.func is card_move
    assert (args.board, args.id, args.list, args.position, args.json) == ("b1", "c1", "L2", 3, True)


def test_card_move_default_position():
    args = build_parser().parse_args(["card", "move", "b1", "c1", "--list", "L2"])
    assert args.position is None


def test_positions_start_at_one():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["list", "move", "b1", "L1", "--position", "0"])


def test_watch_args():
    args = build_parser().parse_args(["watch", "b1", "--interval", "0.5", "--limit", "2", "-v"])
    assert args.func is watch
    assert (args.interval, args.limit, args.verbose) == (0.5, 2, True)
