"""Tests for 'trellis watch'."""

import json
from argparse import Namespace

import pytest

from trellis.cli.watch import watch


def test_watch_prints_initial_snapshot(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=True, board="b1", interval=0.05, limit=1)
    assert watch(args) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "b1"
    assert len(data["lists"]) == 3


def test_watch_unknown_board(initialized_repo):
    args = Namespace(repo=str(initialized_repo), json=False, board="nope", interval=0.05, limit=1)
    with pytest.raises(SystemExit, match="1"):
        watch(args)
