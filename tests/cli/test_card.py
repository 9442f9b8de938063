"""Tests for 'trellis card' commands."""

import json
from argparse import Namespace

import pytest

from trellis.cli.board import board_show
from trellis.cli.card import card_add, card_edit, card_move, card_rm


def test_card_add(initialized_repo, capsys, layout):
    args = Namespace(repo=str(initialized_repo), json=True, board="b1", list="todo", content="Third card")
    assert card_add(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["list"]["title"] == "Todo"
    assert layout()["todo"] == ["c1", "c2", data["id"]]


def test_card_add_unknown_list(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=True, board="b1", list="nope", content="x")
    with pytest.raises(SystemExit, match="1"):
        card_add(args)
    assert "List 'nope' not found" in json.loads(capsys.readouterr().err)["error"]


def test_card_add_empty(initialized_repo):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", list="todo", content="")
    with pytest.raises(SystemExit, match="1"):
        card_add(args)


def test_card_edit(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", id="c2", content="Edited")
    assert card_edit(args) == 0
    assert "Updated card c2" in capsys.readouterr().out

    board_show(Namespace(repo=str(initialized_repo), json=True, id="b1"))
    cards = json.loads(capsys.readouterr().out)["lists"][0]["cards"]
    assert [c["content"] for c in cards] == ["First card", "Edited"]


def test_card_edit_not_found(initialized_repo):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", id="nope", content="x")
    with pytest.raises(SystemExit, match="1"):
        card_edit(args)


def test_card_move_within_list(initialized_repo, capsys, layout):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", id="c2", list="todo", position=1)
    assert card_move(args) == 0
    assert layout()["todo"] == ["c2", "c1"]


def test_card_move_to_other_list(initialized_repo, capsys, layout):
    args = Namespace(repo=str(initialized_repo), json=True, board="b1", id="c1", list="doing", position=None)
    assert card_move(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["moved"] is True
    assert data["list"]["title"] == "Doing"
    assert layout() == {"todo": ["c2"], "doing": ["c1"], "done": []}


def test_card_move_already_in_place(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", id="c2", list="todo", position=None)
    assert card_move(args) == 0
    assert "already in place" in capsys.readouterr().out


def test_card_rm(initialized_repo, capsys, layout):
    args = Namespace(repo=str(initialized_repo), json=False, board="b1", id="c1")
    assert card_rm(args) == 0
    assert "Deleted card c1" in capsys.readouterr().out
    assert layout()["todo"] == ["c2"]
