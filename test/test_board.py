"""
Hunt board arithmetic and labels.
"""

import pytest

from kdm_tracker.engine.board import (
    FIXED_SPACES,
    check_position,
    clamp_position,
    cycle_space_event,
    describe_board,
    move_by,
    space_label,
    token_placement,
)
from kdm_tracker.engine.errors import BoundsError


def test_fixed_spaces():
    assert FIXED_SPACES == (0, 6, 12)


@pytest.mark.parametrize("position", [-1, 13, 100])
def test_check_position_rejects_off_board(position):
    with pytest.raises(BoundsError):
        check_position(position)


def test_check_position_rejects_non_integers():
    with pytest.raises(BoundsError):
        check_position(True)
    with pytest.raises(BoundsError):
        check_position("3")


def test_relative_moves_clamp():
    assert move_by(10, 5) == 12
    assert move_by(1, -4) == 0
    assert move_by(3, 2) == 5
    assert clamp_position(-7) == 0


def test_token_placement():
    assert token_placement(4, 4) == {"survivors": "top-left", "quarry": "bottom-right"}
    assert token_placement(0, 6) == {"survivors": "center", "quarry": "center"}


def test_space_labels():
    assert space_label(0) == "Start"
    assert space_label(6) == "Overwhelming Darkness"
    assert space_label(6, "Flower Knight") == "The Forest Wants What it Wants"
    assert space_label(12) == "Starvation"
    assert space_label(3) == "3"


def test_cycle_space_event():
    board = {}
    board = cycle_space_event(board, 3)
    assert board == {3: "basic"}
    board = cycle_space_event(board, 3)
    assert board == {3: "monster"}
    board = cycle_space_event(board, 3)
    assert board == {}


def test_cycle_space_event_leaves_input_alone():
    board = {2: "basic"}
    cycle_space_event(board, 2)
    assert board == {2: "basic"}


def test_cycle_fixed_space_rejected():
    with pytest.raises(BoundsError):
        cycle_space_event({}, 6)


def test_describe_board():
    spaces = describe_board(0, 6, {1: "basic"}, "White Lion")
    assert len(spaces) == 13
    assert spaces[0]["survivors"] and spaces[0]["label"] == "Start"
    assert spaces[6]["quarry"] and spaces[6]["fixed"]
    assert spaces[1]["event"] == "basic"
    assert spaces[2]["event"] is None
