"""
Hunt board arithmetic.
13 spaces in a line: 0 is Start, 6 is Overwhelming Darkness, 12 is Starvation.
"""

from kdm_tracker.engine import BOARD_SPACES, DARKNESS_SPACE, START_SPACE, STARVATION_SPACE
from kdm_tracker.engine.errors import BoundsError

FIXED_SPACES = (START_SPACE, DARKNESS_SPACE, STARVATION_SPACE)
LAST_SPACE = BOARD_SPACES - 1

EVENT_BASIC = "basic"
EVENT_MONSTER = "monster"
# Cycle order for a free space: none -> basic -> monster -> none
EVENT_CYCLE = (None, EVENT_BASIC, EVENT_MONSTER)

FLOWER_KNIGHT = "Flower Knight"


def check_position(position: int, label: str = "Position") -> int:
    """Return `position` if it is a board space, otherwise raise BoundsError."""
    if isinstance(position, bool) or not isinstance(position, int):
        raise BoundsError(f"{label} must be a whole number.", field=label.lower().replace(" ", "_"))
    if position < START_SPACE or position > LAST_SPACE:
        raise BoundsError(
            f"{label} must be between {START_SPACE} and {LAST_SPACE}.",
            field=label.lower().replace(" ", "_"),
        )
    return position


def clamp_position(position: int) -> int:
    return max(START_SPACE, min(LAST_SPACE, position))


def move_by(position: int, delta: int) -> int:
    """Relative move; the result is clamped onto the board."""
    return clamp_position(position + delta)


def positions_overlap(survivor_position: int, quarry_position: int) -> bool:
    return survivor_position == quarry_position


def token_placement(survivor_position: int, quarry_position: int) -> dict[str, str]:
    """
    Where each token sits inside its space.
    Sharing a space puts survivors top-left and the quarry bottom-right; otherwise both are centered.
    """
    if positions_overlap(survivor_position, quarry_position):
        return {"survivors": "top-left", "quarry": "bottom-right"}
    return {"survivors": "center", "quarry": "center"}


def darkness_label(quarry_name: str | None) -> str:
    if quarry_name == FLOWER_KNIGHT:
        return "The Forest Wants What it Wants"
    return "Overwhelming Darkness"


def space_label(position: int, quarry_name: str | None = None) -> str:
    check_position(position)
    if position == START_SPACE:
        return "Start"
    if position == DARKNESS_SPACE:
        return darkness_label(quarry_name)
    if position == STARVATION_SPACE:
        return "Starvation"
    return str(position)


def is_fixed_space(position: int) -> bool:
    return position in FIXED_SPACES


def cycle_space_event(hunt_board: dict[int, str], position: int) -> dict[int, str]:
    """
    Return a copy of `hunt_board` with the event on `position` advanced one step.
    Fixed spaces (Start, Darkness, Starvation) never hold events.
    """
    check_position(position)
    if is_fixed_space(position):
        raise BoundsError(
            f"Space {position} is a fixed space and cannot hold a hunt event.", field="position"
        )
    current = hunt_board.get(position)
    index = EVENT_CYCLE.index(current) if current in EVENT_CYCLE else 0
    next_event = EVENT_CYCLE[(index + 1) % len(EVENT_CYCLE)]
    board = dict(hunt_board)
    if next_event is None:
        board.pop(position, None)
    else:
        board[position] = next_event
    return board


def describe_board(
    survivor_position: int,
    quarry_position: int,
    hunt_board: dict[int, str] | None = None,
    quarry_name: str | None = None,
) -> list[dict]:
    """One entry per space for collaborators that draw the board."""
    hunt_board = hunt_board or {}
    return [
        {
            "index": pos,
            "label": space_label(pos, quarry_name),
            "fixed": is_fixed_space(pos),
            "event": hunt_board.get(pos),
            "survivors": pos == survivor_position,
            "quarry": pos == quarry_position,
        }
        for pos in range(BOARD_SPACES)
    ]
