"""
Action definitions for hunts and showdowns.
Actions are plain, serializable instructions from the board and form collaborators.
The reducer decides whether they are legal and applies them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Action:
    """Base action class. All actions have a type and payload."""
    type: str  # e.g., "begin_hunt", "move_hunt", "draw_ai_card", "next_turn"
    payload: dict = field(default_factory=dict)  # Action-specific data

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Action":
        return cls(type=data["type"], payload=dict(data.get("payload") or {}))


# ===== Hunt =====

def begin_hunt(
    settlement_id: int,
    quarry_name: str,
    quarry_level: str,
    survivor_ids: list[int],
    scout_id: int | None = None,
) -> Action:
    """
    Start a hunt for a settlement.
    Example: begin_hunt(1, "Flower Knight", "1", [3])
    """
    return Action(
        type="begin_hunt",
        payload={
            "settlement_id": settlement_id,
            "quarry_name": quarry_name,
            "quarry_level": str(quarry_level),
            "survivor_ids": list(survivor_ids),
            "scout_id": scout_id,
        },
    )


def move_hunt(hunt_id: int, survivor_position: int, quarry_position: int) -> Action:
    """
    Put both tokens on absolute board spaces (what a drag on the board produces).
    Example: move_hunt(1, 6, 6) walks the survivors onto the quarry.
    """
    return Action(
        type="move_hunt",
        payload={
            "hunt_id": hunt_id,
            "survivor_position": survivor_position,
            "quarry_position": quarry_position,
        },
    )


def set_hunt_event(
    hunt_id: int,
    position: int,
    event: str | None = None,
    cycle: bool = False,  # advance none -> basic -> monster -> none instead of setting `event`
) -> Action:
    return Action(
        type="set_hunt_event",
        payload={"hunt_id": hunt_id, "position": position, "event": event, "cycle": cycle},
    )


def update_hunt_survivor(hunt_id: int, survivor_id: int, changes: dict[str, Any]) -> Action:
    """Example: update_hunt_survivor(1, 3, {"insanity_tokens": 1})"""
    return Action(
        type="update_hunt_survivor",
        payload={"hunt_id": hunt_id, "survivor_id": survivor_id, "changes": dict(changes)},
    )


def update_hunt_monster(hunt_id: int, monster_index: int, changes: dict[str, Any]) -> Action:
    return Action(
        type="update_hunt_monster",
        payload={"hunt_id": hunt_id, "monster_index": monster_index, "changes": dict(changes)},
    )


def resolve_hunt(hunt_id: int, outcome: str) -> Action:
    """End a hunt explicitly ("abandoned", "scenario", ...)."""
    return Action(type="resolve_hunt", payload={"hunt_id": hunt_id, "outcome": outcome})


def start_showdown_from_hunt(hunt_id: int, ambush: str | None = None) -> Action:
    """
    Turn a hunt that met its quarry into a showdown.
    ambush=None keeps what the hunt decided (quarry ambush -> monster opens).
    """
    return Action(type="start_showdown_from_hunt", payload={"hunt_id": hunt_id, "ambush": ambush})


# ===== Showdown =====

def begin_showdown(
    settlement_id: int,
    monster_name: str,
    monster_level: str,
    survivor_ids: list[int],
    scout_id: int | None = None,
    monster_type: str | None = None,
    ambush: str = "none",
) -> Action:
    return Action(
        type="begin_showdown",
        payload={
            "settlement_id": settlement_id,
            "monster_name": monster_name,
            "monster_level": str(monster_level),
            "survivor_ids": list(survivor_ids),
            "scout_id": scout_id,
            "monster_type": monster_type,
            "ambush": ambush,
        },
    )


def draw_ai_card(showdown_id: int, monster_index: int = 0) -> Action:
    return Action(
        type="draw_ai_card",
        payload={"showdown_id": showdown_id, "monster_index": monster_index},
    )


def mark_survivor_action(
    showdown_id: int,
    survivor_id: int,
    activation_used: bool | None = None,
    movement_used: bool | None = None,
) -> Action:
    """
    Record movement/activation use. None leaves that flag unchanged.
    Example: mark_survivor_action(2, 3, activation_used=True, movement_used=True)
    """
    return Action(
        type="mark_survivor_action",
        payload={
            "showdown_id": showdown_id,
            "survivor_id": survivor_id,
            "activation_used": activation_used,
            "movement_used": movement_used,
        },
    )


def next_turn(showdown_id: int, force: bool = False) -> Action:
    """Pass the turn. force=True ends the survivors turn even if someone has not acted."""
    return Action(type="next_turn", payload={"showdown_id": showdown_id, "force": force})


def update_showdown_survivor(showdown_id: int, survivor_id: int, changes: dict[str, Any]) -> Action:
    return Action(
        type="update_showdown_survivor",
        payload={"showdown_id": showdown_id, "survivor_id": survivor_id, "changes": dict(changes)},
    )


def update_showdown_monster(showdown_id: int, monster_index: int, changes: dict[str, Any]) -> Action:
    return Action(
        type="update_showdown_monster",
        payload={"showdown_id": showdown_id, "monster_index": monster_index, "changes": dict(changes)},
    )


def end_showdown(showdown_id: int, outcome: str = "victory") -> Action:
    return Action(type="end_showdown", payload={"showdown_id": showdown_id, "outcome": outcome})
