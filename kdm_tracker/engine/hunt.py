"""
Hunt board machine.
A hunt moves from not started to active (begin_hunt) to resolved. While active the survivors
and the quarry move along the 13-space board; meeting on one space, or landing on a space
with a rule (Starvation by default), resolves the hunt.
"""

from copy import deepcopy
from dataclasses import dataclass
from typing import Callable

from kdm_tracker.engine import MONSTER_LEVELS, STARVATION_SPACE
from kdm_tracker.engine.board import EVENT_CYCLE, check_position, cycle_space_event, is_fixed_space, positions_overlap
from kdm_tracker.engine.definitions import MonsterDefinition, get_monster_definition
from kdm_tracker.engine.errors import BoundsError, EmptyNameError, EntityNotFoundError, IllegalTransitionError
from kdm_tracker.engine.showdown import MONSTER_EDITABLE_FIELDS, initial_turn
from kdm_tracker.engine.state import (
    AMBUSH_MONSTER,
    AMBUSH_NONE,
    MONSTER_TYPE_QUARRY,
    STATUS_RESOLVED,
    SURVIVOR_TOKEN_FIELDS,
    Campaign,
    Hunt,
    HuntSurvivorDetails,
    MonsterStats,
    Showdown,
    ShowdownSurvivorDetails,
)
from kdm_tracker.engine.utils import (
    apply_changes,
    check_party,
    next_hunt_id,
    require_idle_settlement,
    require_settlement,
)
from kdm_tracker.engine.validation import validate_hunt

OUTCOME_ENCOUNTER = "encounter"
OUTCOME_AMBUSH = "ambush"
OUTCOME_STARVATION = "starvation"
OUTCOME_SCENARIO = "scenario"
OUTCOME_ABANDONED = "abandoned"
HUNT_OUTCOMES = (
    OUTCOME_ENCOUNTER,
    OUTCOME_AMBUSH,
    OUTCOME_STARVATION,
    OUTCOME_SCENARIO,
    OUTCOME_ABANDONED,
)
# Outcomes that lead straight into a showdown
SHOWDOWN_OUTCOMES = (OUTCOME_ENCOUNTER, OUTCOME_AMBUSH)

SURVIVORS_MOVED = "Survivors moved."
QUARRY_MOVED = "Quarry moved."

# A space rule looks at the hunt after a move and returns an outcome, or None to keep hunting
SpaceRule = Callable[[Hunt], str | None]

DEFAULT_SPACE_RULES: dict[int, SpaceRule] = {
    STARVATION_SPACE: lambda hunt: OUTCOME_STARVATION,
}

HUNT_DETAIL_FIELDS = SURVIVOR_TOKEN_FIELDS + ("notes",)


@dataclass
class HuntMove:
    """Result of a position update."""
    hunt: Hunt
    note: str
    overlap: bool
    outcome: str | None = None


def _require_active(hunt: Hunt) -> None:
    if not hunt.is_active:
        raise IllegalTransitionError(f"Hunt {hunt.id} is already resolved.", field="status")


def _raise_if_invalid(hunt: Hunt) -> None:
    result = validate_hunt(hunt)
    if not result.valid:
        raise result.error


def begin_hunt(
    campaign: Campaign,
    settlement_id: int,
    quarry_name: str,
    quarry_level: str,
    survivor_ids: list[int],
    scout_id: int | None = None,
    monster_defs: dict[str, MonsterDefinition] | None = None,
    hunt_id: int | None = None,
) -> Hunt:
    """
    Start a hunt for `settlement_id`.
    Survivors start on space 0 and the quarry on space 6. Monster stat blocks and the
    board's event spaces come from the quarry's reference data when it is known.
    Raises the first violated rule; the campaign itself is not modified.
    """
    settlement = require_settlement(campaign, settlement_id)
    if not quarry_name or not quarry_name.strip():
        raise EmptyNameError("The quarry name cannot be empty for a hunt.", field="quarry_name")
    level = str(quarry_level)
    if level not in MONSTER_LEVELS:
        raise BoundsError("Quarry level must be 1, 2, 3 or 4.", field="quarry_level")
    check_party(campaign, settlement, survivor_ids, scout_id, "hunt")
    require_idle_settlement(campaign, settlement_id)

    definition = get_monster_definition(monster_defs, quarry_name)
    monsters: list[MonsterStats] = []
    hunt_board: dict[int, str] = {}
    if definition is not None:
        if level in definition.levels:
            monsters = definition.instances_for(level)
        hunt_board = dict(definition.hunt_board)

    members = list(survivor_ids) + ([scout_id] if scout_id is not None else [])
    hunt = Hunt(
        id=hunt_id if hunt_id is not None else next_hunt_id(campaign),
        settlement_id=settlement_id,
        quarry_name=quarry_name,
        quarry_level=level,
        survivors=list(survivor_ids),
        scout=scout_id,
        hunt_board=hunt_board,
        survivor_details=[HuntSurvivorDetails(survivor_id=sid) for sid in members],
        monsters=monsters,
    )
    _raise_if_invalid(hunt)
    return hunt


def update_positions(
    hunt: Hunt,
    survivor_position: int,
    quarry_position: int,
    space_rules: dict[int, SpaceRule] | None = None,
) -> HuntMove:
    """
    Move the survivors and/or the quarry to absolute board spaces.

    The note says which side moved: "Survivors moved." when the survivor position changed,
    otherwise "Quarry moved.". When both tokens share a space the hunt resolves: an
    encounter if the survivors walked onto the quarry, an ambush if the quarry walked onto
    them. Otherwise the rule for the survivors' new space (if any) may resolve it.
    """
    _require_active(hunt)
    check_position(survivor_position, "Survivor position")
    check_position(quarry_position, "Quarry position")

    survivors_moved = survivor_position != hunt.survivor_position
    updated = deepcopy(hunt)
    updated.survivor_position = survivor_position
    updated.quarry_position = quarry_position

    overlap = positions_overlap(survivor_position, quarry_position)
    outcome = None
    if overlap:
        if survivors_moved:
            outcome = OUTCOME_ENCOUNTER
        else:
            outcome = OUTCOME_AMBUSH
            updated.ambush = True
    elif survivors_moved:
        rules = DEFAULT_SPACE_RULES if space_rules is None else space_rules
        rule = rules.get(survivor_position)
        if rule is not None:
            outcome = rule(updated)

    if outcome is not None:
        if outcome not in HUNT_OUTCOMES:
            raise BoundsError(f"Unknown hunt outcome: {outcome}", field="outcome")
        updated.status = STATUS_RESOLVED
        updated.outcome = outcome

    return HuntMove(
        hunt=updated,
        note=SURVIVORS_MOVED if survivors_moved else QUARRY_MOVED,
        overlap=overlap,
        outcome=outcome,
    )


def resolve_hunt(hunt: Hunt, outcome: str) -> Hunt:
    """End the hunt explicitly, e.g. `abandoned` when the party returns home."""
    _require_active(hunt)
    if outcome not in HUNT_OUTCOMES:
        raise BoundsError(f"Unknown hunt outcome: {outcome}", field="outcome")
    updated = deepcopy(hunt)
    updated.status = STATUS_RESOLVED
    updated.outcome = outcome
    if outcome == OUTCOME_AMBUSH:
        updated.ambush = True
    return updated


def seed_showdown(hunt: Hunt, showdown_id: int, ambush: str | None = None) -> Showdown:
    """
    Build the showdown that follows a hunt.
    The party, scout, hunt tokens and monster stat blocks carry over; a quarry ambush
    gives the monster the opening round unless `ambush` says otherwise.
    """
    if hunt.is_active or hunt.outcome not in SHOWDOWN_OUTCOMES:
        raise IllegalTransitionError(
            "Only a hunt that ended by meeting its quarry can start a showdown.", field="outcome"
        )
    if ambush is None:
        ambush = AMBUSH_MONSTER if hunt.ambush else AMBUSH_NONE
    details = []
    for hunt_details in hunt.survivor_details:
        tokens = {name: getattr(hunt_details, name) for name in SURVIVOR_TOKEN_FIELDS}
        details.append(ShowdownSurvivorDetails(
            survivor_id=hunt_details.survivor_id, notes=hunt_details.notes, **tokens
        ))
    return Showdown(
        id=showdown_id,
        settlement_id=hunt.settlement_id,
        monster_name=hunt.quarry_name,
        monster_level=hunt.quarry_level,
        monster_type=MONSTER_TYPE_QUARRY,
        survivors=list(hunt.survivors),
        scout=hunt.scout,
        ambush=ambush,
        turn=initial_turn(hunt.survivors, ambush),
        survivor_details=details,
        monsters=deepcopy(hunt.monsters),
    )


def update_hunt_survivor_details(hunt: Hunt, survivor_id: int, changes: dict) -> Hunt:
    """Change token counters or notes for one party member (or the scout)."""
    _require_active(hunt)
    updated = deepcopy(hunt)
    for i, details in enumerate(updated.survivor_details):
        if details.survivor_id == survivor_id:
            updated.survivor_details[i] = apply_changes(details, changes, HUNT_DETAIL_FIELDS)
            break
    else:
        raise EntityNotFoundError(
            f"Survivor {survivor_id} is not part of this hunt.", field="survivor_id"
        )
    _raise_if_invalid(updated)
    return updated


def set_board_event(hunt: Hunt, position: int, event: str | None = None, cycle: bool = False) -> Hunt:
    """
    Place (or clear, with None) a hunt event on a free board space.
    With `cycle=True` the space advances none -> basic -> monster -> none instead.
    """
    _require_active(hunt)
    updated = deepcopy(hunt)
    if cycle:
        updated.hunt_board = cycle_space_event(hunt.hunt_board, position)
        return updated
    check_position(position)
    if is_fixed_space(position):
        raise BoundsError(
            f"Space {position} is a fixed space and cannot hold a hunt event.", field="position"
        )
    if event not in EVENT_CYCLE:
        raise BoundsError(f"Unknown hunt event: {event}", field="event")
    if event is None:
        updated.hunt_board.pop(position, None)
    else:
        updated.hunt_board[position] = event
    return updated


def update_hunt_monster(hunt: Hunt, monster_index: int, changes: dict) -> Hunt:
    """Change tokens, wounds, traits or notes of the hunted monster before the showdown."""
    _require_active(hunt)
    if not 0 <= monster_index < len(hunt.monsters):
        raise EntityNotFoundError(f"No monster at index {monster_index}.", field="monster_index")
    updated = deepcopy(hunt)
    updated.monsters[monster_index] = apply_changes(
        updated.monsters[monster_index], changes, MONSTER_EDITABLE_FIELDS
    )
    _raise_if_invalid(updated)
    return updated
