"""
Showdown turn machine.
Turns alternate between the monster and the survivors. The monster turn ends once the
AI card is drawn; the survivors turn ends once every survivor has used both movement
and activation (or the round is ended on purpose). Returning to the monster starts a new round.
Per-action game rules (range, hits, wounds) are left to the players.
"""

from copy import deepcopy

from kdm_tracker.engine.definitions import MonsterDefinition, get_monster_definition
from kdm_tracker.engine.errors import (
    BoundsError,
    EmptyNameError,
    EntityNotFoundError,
    IllegalTransitionError,
    TurnOrderError,
)
from kdm_tracker.engine.state import (
    AMBUSH_MONSTER,
    AMBUSH_NONE,
    AMBUSH_SURVIVORS,
    MONSTER_STAT_FIELDS,
    MONSTER_TYPE_QUARRY,
    SHOWDOWN_COUNT_FIELDS,
    STATUS_RESOLVED,
    SURVIVOR_TOKEN_FIELDS,
    TURN_MONSTER,
    TURN_SURVIVORS,
    Campaign,
    MonsterStats,
    MonsterTurnState,
    Showdown,
    ShowdownSurvivorDetails,
    ShowdownTurn,
    SurvivorTurnState,
)
from kdm_tracker.engine.utils import (
    apply_changes,
    check_party,
    next_showdown_id,
    require_idle_settlement,
    require_settlement,
)
from kdm_tracker.engine.validation import validate_showdown

OUTCOME_VICTORY = "victory"
OUTCOME_DEFEAT = "defeat"
OUTCOME_ABANDONED = "abandoned"
SHOWDOWN_OUTCOMES = (OUTCOME_VICTORY, OUTCOME_DEFEAT, OUTCOME_ABANDONED)

AMBUSH_TYPES = (AMBUSH_NONE, AMBUSH_SURVIVORS, AMBUSH_MONSTER)

SHOWDOWN_DETAIL_FIELDS = SURVIVOR_TOKEN_FIELDS + SHOWDOWN_COUNT_FIELDS + (
    "knocked_down",
    "priority_target",
    "notes",
)

MONSTER_EDITABLE_FIELDS = (
    MONSTER_STAT_FIELDS
    + tuple(f"{stat}_tokens" for stat in MONSTER_STAT_FIELDS)
    + ("wounds", "ai_deck_remaining", "knocked_down", "moods", "traits", "notes")
)


def initial_turn(survivor_ids: list[int], ambush: str = AMBUSH_NONE) -> ShowdownTurn:
    """
    Opening turn state.
    Without an ambush the monster acts first in round 1. An ambush adds a round 0
    in which only the ambushing side acts.
    """
    if ambush not in AMBUSH_TYPES:
        raise BoundsError(f"Unknown ambush type: {ambush}", field="ambush")
    return ShowdownTurn(
        current_turn=TURN_SURVIVORS if ambush == AMBUSH_SURVIVORS else TURN_MONSTER,
        monster_state=MonsterTurnState(ai_card_drawn=False),
        survivor_states=[SurvivorTurnState(survivor_id=sid) for sid in survivor_ids],
        round=1 if ambush == AMBUSH_NONE else 0,
    )


def _new_round(showdown: Showdown) -> None:
    turn = showdown.turn
    turn.current_turn = TURN_MONSTER
    turn.monster_state = MonsterTurnState(ai_card_drawn=False)
    turn.survivor_states = [SurvivorTurnState(survivor_id=sid) for sid in showdown.survivors]
    turn.round += 1


def _require_active(showdown: Showdown) -> None:
    if not showdown.is_active:
        raise IllegalTransitionError(
            f"Showdown {showdown.id} is already resolved.", field="status"
        )


def begin_showdown(
    campaign: Campaign,
    settlement_id: int,
    monster_name: str,
    monster_level: str,
    survivor_ids: list[int],
    scout_id: int | None = None,
    monster_type: str | None = None,
    ambush: str = AMBUSH_NONE,
    monster_defs: dict[str, MonsterDefinition] | None = None,
    showdown_id: int | None = None,
) -> Showdown:
    """
    Start a showdown directly (a nemesis encounter, or a quarry without a hunt).
    Raises the first violated rule; the campaign itself is not modified.
    """
    settlement = require_settlement(campaign, settlement_id)
    if not monster_name or not monster_name.strip():
        raise EmptyNameError("Monster name is required.", field="monster_name")
    level = str(monster_level)
    check_party(campaign, settlement, survivor_ids, scout_id, "showdown")
    require_idle_settlement(campaign, settlement_id)

    definition = get_monster_definition(monster_defs, monster_name)
    monsters: list[MonsterStats] = []
    if definition is not None:
        monster_type = monster_type or definition.monster_type
        if level in definition.levels:
            monsters = definition.instances_for(level)

    showdown = Showdown(
        id=showdown_id if showdown_id is not None else next_showdown_id(campaign),
        settlement_id=settlement_id,
        monster_name=monster_name,
        monster_level=level,
        monster_type=monster_type or MONSTER_TYPE_QUARRY,
        survivors=list(survivor_ids),
        scout=scout_id,
        ambush=ambush,
        turn=initial_turn(survivor_ids, ambush),
        survivor_details=[
            ShowdownSurvivorDetails(survivor_id=sid)
            for sid in list(survivor_ids) + ([scout_id] if scout_id is not None else [])
        ],
        monsters=monsters,
    )
    result = validate_showdown(showdown)
    if not result.valid:
        raise result.error
    return showdown


def draw_ai_card(showdown: Showdown, monster_index: int = 0) -> Showdown:
    """Mark the monster's AI card as drawn for this turn. One card per monster turn."""
    _require_active(showdown)
    if showdown.turn.current_turn != TURN_MONSTER:
        raise TurnOrderError("AI cards are only drawn during the monster turn.", field="turn")
    if showdown.turn.monster_state.ai_card_drawn:
        raise TurnOrderError("The AI card has already been drawn this turn.", field="turn")
    updated = deepcopy(showdown)
    updated.turn.monster_state.ai_card_drawn = True
    if 0 <= monster_index < len(updated.monsters):
        monster = updated.monsters[monster_index]
        if monster.ai_deck_remaining > 0:
            monster.ai_deck_remaining -= 1
    return updated


def mark_survivor_action(
    showdown: Showdown,
    survivor_id: int,
    activation_used: bool | None = None,
    movement_used: bool | None = None,
) -> Showdown:
    """Record movement and/or activation use for one survivor. Only during the survivors turn."""
    _require_active(showdown)
    if showdown.turn.current_turn != TURN_SURVIVORS:
        raise TurnOrderError("Survivors only act during the survivors turn.", field="turn")
    if survivor_id not in showdown.survivors:
        raise EntityNotFoundError(
            f"Survivor {survivor_id} is not part of this showdown.", field="survivor_id"
        )
    updated = deepcopy(showdown)
    state = next((s for s in updated.turn.survivor_states if s.survivor_id == survivor_id), None)
    if state is None:
        state = SurvivorTurnState(survivor_id=survivor_id)
        updated.turn.survivor_states.append(state)
    if activation_used is not None:
        state.activation_used = bool(activation_used)
    if movement_used is not None:
        state.movement_used = bool(movement_used)
    return updated


def survivors_done(showdown: Showdown) -> bool:
    """True once every party member has used both movement and activation."""
    states = {s.survivor_id: s for s in showdown.turn.survivor_states}
    return all(sid in states and states[sid].consumed for sid in showdown.survivors)


def next_turn(showdown: Showdown, force: bool = False) -> Showdown:
    """
    Pass the turn to the other side.
    monster -> survivors needs the AI card drawn. survivors -> monster needs every survivor
    done unless `force` ends the round early; it then starts a new round. After a monster
    ambush round the monster opens round 1.
    """
    _require_active(showdown)
    turn = showdown.turn
    updated = deepcopy(showdown)
    if turn.current_turn == TURN_MONSTER:
        if not turn.monster_state.ai_card_drawn:
            raise TurnOrderError(
                "The monster must draw its AI card before the survivors act.", field="turn"
            )
        if turn.round == 0 and showdown.ambush == AMBUSH_MONSTER:
            _new_round(updated)
        else:
            updated.turn.current_turn = TURN_SURVIVORS
        return updated

    if not force and not survivors_done(showdown):
        raise TurnOrderError(
            "Every survivor must use movement and activation before the monster acts.",
            field="turn",
        )
    _new_round(updated)
    return updated


def end_showdown(showdown: Showdown, outcome: str = OUTCOME_VICTORY) -> Showdown:
    _require_active(showdown)
    if outcome not in SHOWDOWN_OUTCOMES:
        raise BoundsError(f"Unknown showdown outcome: {outcome}", field="outcome")
    updated = deepcopy(showdown)
    updated.status = STATUS_RESOLVED
    updated.outcome = outcome
    return updated


def update_showdown_survivor_details(showdown: Showdown, survivor_id: int, changes: dict) -> Showdown:
    """Change tokens, counters or notes for one survivor (or the scout)."""
    _require_active(showdown)
    updated = deepcopy(showdown)
    for i, details in enumerate(updated.survivor_details):
        if details.survivor_id == survivor_id:
            updated.survivor_details[i] = apply_changes(details, changes, SHOWDOWN_DETAIL_FIELDS)
            break
    else:
        raise EntityNotFoundError(
            f"Survivor {survivor_id} is not part of this showdown.", field="survivor_id"
        )
    result = validate_showdown(updated)
    if not result.valid:
        raise result.error
    return updated


def update_monster(showdown: Showdown, monster_index: int, changes: dict) -> Showdown:
    _require_active(showdown)
    if not 0 <= monster_index < len(showdown.monsters):
        raise EntityNotFoundError(f"No monster at index {monster_index}.", field="monster_index")
    updated = deepcopy(showdown)
    updated.monsters[monster_index] = apply_changes(
        updated.monsters[monster_index], changes, MONSTER_EDITABLE_FIELDS
    )
    result = validate_showdown(updated)
    if not result.valid:
        raise result.error
    return updated
