"""
Hunt lifecycle: departure checks, board moves, resolution and the showdown hand-off.
"""

import pytest

from kdm_tracker.engine import hunt as hunt_machine
from kdm_tracker.engine.actions import (
    begin_hunt,
    move_hunt,
    resolve_hunt,
    set_hunt_event,
    start_showdown_from_hunt,
    update_hunt_monster,
    update_hunt_survivor,
)
from kdm_tracker.engine.errors import (
    BoundsError,
    EmptyNameError,
    EntityNotFoundError,
    IllegalTransitionError,
    PartySizeError,
    ScoutError,
)
from kdm_tracker.engine.reducer import apply_action
from kdm_tracker.engine.state import STATUS_ACTIVE, STATUS_RESOLVED, TURN_MONSTER

from helpers import MONSTER_DEFS, make_campaign


def start(campaign, survivor_ids=(1,), quarry="White Lion", level="1", scout_id=None):
    return hunt_machine.begin_hunt(
        campaign, 1, quarry, level, list(survivor_ids), scout_id, monster_defs=MONSTER_DEFS
    )


# ===== Departure =====

def test_flower_knight_single_survivor_starting_positions():
    hunt = start(make_campaign(), quarry="Flower Knight")
    assert hunt.id == 1
    assert (hunt.survivor_position, hunt.quarry_position) == (0, 6)
    assert hunt.status == STATUS_ACTIVE
    assert hunt.survivors == [1]
    assert [m.name for m in hunt.monsters] == ["Flower Knight"]
    assert hunt.monsters[0].movement == 7
    assert hunt.hunt_board[7] == "monster"


def test_unknown_quarry_starts_without_reference_data():
    hunt = start(make_campaign(), quarry="Gorm")
    assert hunt.monsters == []
    assert hunt.hunt_board == {}


def test_party_of_five_rejected():
    with pytest.raises(PartySizeError) as e:
        start(make_campaign(), survivor_ids=[1, 2, 3, 4, 5])
    assert e.value.message == "No more than four survivors can embark on a hunt."


def test_empty_party_rejected():
    with pytest.raises(PartySizeError):
        start(make_campaign(), survivor_ids=[])


def test_blank_quarry_rejected():
    with pytest.raises(EmptyNameError):
        start(make_campaign(), quarry=" ")


def test_unknown_settlement_rejected():
    with pytest.raises(EntityNotFoundError):
        hunt_machine.begin_hunt(make_campaign(), 9, "White Lion", "1", [1])


def test_scout_needs_a_scouting_settlement():
    with pytest.raises(ScoutError) as e:
        start(make_campaign(), survivor_ids=[1, 2], scout_id=3)
    assert e.value.message == "Lantern Hoard does not employ scouts."


def test_scout_cannot_be_in_party():
    with pytest.raises(ScoutError):
        start(make_campaign(uses_scouts=True), survivor_ids=[1, 2], scout_id=2)


def test_scout_gets_hunt_details():
    hunt = start(make_campaign(uses_scouts=True), survivor_ids=[1, 2, 3, 4], scout_id=5)
    assert hunt.scout == 5
    assert [d.survivor_id for d in hunt.survivor_details] == [1, 2, 3, 4, 5]


def test_dead_survivor_cannot_depart():
    campaign = make_campaign()
    campaign.survivors[0].dead = True
    with pytest.raises(IllegalTransitionError):
        start(campaign, survivor_ids=[1])


def test_skip_next_hunt_blocks_hunts_only():
    campaign = make_campaign()
    campaign.survivors[0].skip_next_hunt = True
    with pytest.raises(IllegalTransitionError):
        start(campaign, survivor_ids=[1])


def test_one_active_hunt_per_settlement():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    with pytest.raises(IllegalTransitionError):
        apply_action(campaign, begin_hunt(1, "White Lion", "1", [2]), MONSTER_DEFS)


# ===== Board moves =====

def test_survivors_walk_onto_quarry():
    hunt = start(make_campaign(), quarry="Flower Knight")
    move = hunt_machine.update_positions(hunt, 6, 6)
    assert move.overlap
    assert move.note == "Survivors moved."
    assert move.outcome == "encounter"
    assert move.hunt.status == STATUS_RESOLVED
    assert not move.hunt.ambush
    # the original hunt is untouched
    assert hunt.survivor_position == 0


def test_quarry_walks_onto_survivors():
    hunt = start(make_campaign())
    hunt = hunt_machine.update_positions(hunt, 3, 6).hunt
    move = hunt_machine.update_positions(hunt, 3, 3)
    assert move.note == "Quarry moved."
    assert move.outcome == "ambush"
    assert move.hunt.ambush


def test_move_without_overlap_keeps_hunting():
    move = hunt_machine.update_positions(start(make_campaign()), 2, 6)
    assert not move.overlap
    assert move.outcome is None
    assert move.hunt.status == STATUS_ACTIVE


def test_starvation_space():
    move = hunt_machine.update_positions(start(make_campaign()), 12, 6)
    assert move.outcome == "starvation"
    assert move.hunt.status == STATUS_RESOLVED


def test_space_rules_are_replaceable():
    rules = {4: lambda hunt: "scenario"}
    assert hunt_machine.update_positions(start(make_campaign()), 12, 6, rules).outcome is None
    assert hunt_machine.update_positions(start(make_campaign()), 4, 6, rules).outcome == "scenario"


def test_off_board_move_rejected():
    with pytest.raises(BoundsError):
        hunt_machine.update_positions(start(make_campaign()), 13, 6)
    with pytest.raises(BoundsError):
        hunt_machine.update_positions(start(make_campaign()), 0, -1)


# ===== Through the reducer =====

def test_begin_hunt_selects_it():
    campaign, events = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1, 2]), MONSTER_DEFS)
    assert campaign.selected_hunt_id == 1
    assert campaign.selected_settlement_id == 1
    assert [e.type for e in events] == ["hunt_started"]


def test_reducer_move_emits_note_and_resolution():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "Flower Knight", "1", [1]), MONSTER_DEFS)
    campaign, events = apply_action(campaign, move_hunt(1, 6, 6))
    assert [e.type for e in events] == ["hunt_positions_updated", "hunt_resolved"]
    assert events[0].message == "Survivors moved."
    assert events[0].payload["overlap"] is True
    assert campaign.get_hunt(1).outcome == "encounter"
    assert campaign.selected_hunt_id is None


def test_resolved_hunt_rejects_moves():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    campaign, _ = apply_action(campaign, resolve_hunt(1, "abandoned"))
    with pytest.raises(IllegalTransitionError):
        apply_action(campaign, move_hunt(1, 2, 6))


def test_missing_hunt():
    with pytest.raises(EntityNotFoundError):
        apply_action(make_campaign(), move_hunt(3, 2, 6))


def test_unknown_outcome_rejected():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    with pytest.raises(BoundsError):
        apply_action(campaign, resolve_hunt(1, "victory"))


def test_board_events():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "Gorm", "1", [1]))
    campaign, events = apply_action(campaign, set_hunt_event(1, 3, "monster"))
    assert campaign.get_hunt(1).hunt_board == {3: "monster"}
    assert events[0].payload == {"hunt_id": 1, "position": 3, "event": "monster"}
    campaign, _ = apply_action(campaign, set_hunt_event(1, 3, cycle=True))
    assert campaign.get_hunt(1).hunt_board == {}
    with pytest.raises(BoundsError):
        apply_action(campaign, set_hunt_event(1, 12, "basic"))


def test_hunt_survivor_tokens():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1, 2]), MONSTER_DEFS)
    campaign, _ = apply_action(campaign, update_hunt_survivor(1, 2, {"luck_tokens": -1, "notes": "Lost a lantern"}))
    details = campaign.get_hunt(1).survivor_details[1]
    assert details.luck_tokens == -1
    assert details.notes == "Lost a lantern"
    with pytest.raises(BoundsError):
        apply_action(campaign, update_hunt_survivor(1, 2, {"dead": True}))
    with pytest.raises(EntityNotFoundError):
        apply_action(campaign, update_hunt_survivor(1, 4, {"luck_tokens": 1}))


def test_hunt_monster_notes():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    campaign, events = apply_action(campaign, update_hunt_monster(1, 0, {"notes": "Missing an eye", "wounds": 1}))
    monster = campaign.get_hunt(1).monsters[0]
    assert monster.notes == "Missing an eye"
    assert monster.wounds == 1
    assert events[0].message == "The tales of this hunt are recorded for future generations."
    with pytest.raises(BoundsError):
        apply_action(campaign, update_hunt_monster(1, 0, {"wounds": -1}))


# ===== Showdown hand-off =====

def test_encounter_seeds_showdown():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "2", [1, 2]), MONSTER_DEFS)
    campaign, _ = apply_action(campaign, update_hunt_survivor(1, 1, {"strength_tokens": 1}))
    campaign, _ = apply_action(campaign, move_hunt(1, 6, 6))
    campaign, events = apply_action(campaign, start_showdown_from_hunt(1))

    showdown = campaign.get_showdown(1)
    assert showdown.monster_name == "White Lion"
    assert showdown.monster_level == "2"
    assert showdown.survivors == [1, 2]
    assert showdown.ambush == "none"
    assert showdown.turn.round == 1
    assert showdown.turn.current_turn == TURN_MONSTER
    assert showdown.survivor_details[0].strength_tokens == 1
    assert showdown.monsters[0].toughness == 10
    assert campaign.selected_showdown_id == 1
    assert events[0].payload["hunt_id"] == 1


def test_ambush_seeds_monster_round_zero():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    campaign, _ = apply_action(campaign, move_hunt(1, 4, 6))
    campaign, _ = apply_action(campaign, move_hunt(1, 4, 4))
    campaign, events = apply_action(campaign, start_showdown_from_hunt(1))
    showdown = campaign.get_showdown(1)
    assert showdown.ambush == "monster"
    assert showdown.turn.round == 0
    assert events[0].message == "The monster ambushes the survivors! The showdown begins."


def test_showdown_needs_a_met_quarry():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    with pytest.raises(IllegalTransitionError):
        apply_action(campaign, start_showdown_from_hunt(1))
    campaign, _ = apply_action(campaign, resolve_hunt(1, "abandoned"))
    with pytest.raises(IllegalTransitionError):
        apply_action(campaign, start_showdown_from_hunt(1))
