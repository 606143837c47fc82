"""
Read-only helpers for collaborators.
"""

from kdm_tracker.engine.actions import begin_hunt, draw_ai_card
from kdm_tracker.engine.errors import PartySizeError
from kdm_tracker.engine.queries import (
    get_available_action_types,
    get_available_scouts,
    get_available_survivors,
    get_hunt_board,
    get_selected_settlement,
    normalize_selection,
    validate_action,
)
from kdm_tracker.engine.reducer import apply_action

from helpers import MONSTER_DEFS, make_campaign


def test_normalize_selection_drops_dangling_ids():
    campaign = make_campaign()
    campaign.selected_survivor_id = 3
    campaign.selected_hunt_id = 9
    normalized = normalize_selection(campaign)
    assert normalized.selected_survivor_id == 3
    assert normalized.selected_hunt_id is None
    assert campaign.selected_hunt_id == 9
    assert get_selected_settlement(normalized).name == "Lantern Hoard"


def test_available_survivors_skip_the_fallen():
    campaign = make_campaign()
    campaign.survivors[0].dead = True
    campaign.survivors[1].retired = True
    campaign.survivors[2].skip_next_hunt = True
    assert [s.id for s in get_available_survivors(campaign, 1)] == [4, 5]
    assert [s.id for s in get_available_survivors(campaign, 1, "showdown")] == [3, 4, 5]


def test_available_scouts():
    assert get_available_scouts(make_campaign(), 1, [1]) == []
    campaign = make_campaign(uses_scouts=True)
    assert [s.id for s in get_available_scouts(campaign, 1, [1, 2])] == [3, 4, 5]


def test_available_action_types():
    campaign = make_campaign()
    assert get_available_action_types(campaign) == ["begin_hunt", "begin_showdown"]
    campaign, _ = apply_action(campaign, begin_hunt(1, "White Lion", "1", [1]), MONSTER_DEFS)
    assert "move_hunt" in get_available_action_types(campaign, hunt_id=1)
    assert get_available_action_types(campaign, hunt_id=5) == []


def test_validate_action_is_a_dry_run():
    campaign = make_campaign()
    result = validate_action(campaign, begin_hunt(1, "White Lion", "1", [1, 2, 3, 4, 5]))
    assert not result.valid
    assert isinstance(result.error, PartySizeError)
    assert validate_action(campaign, begin_hunt(1, "White Lion", "1", [1])).valid
    assert campaign.hunts == []
    assert not validate_action(campaign, draw_ai_card(1)).valid


def test_hunt_board_for_flower_knight():
    campaign, _ = apply_action(make_campaign(), begin_hunt(1, "Flower Knight", "1", [1]), MONSTER_DEFS)
    board = get_hunt_board(campaign, 1)
    assert board["spaces"][6]["label"] == "The Forest Wants What it Wants"
    assert board["spaces"][0]["survivors"]
    assert get_hunt_board(campaign, 2) is None
